"""Charge ORM model for billed obligations against a lease."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasebill.models import Base, BaseModel


class ChargeType(str, Enum):
    """Kinds of charges that can be billed against a lease."""

    RENT = "RENT"
    """Monthly rent"""

    LATE_FEE = "LATE_FEE"
    """Penalty for late payment"""

    UTILITY = "UTILITY"
    """Utility pass-through"""

    DEPOSIT = "DEPOSIT"
    """Security deposit"""

    OTHER = "OTHER"


class ChargeStatus(str, Enum):
    """Collection status of a charge."""

    PENDING = "PENDING"
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    VOID = "VOID"


class Charge(Base, BaseModel):
    """
    Model representing an amount owed against a lease.

    At most one charge of a given type exists per lease per billing period.
    unit_id and property_id are copied from the lease at creation time so that
    reports do not need to walk the lease.
    """

    __tablename__ = "charges"

    # Foreign keys
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
    )

    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id"),
        nullable=True,
    )

    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"),
        nullable=True,
        index=True,
    )

    # Charge details
    type: Mapped[ChargeType] = mapped_column(
        SQLEnum(ChargeType),
        nullable=False,
        comment="Charge kind: RENT, LATE_FEE, UTILITY, DEPOSIT or OTHER",
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )

    due_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    status: Mapped[ChargeStatus] = mapped_column(
        SQLEnum(ChargeStatus),
        nullable=False,
        default=ChargeStatus.PENDING,
    )

    # Relationships
    lease: Mapped["Lease"] = relationship(  # noqa: F821
        "Lease",
        foreign_keys=[lease_id],
    )

    # Period lookups filter on lease, type and a due_date range
    __table_args__ = (
        Index("idx_charge_lease_type_due", "lease_id", "type", "due_date"),
        Index("idx_charge_org_status", "organization_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Charge(id={self.id}, lease_id={self.lease_id}, type={self.type}, "
            f"amount={self.amount}, due_date={self.due_date}, status={self.status})>"
        )


__all__ = ["Charge", "ChargeStatus", "ChargeType"]
