"""Lease ORM model."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasebill.models import Base, BaseModel


class LeaseStatus(str, Enum):
    """Lifecycle status of a lease. Only ACTIVE leases are billed."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"
    TERMINATED = "TERMINATED"


class Lease(Base, BaseModel):
    """Model representing a rental agreement.

    Leases are created and terminated by lease-management workflows; the billing
    engine only reads them.
    """

    __tablename__ = "leases"

    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )

    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id"),
        nullable=True,
        index=True,
        comment="Leased unit (optional)",
    )

    rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Monthly rent",
    )

    rent_due_day: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Preferred day of month the rent is due (1-31)",
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    status: Mapped[LeaseStatus] = mapped_column(
        SQLEnum(LeaseStatus),
        nullable=False,
        default=LeaseStatus.DRAFT,
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(  # noqa: F821
        "Organization",
        back_populates="leases",
    )
    unit: Mapped["Unit | None"] = relationship(  # noqa: F821
        "Unit",
        foreign_keys=[unit_id],
    )
    tenants: Mapped[list["LeaseTenant"]] = relationship(  # noqa: F821
        "LeaseTenant",
        back_populates="lease",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_lease_org_status", "organization_id", "status"),)

    def __repr__(self) -> str:
        return (
            f"<Lease(id={self.id}, organization_id={self.organization_id}, "
            f"unit_id={self.unit_id}, rent_amount={self.rent_amount}, "
            f"rent_due_day={self.rent_due_day}, status={self.status})>"
        )


__all__ = ["Lease", "LeaseStatus"]
