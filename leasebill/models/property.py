"""Property and Unit ORM models."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasebill.models import Base, BaseModel


class Property(Base, BaseModel):
    """Model representing a building or parcel managed by an organization."""

    __tablename__ = "properties"

    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    address_line1: Mapped[str | None] = mapped_column(
        String(300),
        nullable=True,
        comment="Street address",
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(  # noqa: F821
        "Organization",
        back_populates="properties",
    )
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, organization_id={self.organization_id}, "
            f"name={self.name!r})>"
        )


class Unit(Base, BaseModel):
    """Model representing a rentable unit inside a property.

    A charge created for a lease on this unit inherits the unit's property_id.
    """

    __tablename__ = "units"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Unit label (e.g., 'Apt 2B')",
    )

    # Relationships
    property: Mapped["Property"] = relationship(
        "Property",
        back_populates="units",
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, property_id={self.property_id}, name={self.name!r})>"


__all__ = ["Property", "Unit"]
