"""Organization ORM model: the tenant boundary of the platform."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasebill.models import Base, BaseModel


class Organization(Base, BaseModel):
    """Model representing a property-management organization.

    Every lease, tenant, property and charge belongs to exactly one organization.
    The billing run iterates organizations one at a time.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    # Relationships
    properties: Mapped[list["Property"]] = relationship(  # noqa: F821
        "Property",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    leases: Mapped[list["Lease"]] = relationship(  # noqa: F821
        "Lease",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r})>"


__all__ = ["Organization"]
