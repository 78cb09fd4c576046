"""Tenant, lease membership and stored payment method ORM models."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasebill.models import Base, BaseModel


class Tenant(Base, BaseModel):
    """Model representing a renter known to an organization."""

    __tablename__ = "tenants"

    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    stripe_customer_id: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Payment processor customer reference",
    )

    # Relationships
    payment_methods: Mapped[list["TenantPaymentMethod"]] = relationship(
        "TenantPaymentMethod",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.full_name!r})>"


class LeaseTenant(Base, BaseModel):
    """Association of a tenant with a lease.

    The primary tenant is tried first when looking for a payment method.
    """

    __tablename__ = "lease_tenants"

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    lease: Mapped["Lease"] = relationship(  # noqa: F821
        "Lease",
        back_populates="tenants",
    )
    tenant: Mapped["Tenant"] = relationship("Tenant")

    __table_args__ = (Index("idx_lease_tenant", "lease_id", "tenant_id", unique=True),)

    def __repr__(self) -> str:
        return (
            f"<LeaseTenant(lease_id={self.lease_id}, tenant_id={self.tenant_id}, "
            f"is_primary={self.is_primary})>"
        )


class TenantPaymentMethod(Base, BaseModel):
    """Payment method a tenant saved for automatic collection."""

    __tablename__ = "tenant_payment_methods"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )

    stripe_payment_method_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    tenant: Mapped["Tenant"] = relationship(
        "Tenant",
        back_populates="payment_methods",
    )

    __table_args__ = (Index("idx_payment_method_tenant_active", "tenant_id", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<TenantPaymentMethod(id={self.id}, tenant_id={self.tenant_id}, "
            f"is_default={self.is_default}, is_active={self.is_active})>"
        )


__all__ = ["Tenant", "LeaseTenant", "TenantPaymentMethod"]
