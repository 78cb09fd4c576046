"""Test data builders and in-process payment collaborators."""

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from leasebill.models.lease import Lease, LeaseStatus
from leasebill.models.organization import Organization
from leasebill.models.property import Property, Unit
from leasebill.models.tenant import LeaseTenant, Tenant, TenantPaymentMethod
from leasebill.services.payment_service import PaymentMethodRef, PaymentResult


async def create_organization(session: AsyncSession, name: str = "Acme Rentals") -> Organization:
    organization = Organization(name=name)
    session.add(organization)
    await session.commit()
    return organization


async def create_unit(session: AsyncSession, organization: Organization) -> Unit:
    prop = Property(organization_id=organization.id, name="Maple Court", address_line1="1 Maple St")
    session.add(prop)
    await session.flush()
    unit = Unit(property_id=prop.id, name="Apt 1")
    session.add(unit)
    await session.commit()
    return unit


async def create_lease(
    session: AsyncSession,
    organization: Organization,
    *,
    unit: Unit | None = None,
    rent_amount: Decimal = Decimal("1000.00"),
    rent_due_day: int = 1,
    status: LeaseStatus = LeaseStatus.ACTIVE,
) -> Lease:
    lease = Lease(
        organization_id=organization.id,
        unit_id=unit.id if unit else None,
        rent_amount=rent_amount,
        rent_due_day=rent_due_day,
        start_date=date(2024, 1, 1),
        status=status,
    )
    session.add(lease)
    await session.commit()
    return lease


async def add_tenant(
    session: AsyncSession,
    lease: Lease,
    *,
    first_name: str = "Jane",
    is_primary: bool = True,
    payment_method_id: str | None = None,
    is_default: bool = True,
    customer_id: str | None = "cus_test",
) -> Tenant:
    tenant = Tenant(
        organization_id=lease.organization_id,
        first_name=first_name,
        last_name="Doe",
        stripe_customer_id=customer_id,
    )
    session.add(tenant)
    await session.flush()
    session.add(LeaseTenant(lease_id=lease.id, tenant_id=tenant.id, is_primary=is_primary))
    if payment_method_id:
        session.add(
            TenantPaymentMethod(
                tenant_id=tenant.id,
                stripe_payment_method_id=payment_method_id,
                is_default=is_default,
                is_active=True,
            )
        )
    await session.commit()
    return tenant


class FakeDispatcher:
    """In-process payment dispatcher recording calls and peak concurrency."""

    def __init__(self, status: str = "succeeded", delay: float = 0.0):
        self.status = status
        self.delay = delay
        self.statuses: dict[int, str] = {}
        self.fail_for: set[int] = set()
        self.declined_methods: set[str] = set()
        self.calls: list[int] = []
        self.methods: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def dispatch_payment(
        self, charge_id: int, payment_method: PaymentMethodRef, amount: Decimal
    ) -> PaymentResult:
        self.calls.append(charge_id)
        self.methods.append(payment_method.payment_method_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            declined = payment_method.payment_method_id in self.declined_methods
            if charge_id in self.fail_for or declined:
                raise RuntimeError("Card declined")
            return PaymentResult(
                status=self.statuses.get(charge_id, self.status),
                payment_intent_id=f"pi_{charge_id}",
            )
        finally:
            self.in_flight -= 1


class FakeResolver:
    """Resolver returning a fixed method for every charge (or none)."""

    def __init__(self, method: PaymentMethodRef | None = None):
        self.method = method
        self.calls: list[int] = []

    async def find_best_payment_method(self, charge_id: int) -> PaymentMethodRef | None:
        self.calls.append(charge_id)
        return self.method
