"""Charge creation service with per-period idempotency."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasebill.models.charge import Charge, ChargeStatus, ChargeType
from leasebill.models.lease import Lease
from leasebill.models.property import Unit
from leasebill.services.period_service import BillingPeriod

logger = logging.getLogger(__name__)


class ChargeService:
    """Async service for charge database operations.

    create_charge_for_period is the idempotent entry point used by the billing
    run: for a fixed (lease, type, period) it persists at most one charge, as
    long as it is not called concurrently for the same lease.
    """

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def find_existing_charge(
        self,
        lease_id: int,
        charge_type: ChargeType,
        period_start: date,
        period_end: date,
    ) -> Charge | None:
        """Find a charge of the given type due inside [period_start, period_end).

        Args:
            lease_id: Lease to look at
            charge_type: Charge kind
            period_start: First day of the period (inclusive)
            period_end: First day after the period (exclusive)

        Returns:
            Existing Charge or None
        """
        result = await self.session.execute(
            select(Charge)
            .where(
                (Charge.lease_id == lease_id)
                & (Charge.type == charge_type)
                & (Charge.due_date >= period_start)
                & (Charge.due_date < period_end)
            )
            .limit(1)
        )
        return result.scalars().first()

    async def resolve_property_for_unit(self, unit_id: int) -> int | None:
        """Return the property owning a unit, or None if the unit is gone."""
        result = await self.session.execute(select(Unit.property_id).where(Unit.id == unit_id))
        return result.scalar_one_or_none()

    async def create_charge(
        self,
        *,
        organization_id: int,
        lease_id: int,
        charge_type: ChargeType,
        amount: Decimal,
        due_date: date,
        unit_id: int | None = None,
        property_id: int | None = None,
        description: str | None = None,
    ) -> Charge:
        """Persist a new PENDING charge and commit."""
        charge = Charge(
            organization_id=organization_id,
            lease_id=lease_id,
            unit_id=unit_id,
            property_id=property_id,
            type=charge_type,
            description=description,
            amount=amount,
            due_date=due_date,
            status=ChargeStatus.PENDING,
        )
        self.session.add(charge)
        await self.session.commit()
        return charge

    async def create_charge_for_period(
        self,
        lease: Lease,
        charge_type: ChargeType,
        period: BillingPeriod,
    ) -> Charge | None:
        """Create the lease's charge for a billing period unless one exists.

        Steps:
        1. Compute the due date from the lease's rent_due_day
        2. Look for an existing charge of this type due inside the period
        3. Resolve property_id through the lease's unit (may be absent)
        4. Create the charge with status PENDING

        Args:
            lease: Lease being billed
            charge_type: Charge kind (RENT for the monthly run)
            period: Billing period

        Returns:
            Created Charge, or None if the period was already billed
        """
        due_date = period.due_date(lease.rent_due_day)

        existing = await self.find_existing_charge(lease.id, charge_type, period.start, period.end)
        if existing:
            logger.debug(
                "Charge already exists: lease_id=%d type=%s period=%s charge_id=%d",
                lease.id,
                charge_type.value,
                period,
                existing.id,
            )
            return None

        property_id = None
        if lease.unit_id:
            property_id = await self.resolve_property_for_unit(lease.unit_id)

        charge = await self.create_charge(
            organization_id=lease.organization_id,
            lease_id=lease.id,
            charge_type=charge_type,
            amount=lease.rent_amount,
            due_date=due_date,
            unit_id=lease.unit_id,
            property_id=property_id,
            description=f"{charge_type.value.replace('_', ' ').capitalize()} charge for {period}",
        )

        logger.info(
            "Created charge: id=%d lease_id=%d type=%s amount=%s due_date=%s",
            charge.id,
            lease.id,
            charge_type.value,
            charge.amount,
            due_date,
        )
        return charge


__all__ = ["ChargeService"]
