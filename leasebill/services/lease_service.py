"""Read-only lease and organization lookups for the billing run."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasebill.models.lease import Lease, LeaseStatus
from leasebill.models.organization import Organization

logger = logging.getLogger(__name__)


class LeaseService:
    """Async service for lease queries.

    Leases are owned by lease-management workflows; this service never writes them.
    """

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def list_organization_ids(self) -> list[int]:
        """Get ids of every organization, in id order."""
        result = await self.session.execute(select(Organization.id).order_by(Organization.id))
        return list(result.scalars().all())

    async def find_active_leases(self, organization_id: int) -> list[Lease]:
        """Get ACTIVE leases of an organization, in id order.

        Args:
            organization_id: Organization to look in

        Returns:
            List of active Lease objects
        """
        result = await self.session.execute(
            select(Lease)
            .where(
                (Lease.organization_id == organization_id) & (Lease.status == LeaseStatus.ACTIVE)
            )
            .order_by(Lease.id)
        )
        return list(result.scalars().all())

    async def get_lease(self, organization_id: int, lease_id: int) -> Lease | None:
        """Get a lease only if it belongs to the given organization."""
        result = await self.session.execute(
            select(Lease).where(
                (Lease.id == lease_id) & (Lease.organization_id == organization_id)
            )
        )
        return result.scalars().first()


__all__ = ["LeaseService"]
