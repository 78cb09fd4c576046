"""Single-lease charge generation for interactive users."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasebill.api.dependencies import parse_billing_period
from leasebill.api.schemas import ChargeResponse, DataResponse
from leasebill.config import Settings, get_settings
from leasebill.models.charge import ChargeType
from leasebill.services import get_async_session
from leasebill.services.auth_service import verify_user_token
from leasebill.services.charge_service import ChargeService
from leasebill.services.errors import ConflictError, NotFoundError
from leasebill.services.lease_service import LeaseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leases", tags=["leases"])


@router.post(
    "/{lease_id}/generate-rent-charge",
    response_model=DataResponse[ChargeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def generate_rent_charge(
    lease_id: int,
    body: Any = Body(default=None),
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    session: AsyncSession = Depends(get_async_session),
) -> DataResponse[ChargeResponse]:
    """Create one lease's rent charge for a month.

    Raises:
        UnauthorizedError: No valid user token
        ValidationError: Bad month/year
        NotFoundError: Lease not in the caller's organization
        ConflictError: Month already billed
    """
    context = verify_user_token(authorization, settings)
    period = parse_billing_period(body)

    lease = await LeaseService(session).get_lease(context.organization_id, lease_id)
    if not lease:
        raise NotFoundError("Lease not found.")

    charge = await ChargeService(session).create_charge_for_period(lease, ChargeType.RENT, period)
    if charge is None:
        raise ConflictError("Rent charge already exists for that month.")

    logger.info(
        "leases.generate_rent_charge: user_id=%d lease_id=%d charge_id=%d",
        context.user_id,
        lease_id,
        charge.id,
    )
    return DataResponse[ChargeResponse](data=ChargeResponse.model_validate(charge))


__all__ = ["router"]
