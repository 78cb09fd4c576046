"""Billing run endpoint, reachable by the scheduler or by a signed-in user."""

import logging
import time
from typing import Any

from fastapi import APIRouter, Body, Depends, Header

from leasebill.api.dependencies import get_billing_service, parse_billing_period
from leasebill.api.schemas import DataResponse, MonthlyRentResponse
from leasebill.config import Settings, get_settings
from leasebill.services.auth_service import resolve_billing_scope
from leasebill.services.billing_service import MonthlyBillingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.post(
    "/generate-monthly-rent",
    response_model=DataResponse[MonthlyRentResponse],
    response_model_exclude_none=True,
)
async def generate_monthly_rent(
    body: Any = Body(default=None),
    x_scheduler_secret: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    billing_service: MonthlyBillingService = Depends(get_billing_service),
) -> DataResponse[MonthlyRentResponse]:
    """Generate rent charges for a month and attempt automatic payment.

    Authorization is checked before the payload is validated, so an anonymous
    caller always gets 401.

    Returns:
        {"data": run summary}; paymentErrors lists charges that need manual follow-up
    """
    scope = resolve_billing_scope(x_scheduler_secret, authorization, settings)
    period = parse_billing_period(body)

    start_time = time.time()
    summary = await billing_service.run_monthly_billing(scope, period)
    logger.info(
        "billing.generate_monthly_rent: period=%s scope=%s created=%d failed=%d duration_ms=%d",
        period,
        type(scope).__name__,
        summary.created,
        summary.payments_failed,
        int((time.time() - start_time) * 1000),
    )
    return DataResponse[MonthlyRentResponse](data=MonthlyRentResponse.from_summary(summary))


__all__ = ["router"]
