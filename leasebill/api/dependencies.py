"""FastAPI dependencies shared by the routers."""

from typing import Any

from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leasebill.api.schemas import BillingPeriodRequest
from leasebill.config import Settings, get_settings
from leasebill.services import get_session_factory
from leasebill.services.billing_service import MonthlyBillingService
from leasebill.services.errors import ValidationError
from leasebill.services.period_service import BillingPeriod


def get_billing_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> MonthlyBillingService:
    """Build the billing orchestrator for a request."""
    return MonthlyBillingService.from_settings(session_factory, settings)


def parse_billing_period(body: Any) -> BillingPeriod:
    """Validate a {month, year} payload.

    Raises:
        ValidationError: Payload missing, non-numeric or out of range
    """
    try:
        request = BillingPeriodRequest.model_validate(body if body is not None else {})
    except PydanticValidationError as e:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "body",
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise ValidationError("Invalid request payload.", details=details) from e
    return request.to_period()


__all__ = ["get_billing_service", "parse_billing_period"]
