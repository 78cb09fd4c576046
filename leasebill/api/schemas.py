"""Request and response schemas for the billing API."""

from datetime import date
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leasebill.models.charge import ChargeStatus, ChargeType
from leasebill.services.billing_service import RunSummary
from leasebill.services.period_service import MAX_BILLING_YEAR, MIN_BILLING_YEAR, BillingPeriod

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: every 2xx body is {"data": ...}."""

    data: T


class BillingPeriodRequest(BaseModel):
    """Body of billing endpoints. Numeric strings are accepted ("3" -> 3)."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=MIN_BILLING_YEAR, le=MAX_BILLING_YEAR)

    @model_validator(mode="after")
    def check_period(self) -> "BillingPeriodRequest":
        self.to_period()
        return self

    def to_period(self) -> BillingPeriod:
        return BillingPeriod(month=self.month, year=self.year)


class PaymentErrorResponse(BaseModel):
    """A charge whose automatic payment failed."""

    model_config = ConfigDict(populate_by_name=True)

    charge_id: int = Field(alias="chargeId")
    error: str


class MonthlyRentResponse(BaseModel):
    """Run summary of /generate-monthly-rent.

    paymentErrors is omitted when no payment failed.
    """

    model_config = ConfigDict(populate_by_name=True)

    created: int
    skipped: int
    payments_processed: int = Field(alias="paymentsProcessed")
    payments_failed: int = Field(alias="paymentsFailed")
    payment_errors: list[PaymentErrorResponse] | None = Field(
        default=None, alias="paymentErrors"
    )
    organizations: int

    @classmethod
    def from_summary(cls, summary: RunSummary) -> "MonthlyRentResponse":
        return cls(
            created=summary.created,
            skipped=summary.skipped,
            payments_processed=summary.payments_processed,
            payments_failed=summary.payments_failed,
            payment_errors=[
                PaymentErrorResponse(charge_id=entry.charge_id, error=entry.error)
                for entry in summary.payment_errors
            ]
            or None,
            organizations=summary.organizations,
        )


class ChargeResponse(BaseModel):
    """A persisted charge."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    organization_id: int = Field(alias="organizationId")
    lease_id: int = Field(alias="leaseId")
    unit_id: int | None = Field(default=None, alias="unitId")
    property_id: int | None = Field(default=None, alias="propertyId")
    type: ChargeType
    description: str | None = None
    amount: Decimal
    due_date: date = Field(alias="dueDate")
    status: ChargeStatus


__all__ = [
    "BillingPeriodRequest",
    "ChargeResponse",
    "DataResponse",
    "MonthlyRentResponse",
    "PaymentErrorResponse",
]
