"""Automatic payment collaborators: payment method resolution and dispatch.

The billing run only depends on the two protocols below. The default
implementations look up stored tenant payment methods in the database and
create off-session Stripe PaymentIntents.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Protocol

import stripe
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from leasebill.models.charge import Charge
from leasebill.models.lease import Lease
from leasebill.models.tenant import LeaseTenant, Tenant, TenantPaymentMethod
from leasebill.services.errors import ConfigError, PaymentDispatchError

logger = logging.getLogger(__name__)


class PaymentStatus(str, Enum):
    """Payment attempt statuses reported by the provider."""

    SUCCEEDED = "succeeded"
    REQUIRES_ACTION = "requires_action"
    PROCESSING = "processing"
    FAILED = "failed"
    CANCELED = "canceled"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"


# Statuses counted as processed; in-flight ones settle through the provider's webhooks
ACCEPTED_STATUSES = frozenset(
    {PaymentStatus.SUCCEEDED, PaymentStatus.REQUIRES_ACTION, PaymentStatus.PROCESSING}
)


@dataclass(frozen=True)
class PaymentMethodRef:
    """Stored payment method selected for a charge."""

    payment_method_id: str
    tenant_id: int
    tenant_name: str


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a dispatched payment attempt."""

    status: str
    payment_intent_id: str | None = None
    client_secret: str | None = None

    @property
    def accepted(self) -> bool:
        """True for terminal success and in-flight statuses."""
        return self.status in {s.value for s in ACCEPTED_STATUSES}


class PaymentMethodResolver(Protocol):
    async def find_best_payment_method(self, charge_id: int) -> PaymentMethodRef | None: ...


class PaymentDispatcher(Protocol):
    async def dispatch_payment(
        self,
        charge_id: int,
        payment_method: PaymentMethodRef,
        amount: Decimal,
    ) -> PaymentResult: ...


async def _load_charge_with_tenants(session: AsyncSession, charge_id: int) -> Charge | None:
    result = await session.execute(
        select(Charge)
        .where(Charge.id == charge_id)
        .options(
            selectinload(Charge.lease)
            .selectinload(Lease.tenants)
            .selectinload(LeaseTenant.tenant)
        )
    )
    return result.scalars().first()


class StoredPaymentMethodResolver:
    """Resolve a charge's payment method from tenants' saved methods.

    Lease tenants are tried primary first. For each tenant the newest active
    default method wins, otherwise the newest active method of any kind.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_best_payment_method(self, charge_id: int) -> PaymentMethodRef | None:
        async with self.session_factory() as session:
            charge = await _load_charge_with_tenants(session, charge_id)
            if not charge or not charge.lease:
                return None

            lease_tenants = sorted(charge.lease.tenants, key=lambda lt: not lt.is_primary)
            for lease_tenant in lease_tenants:
                tenant = lease_tenant.tenant
                if tenant is None:
                    continue

                method = await self._newest_active_method(session, tenant.id, default_only=True)
                if method is None:
                    method = await self._newest_active_method(session, tenant.id)
                if method is not None:
                    return PaymentMethodRef(
                        payment_method_id=method.stripe_payment_method_id,
                        tenant_id=tenant.id,
                        tenant_name=tenant.full_name,
                    )

        return None

    @staticmethod
    async def _newest_active_method(
        session: AsyncSession, tenant_id: int, default_only: bool = False
    ) -> TenantPaymentMethod | None:
        stmt = select(TenantPaymentMethod).where(
            (TenantPaymentMethod.tenant_id == tenant_id) & (TenantPaymentMethod.is_active == True)  # noqa: E712
        )
        if default_only:
            stmt = stmt.where(TenantPaymentMethod.is_default == True)  # noqa: E712
        stmt = stmt.order_by(TenantPaymentMethod.created_at.desc(), TenantPaymentMethod.id.desc())
        result = await session.execute(stmt.limit(1))
        return result.scalars().first()


def to_minor_units(amount: Decimal) -> int:
    """Convert a currency amount to cents."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripePaymentDispatcher:
    """Charge a stored payment method through a Stripe PaymentIntent.

    The intent is confirmed immediately and off-session, as for any recurring
    payment. The Stripe SDK is blocking, so the API call runs in a worker thread.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        api_key: str | None,
        currency: str = "usd",
    ):
        self.session_factory = session_factory
        self.api_key = api_key
        self.currency = currency

    async def dispatch_payment(
        self,
        charge_id: int,
        payment_method: PaymentMethodRef,
        amount: Decimal,
    ) -> PaymentResult:
        if not self.api_key:
            raise ConfigError("Stripe is not configured")

        async with self.session_factory() as session:
            charge = await _load_charge_with_tenants(session, charge_id)
            if not charge or not charge.lease:
                raise PaymentDispatchError("Charge or lease not found")

            result = await session.execute(
                select(TenantPaymentMethod)
                .where(
                    TenantPaymentMethod.stripe_payment_method_id
                    == payment_method.payment_method_id
                )
                .options(selectinload(TenantPaymentMethod.tenant))
            )
            stored_method = result.scalars().first()
            if not stored_method or not stored_method.is_active:
                raise PaymentDispatchError("Payment method not found or inactive")

            if not any(lt.tenant_id == stored_method.tenant_id for lt in charge.lease.tenants):
                raise PaymentDispatchError(
                    "Payment method does not belong to a tenant on this lease"
                )

            tenant: Tenant = stored_method.tenant
            if not tenant.stripe_customer_id:
                raise PaymentDispatchError("Tenant does not have a Stripe customer")

            params = {
                "amount": to_minor_units(amount),
                "currency": self.currency,
                "customer": tenant.stripe_customer_id,
                "payment_method": payment_method.payment_method_id,
                "confirm": True,
                "off_session": True,
                "metadata": {
                    "chargeId": str(charge.id),
                    "leaseId": str(charge.lease_id),
                    "tenantId": str(tenant.id),
                    "organizationId": str(charge.organization_id),
                },
            }

        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create, api_key=self.api_key, **params
            )
        except stripe.StripeError as e:
            raise PaymentDispatchError(e.user_message or str(e)) from e

        logger.info(
            "Payment intent created: charge_id=%d intent=%s status=%s",
            charge_id,
            intent["id"],
            intent["status"],
        )
        return PaymentResult(
            status=intent["status"],
            payment_intent_id=intent["id"],
            client_secret=intent.get("client_secret"),
        )


__all__ = [
    "ACCEPTED_STATUSES",
    "PaymentDispatcher",
    "PaymentMethodRef",
    "PaymentMethodResolver",
    "PaymentResult",
    "PaymentStatus",
    "StoredPaymentMethodResolver",
    "StripePaymentDispatcher",
    "to_minor_units",
]
