"""Monthly rent billing run: charge generation and automatic payment dispatch.

The run resolves which organizations are in scope, bills each organization's
ACTIVE leases in fixed-size concurrent batches, and folds the per-lease
outcomes into a RunSummary.

Failure policy:
- Lease lookup and charge creation errors are structural: they abort the run
  and no summary is returned. Charge creation is idempotent, so retrying the
  whole run next cycle is safe.
- Payment method resolution and dispatch errors are recorded against the
  charge and never stop sibling leases, later batches or other organizations.
"""

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leasebill.config import Settings
from leasebill.models.charge import Charge, ChargeType
from leasebill.models.lease import Lease
from leasebill.services.batching import iter_batches
from leasebill.services.charge_service import ChargeService
from leasebill.services.lease_service import LeaseService
from leasebill.services.payment_service import (
    PaymentDispatcher,
    PaymentMethodResolver,
    StoredPaymentMethodResolver,
    StripePaymentDispatcher,
)
from leasebill.services.period_service import BillingPeriod

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


@dataclass(frozen=True)
class SchedulerScope:
    """System-wide run requested by the scheduler: every organization."""


@dataclass(frozen=True)
class OrganizationScope:
    """Run requested by a signed-in user: their organization only."""

    organization_id: int


BillingScope = SchedulerScope | OrganizationScope


class LeaseOutcomeKind(str, Enum):
    """What happened to one lease during a run."""

    SKIPPED = "skipped"
    """Period already billed"""

    CREATED_ONLY = "created_only"
    """Charge created, no stored payment method; left for manual collection"""

    CREATED_AND_PROCESSED = "created_and_processed"
    """Charge created and payment succeeded or is in flight"""

    CREATED_AND_FAILED = "created_and_failed"
    """Charge created but the payment attempt failed"""


@dataclass(frozen=True)
class LeaseOutcome:
    """Tagged result of billing a single lease."""

    kind: LeaseOutcomeKind
    charge_id: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class PaymentErrorEntry:
    """A charge whose automatic payment failed."""

    charge_id: int
    error: str


@dataclass
class RunSummary:
    """Aggregated result of one billing run. Never persisted."""

    created: int = 0
    skipped: int = 0
    payments_processed: int = 0
    payments_failed: int = 0
    payment_errors: list[PaymentErrorEntry] = field(default_factory=list)
    organizations: int = 0

    def record(self, outcome: LeaseOutcome) -> None:
        """Fold one lease outcome into the totals."""
        if outcome.kind is LeaseOutcomeKind.SKIPPED:
            self.skipped += 1
            return

        self.created += 1
        if outcome.kind is LeaseOutcomeKind.CREATED_AND_PROCESSED:
            self.payments_processed += 1
        elif outcome.kind is LeaseOutcomeKind.CREATED_AND_FAILED:
            self.payments_failed += 1
            self.payment_errors.append(
                PaymentErrorEntry(charge_id=outcome.charge_id, error=outcome.error or "")
            )


class MonthlyBillingService:
    """Batch orchestrator for the recurring rent run.

    Each lease is billed in its own database session because concurrent tasks
    must not share an AsyncSession.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        resolver: PaymentMethodResolver,
        dispatcher: PaymentDispatcher,
        batch_size: int = DEFAULT_BATCH_SIZE,
        charge_type: ChargeType = ChargeType.RENT,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.session_factory = session_factory
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.batch_size = batch_size
        self.charge_type = charge_type

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> "MonthlyBillingService":
        """Build the service with stored-method resolution and Stripe dispatch."""
        return cls(
            session_factory=session_factory,
            resolver=StoredPaymentMethodResolver(session_factory),
            dispatcher=StripePaymentDispatcher(
                session_factory,
                api_key=settings.stripe_secret_key,
                currency=settings.stripe_currency,
            ),
            batch_size=settings.billing_batch_size,
        )

    async def run_monthly_billing(self, scope: BillingScope, period: BillingPeriod) -> RunSummary:
        """Generate charges for a period and try to collect them.

        Args:
            scope: Organizations the caller is allowed to bill
            period: Billing month

        Returns:
            RunSummary for the whole run

        Raises:
            Any structural (lease lookup / charge creation) error, unchanged
        """
        organization_ids = await self._resolve_organization_ids(scope)
        logger.info(
            "Billing run started: period=%s scope=%s organizations=%d",
            period,
            type(scope).__name__,
            len(organization_ids),
        )

        summary = RunSummary(organizations=len(organization_ids))
        for organization_id in organization_ids:
            await self._bill_organization(organization_id, period, summary)

        logger.info(
            "Billing run finished: period=%s created=%d skipped=%d processed=%d failed=%d",
            period,
            summary.created,
            summary.skipped,
            summary.payments_processed,
            summary.payments_failed,
        )
        return summary

    async def _resolve_organization_ids(self, scope: BillingScope) -> list[int]:
        if isinstance(scope, OrganizationScope):
            return [scope.organization_id]
        async with self.session_factory() as session:
            return await LeaseService(session).list_organization_ids()

    async def _bill_organization(
        self, organization_id: int, period: BillingPeriod, summary: RunSummary
    ) -> None:
        async with self.session_factory() as session:
            leases = await LeaseService(session).find_active_leases(organization_id)
        logger.info(
            "Billing organization %d: %d active leases", organization_id, len(leases)
        )

        async def bill(lease: Lease) -> LeaseOutcome:
            return await self._bill_lease(lease, period)

        async with aclosing(iter_batches(leases, bill, self.batch_size)) as batches:
            async for results in batches:
                failures = [r for r in results if isinstance(r, BaseException)]
                if failures:
                    for extra in failures[1:]:
                        logger.error(
                            "Additional billing failure in organization %d: %s",
                            organization_id,
                            extra,
                            exc_info=extra,
                        )
                    raise failures[0]
                for outcome in results:
                    summary.record(outcome)

    async def _bill_lease(self, lease: Lease, period: BillingPeriod) -> LeaseOutcome:
        async with self.session_factory() as session:
            charge = await ChargeService(session).create_charge_for_period(
                lease, self.charge_type, period
            )
        if charge is None:
            return LeaseOutcome(LeaseOutcomeKind.SKIPPED)
        return await self._collect_payment(charge)

    async def _collect_payment(self, charge: Charge) -> LeaseOutcome:
        """Best-effort automatic payment for a freshly created charge."""
        try:
            payment_method = await self.resolver.find_best_payment_method(charge.id)
            if payment_method is None:
                logger.info("No payment method for charge %d; manual collection", charge.id)
                return LeaseOutcome(LeaseOutcomeKind.CREATED_ONLY, charge_id=charge.id)

            result = await self.dispatcher.dispatch_payment(
                charge.id, payment_method, charge.amount
            )
        except Exception as e:
            logger.error("Failed to process payment for charge %d: %s", charge.id, e, exc_info=True)
            return LeaseOutcome(
                LeaseOutcomeKind.CREATED_AND_FAILED,
                charge_id=charge.id,
                error=str(e) or "Payment processing failed",
            )

        if result.accepted:
            return LeaseOutcome(LeaseOutcomeKind.CREATED_AND_PROCESSED, charge_id=charge.id)

        logger.warning("Payment for charge %d failed immediately: %s", charge.id, result.status)
        return LeaseOutcome(
            LeaseOutcomeKind.CREATED_AND_FAILED,
            charge_id=charge.id,
            error=f"Payment status: {result.status}",
        )


__all__ = [
    "BillingScope",
    "DEFAULT_BATCH_SIZE",
    "LeaseOutcome",
    "LeaseOutcomeKind",
    "MonthlyBillingService",
    "OrganizationScope",
    "PaymentErrorEntry",
    "RunSummary",
    "SchedulerScope",
]
