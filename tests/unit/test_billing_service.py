"""Tests for the monthly billing orchestrator and its run summary."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from leasebill.config import Settings
from leasebill.models.charge import Charge, ChargeType
from leasebill.models.lease import LeaseStatus
from leasebill.services.billing_service import (
    LeaseOutcome,
    LeaseOutcomeKind,
    MonthlyBillingService,
    OrganizationScope,
    PaymentErrorEntry,
    RunSummary,
    SchedulerScope,
)
from leasebill.services.charge_service import ChargeService
from leasebill.services.payment_service import (
    StoredPaymentMethodResolver,
    StripePaymentDispatcher,
)
from leasebill.services.period_service import BillingPeriod
from tests.helpers import FakeDispatcher, FakeResolver, create_lease, create_organization

PERIOD = BillingPeriod(month=3, year=2024)


class RaisingResolver:
    async def find_best_payment_method(self, charge_id):
        raise RuntimeError("Payment method lookup timed out")


class SilentErrorDispatcher:
    async def dispatch_payment(self, charge_id, payment_method, amount):
        raise RuntimeError()


async def charge_count(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Charge))
        return result.scalar_one()


class TestRunSummary:
    def test_record_folds_every_outcome_kind(self):
        summary = RunSummary()

        summary.record(LeaseOutcome(LeaseOutcomeKind.SKIPPED))
        summary.record(LeaseOutcome(LeaseOutcomeKind.CREATED_ONLY, charge_id=1))
        summary.record(LeaseOutcome(LeaseOutcomeKind.CREATED_AND_PROCESSED, charge_id=2))
        summary.record(
            LeaseOutcome(LeaseOutcomeKind.CREATED_AND_FAILED, charge_id=3, error="Card declined")
        )

        assert summary.created == 3
        assert summary.skipped == 1
        assert summary.payments_processed == 1
        assert summary.payments_failed == 1
        assert summary.payment_errors == [PaymentErrorEntry(charge_id=3, error="Card declined")]

    def test_empty_summary(self):
        summary = RunSummary()

        assert (summary.created, summary.skipped, summary.organizations) == (0, 0, 0)
        assert summary.payment_errors == []


class TestMonthlyBillingService:
    def test_batch_size_must_be_positive(self, session_factory):
        with pytest.raises(ValueError, match="batch_size"):
            MonthlyBillingService(session_factory, FakeResolver(), FakeDispatcher(), batch_size=0)

    def test_from_settings_wires_stored_methods_and_stripe(self, session_factory):
        settings = Settings(stripe_secret_key="sk_test_123", billing_batch_size=4)

        service = MonthlyBillingService.from_settings(session_factory, settings)

        assert isinstance(service.resolver, StoredPaymentMethodResolver)
        assert isinstance(service.dispatcher, StripePaymentDispatcher)
        assert service.dispatcher.api_key == "sk_test_123"
        assert service.batch_size == 4
        assert service.charge_type == ChargeType.RENT

    async def test_no_payment_method_leaves_charge_for_manual_collection(
        self, session_factory, db_session
    ):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        dispatcher = FakeDispatcher()
        service = MonthlyBillingService(session_factory, FakeResolver(None), dispatcher)

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.created == 1
        assert summary.payments_processed == 0
        assert summary.payments_failed == 0
        assert dispatcher.calls == []

    @pytest.mark.parametrize("status", ["succeeded", "requires_action", "processing"])
    async def test_accepted_statuses_count_as_processed(
        self, session_factory, db_session, card, status
    ):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        service = MonthlyBillingService(
            session_factory, FakeResolver(card), FakeDispatcher(status=status)
        )

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.payments_processed == 1
        assert summary.payments_failed == 0

    async def test_other_status_is_a_failure(self, session_factory, db_session, card):
        org = await create_organization(db_session)
        lease = await create_lease(db_session, org)
        service = MonthlyBillingService(
            session_factory, FakeResolver(card), FakeDispatcher(status="failed")
        )

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.created == 1
        assert summary.payments_failed == 1
        assert summary.payment_errors[0].error == "Payment status: failed"
        async with session_factory() as session:
            charge = (await session.execute(select(Charge))).scalar_one()
        assert charge.lease_id == lease.id
        assert summary.payment_errors[0].charge_id == charge.id

    async def test_dispatcher_exception_is_recorded(self, session_factory, db_session, card):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        dispatcher = FakeDispatcher()
        service = MonthlyBillingService(session_factory, FakeResolver(card), dispatcher)
        dispatcher.fail_for.add(1)

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.payments_failed == 1
        assert summary.payment_errors == [PaymentErrorEntry(charge_id=1, error="Card declined")]

    async def test_exception_without_message_gets_generic_error(
        self, session_factory, db_session, card
    ):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        service = MonthlyBillingService(
            session_factory, FakeResolver(card), SilentErrorDispatcher()
        )

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.payment_errors[0].error == "Payment processing failed"

    async def test_resolver_exception_is_recorded(self, session_factory, db_session):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        await create_lease(db_session, org)
        service = MonthlyBillingService(session_factory, RaisingResolver(), FakeDispatcher())

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.created == 2
        assert summary.payments_failed == 2
        assert {e.error for e in summary.payment_errors} == {"Payment method lookup timed out"}

    async def test_only_active_leases_are_billed(self, session_factory, db_session):
        org = await create_organization(db_session)
        await create_lease(db_session, org)
        for status in (LeaseStatus.DRAFT, LeaseStatus.ENDED, LeaseStatus.TERMINATED):
            await create_lease(db_session, org, status=status)
        service = MonthlyBillingService(session_factory, FakeResolver(), FakeDispatcher())

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary.created == 1
        assert await charge_count(session_factory) == 1

    async def test_organization_without_leases(self, session_factory, db_session):
        org = await create_organization(db_session)
        service = MonthlyBillingService(session_factory, FakeResolver(), FakeDispatcher())

        summary = await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert summary == RunSummary(organizations=1)

    async def test_scheduler_scope_with_no_organizations(self, session_factory):
        service = MonthlyBillingService(session_factory, FakeResolver(), FakeDispatcher())

        summary = await service.run_monthly_billing(SchedulerScope(), PERIOD)

        assert summary == RunSummary()

    async def test_structural_failure_aborts_before_next_batch(
        self, session_factory, db_session
    ):
        org = await create_organization(db_session)
        leases = [await create_lease(db_session, org) for _ in range(12)]
        broken_lease_id = leases[2].id
        original = ChargeService.create_charge_for_period

        async def flaky_create(self, lease, charge_type, period):
            if lease.id == broken_lease_id:
                raise RuntimeError("database unavailable")
            return await original(self, lease, charge_type, period)

        service = MonthlyBillingService(
            session_factory, FakeResolver(), FakeDispatcher(), batch_size=10
        )

        with patch.object(ChargeService, "create_charge_for_period", flaky_create):
            with pytest.raises(RuntimeError, match="database unavailable"):
                await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        # Siblings in the failing batch finished; the second batch never started
        assert await charge_count(session_factory) == 9

    async def test_every_structural_failure_in_a_batch_is_logged(
        self, session_factory, db_session, caplog
    ):
        org = await create_organization(db_session)
        leases = [await create_lease(db_session, org) for _ in range(5)]
        errors = {leases[1].id: "first lease broken", leases[3].id: "second lease broken"}
        original = ChargeService.create_charge_for_period

        async def flaky_create(self, lease, charge_type, period):
            if lease.id in errors:
                raise RuntimeError(errors[lease.id])
            return await original(self, lease, charge_type, period)

        service = MonthlyBillingService(session_factory, FakeResolver(), FakeDispatcher())

        with patch.object(ChargeService, "create_charge_for_period", flaky_create):
            with pytest.raises(RuntimeError, match="first lease broken"):
                await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert "Additional billing failure in organization" in caplog.text
        assert "second lease broken" in caplog.text

    async def test_rent_amount_passed_to_dispatcher(self, session_factory, db_session, card):
        org = await create_organization(db_session)
        await create_lease(db_session, org, rent_amount=Decimal("875.25"))
        amounts = []

        class RecordingDispatcher(FakeDispatcher):
            async def dispatch_payment(self, charge_id, payment_method, amount):
                amounts.append((payment_method.payment_method_id, amount))
                return await super().dispatch_payment(charge_id, payment_method, amount)

        service = MonthlyBillingService(session_factory, FakeResolver(card), RecordingDispatcher())

        await service.run_monthly_billing(OrganizationScope(org.id), PERIOD)

        assert amounts == [("pm_card", Decimal("875.25"))]
