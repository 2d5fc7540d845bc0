"""Tests for subscription changes, the payment ledger and entitlements."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from bloom.conftest import ALICE, BOB, StubPaymentGateway
from bloom.errors import NotFoundError, PaymentAuthorizationError
from bloom.models.billing import PaymentStatus, SubscriptionStatus
from bloom.models.system import AuditAction
from bloom.services.container import Services
from bloom.workflows import SubscriptionService, add_months


def _billing(services: Services, gateway) -> SubscriptionService:
    return SubscriptionService(
        services.store,
        services.subscriptions,
        services.payments,
        services.audit,
        gateway,
        auth_timeout=1.0,
        auth_attempts=2,
    )


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_paid_plan(self, services: Services, gateway: StubPaymentGateway) -> None:
        sub = await services.billing.subscribe(ALICE, "plan_premium")

        assert sub.status == SubscriptionStatus.active
        assert sub.price == 999
        assert sub.auto_renew is True
        assert sub.end_date == add_months(sub.start_date, 1)
        assert gateway.calls == [(ALICE, 999, "USD")]

        payments = await services.payments.list(ALICE)
        assert [(p.amount, p.status) for p in payments] == [(999, PaymentStatus.succeeded)]
        assert payments[0].reference == "auth_test_1"
        assert await services.audit.list(user_id=ALICE, action=AuditAction.CHANGE_SUBSCRIPTION)

    @pytest.mark.asyncio
    async def test_free_plan_skips_authorization(
        self, services: Services, gateway: StubPaymentGateway
    ) -> None:
        await services.billing.subscribe(ALICE, "plan_free")
        assert gateway.calls == []
        assert [p.amount for p in await services.payments.list(ALICE)] == [0]

    @pytest.mark.asyncio
    async def test_switch_cancels_previous(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        await services.billing.subscribe(ALICE, "plan_pro")

        history = await services.subscriptions.list(ALICE)
        active = [s for s in history if s.status == SubscriptionStatus.active]
        assert [s.plan_id for s in active] == ["plan_pro"]
        cancelled = [s for s in history if s.status == SubscriptionStatus.cancelled]
        assert [s.plan_id for s in cancelled] == ["plan_premium"]
        assert cancelled[0].auto_renew is False

    @pytest.mark.asyncio
    async def test_concurrent_subscribes_leave_one_active(self, services: Services) -> None:
        await asyncio.gather(
            services.billing.subscribe(ALICE, "plan_premium"),
            services.billing.subscribe(ALICE, "plan_pro"),
            services.billing.subscribe(ALICE, "plan_free"),
        )
        history = await services.subscriptions.list(ALICE)
        assert len(history) == 3
        assert sum(s.status == SubscriptionStatus.active for s in history) == 1

    @pytest.mark.asyncio
    async def test_unknown_plan_changes_nothing(
        self, services: Services, gateway: StubPaymentGateway
    ) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        with pytest.raises(NotFoundError):
            await services.billing.subscribe(ALICE, "plan_gold")
        assert (await services.subscriptions.get_active(ALICE)).plan_id == "plan_premium"
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_payment_failure_keeps_current_plan(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        failing = _billing(services, StubPaymentGateway(always_fail=True))

        with pytest.raises(PaymentAuthorizationError):
            await failing.subscribe(ALICE, "plan_pro")

        assert (await services.subscriptions.get_active(ALICE)).plan_id == "plan_premium"
        assert len(await services.payments.list(ALICE)) == 1
        entries = await services.audit.list(user_id=ALICE, action=AuditAction.CHANGE_SUBSCRIPTION)
        assert len(entries) == 1

    @pytest.mark.asyncio
    async def test_users_are_independent(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_pro")
        await services.billing.subscribe(BOB, "plan_free")
        assert (await services.subscriptions.get_active(ALICE)).plan_id == "plan_pro"
        assert (await services.subscriptions.get_active(BOB)).plan_id == "plan_free"


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_active(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        cancelled = await services.billing.cancel(ALICE)
        assert cancelled.status == SubscriptionStatus.cancelled
        assert await services.subscriptions.get_active(ALICE) is None

    @pytest.mark.asyncio
    async def test_cancel_without_subscription(self, services: Services) -> None:
        assert await services.billing.cancel(ALICE) is None
        assert await services.audit.list(user_id=ALICE) == []


class TestEntitlement:
    @pytest.mark.asyncio
    async def test_feature_of_active_plan(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        assert await services.billing.check_entitlement(ALICE, "AI Health Insights") is True
        assert await services.billing.check_entitlement(ALICE, "Genomic Integration") is False

    @pytest.mark.asyncio
    async def test_no_subscription(self, services: Services) -> None:
        assert await services.billing.check_entitlement(ALICE, "Cycle Tracking") is False

    @pytest.mark.asyncio
    async def test_cancelled_subscription(self, services: Services) -> None:
        await services.billing.subscribe(ALICE, "plan_premium")
        await services.billing.cancel(ALICE)
        assert await services.billing.check_entitlement(ALICE, "AI Health Insights") is False

    @pytest.mark.asyncio
    async def test_lapsed_period(self, services: Services) -> None:
        sub = await services.billing.subscribe(ALICE, "plan_premium")
        later = sub.end_date + timedelta(seconds=1)
        assert await services.billing.check_entitlement(ALICE, "AI Health Insights", now=later) is False

    @pytest.mark.asyncio
    async def test_plan_removed_from_catalog(self, services: Services) -> None:
        sub = await services.billing.subscribe(ALICE, "plan_premium")
        orphan = sub.model_copy(update={"plan_id": "plan_retired"})
        await services.store.save(services.subscriptions.key, [orphan.model_dump(mode="json")])
        assert await services.billing.check_entitlement(ALICE, "AI Health Insights") is False


class TestAddMonths:
    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (datetime(2026, 1, 31, tzinfo=timezone.utc), 1, datetime(2026, 2, 28, tzinfo=timezone.utc)),
            (datetime(2024, 1, 31, tzinfo=timezone.utc), 1, datetime(2024, 2, 29, tzinfo=timezone.utc)),
            (datetime(2026, 11, 15, tzinfo=timezone.utc), 3, datetime(2027, 2, 15, tzinfo=timezone.utc)),
            (datetime(2026, 3, 10, tzinfo=timezone.utc), 12, datetime(2027, 3, 10, tzinfo=timezone.utc)),
        ],
    )
    def test_clamps_to_month_end(self, start: datetime, months: int, expected: datetime) -> None:
        assert add_months(start, months) == expected
