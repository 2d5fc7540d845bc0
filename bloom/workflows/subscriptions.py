"""Subscription lifecycle and entitlement checks.

At most one subscription per user is ``active``.  ``subscribe`` performs the
whole "cancel current → create new → record payment → audit" sequence under a
per-user lock inside one store transaction, so two concurrent calls can never
leave two active subscriptions and a failure leaves no partial change.

Paid plans are authorized with the payment gateway before anything is
written; if authorization fails the user keeps their current subscription.
Plan changes take effect immediately with no proration.
"""

from __future__ import annotations

import asyncio
import calendar
import logging
from datetime import datetime

from bloom.errors import PaymentAuthorizationError
from bloom.models.base import utc_now
from bloom.models.billing import Payment, PaymentStatus, Subscription, SubscriptionStatus
from bloom.models.system import AuditAction
from bloom.repositories.billing import PaymentRepository, SubscriptionRepository
from bloom.services.audit import AuditTrail
from bloom.services.payments import PaymentGateway
from bloom.services.resilience import call_with_retry
from bloom.storage import EntityStore

logger = logging.getLogger("bloom.workflows.subscriptions")


def add_months(start: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


class SubscriptionService:
    def __init__(
        self,
        store: EntityStore,
        subscriptions: SubscriptionRepository,
        payments: PaymentRepository,
        audit: AuditTrail,
        gateway: PaymentGateway,
        *,
        period_months: int = 1,
        auth_timeout: float = 10.0,
        auth_attempts: int = 3,
        retry_backoff: float = 0.0,
    ) -> None:
        self._store = store
        self._subscriptions = subscriptions
        self._payments = payments
        self._audit = audit
        self._gateway = gateway
        self._period_months = period_months
        self._auth_timeout = auth_timeout
        self._auth_attempts = auth_attempts
        self._retry_backoff = retry_backoff
        self._user_locks: dict[str, asyncio.Lock] = {}

    def _user_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        return lock

    async def subscribe(self, user_id: str, plan_id: str) -> Subscription:
        """Switch the user to ``plan_id``, cancelling any active subscription."""
        plan = self._subscriptions.get_plan(plan_id)

        async with self._user_lock(user_id):
            reference = None
            if plan.price > 0:
                reference = await call_with_retry(
                    lambda: self._gateway.authorize(
                        user_id, plan.price, plan.currency, f"Subscription to {plan.name}"
                    ),
                    label="Subscription payment",
                    attempts=self._auth_attempts,
                    timeout=self._auth_timeout,
                    backoff=self._retry_backoff,
                    error_cls=PaymentAuthorizationError,
                )

            start = utc_now()
            subscription = Subscription(
                user_id=user_id,
                plan_id=plan.id,
                status=SubscriptionStatus.active,
                start_date=start,
                end_date=add_months(start, self._period_months),
                auto_renew=True,
                price=plan.price,
            )
            payment = Payment(
                user_id=user_id,
                amount=plan.price,
                currency=plan.currency,
                status=PaymentStatus.succeeded,
                description=f"Subscription to {plan.name}",
                reference=reference,
            )

            async with self._store.transaction(
                self._subscriptions.key, self._payments.key, self._audit.key
            ) as tx:
                previous = await self._subscriptions.activate(subscription, tx)
                await self._payments.record(payment, tx)
                replaced = ", ".join(p.plan_id for p in previous) or "none"
                await self._audit.append(
                    AuditAction.CHANGE_SUBSCRIPTION,
                    "Billing",
                    details=f"Subscribed to {plan.name} (replaced: {replaced})",
                    user_id=user_id,
                    tx=tx,
                )

        logger.info("User %s subscribed to %s", user_id, plan.id)
        return subscription

    async def cancel(self, user_id: str) -> Subscription | None:
        """Cancel the active subscription, if any.  Returns the cancelled record."""
        async with self._user_lock(user_id):
            async with self._store.transaction(self._subscriptions.key, self._audit.key) as tx:
                cancelled = await self._subscriptions.cancel_active(user_id, tx)
                if cancelled is not None:
                    await self._audit.append(
                        AuditAction.CHANGE_SUBSCRIPTION,
                        "Billing",
                        details=f"Cancelled subscription to {cancelled.plan_id}",
                        user_id=user_id,
                        tx=tx,
                    )
        return cancelled

    async def check_entitlement(self, user_id: str, feature: str, now: datetime | None = None) -> bool:
        """True iff an active, unexpired subscription's plan lists ``feature``.

        Never raises: unknown plans, lapsed periods and storage problems all
        read as no access.
        """
        try:
            sub = await self._subscriptions.get_active(user_id)
            if sub is None or sub.end_date <= (now or utc_now()):
                return False
            plan = self._subscriptions.get_plan(sub.plan_id)
        except Exception as exc:
            logger.warning("Entitlement check for %s/%s failed closed: %s", user_id, feature, exc)
            return False
        return feature in plan.features
