"""Plans, subscriptions and the payment ledger (reads).

Subscription changes go through ``bloom.workflows.subscriptions``.
"""

from __future__ import annotations

from bloom.catalog import Catalog
from bloom.errors import NotFoundError
from bloom.models.billing import Payment, Plan, Subscription, SubscriptionStatus
from bloom.repositories.base import Repository
from bloom.storage import EntityStore, StoreTransaction


class SubscriptionRepository(Repository[Subscription]):
    model = Subscription
    resource = "Subscription"

    def __init__(self, store: EntityStore, key: str, catalog: Catalog) -> None:
        super().__init__(store, key)
        self._catalog = catalog

    def list_plans(self) -> list[Plan]:
        return list(self._catalog.plans)

    def get_plan(self, plan_id: str) -> Plan:
        plan = self._catalog.plan(plan_id)
        if plan is None:
            raise NotFoundError("Plan", plan_id)
        return plan

    async def get_active(self, user_id: str) -> Subscription | None:
        for sub in await self._for_user(user_id):
            if sub.status == SubscriptionStatus.active:
                return sub
        return None

    async def list(self, user_id: str) -> list[Subscription]:
        return sorted(await self._for_user(user_id), key=lambda s: s.start_date, reverse=True)

    async def activate(self, subscription: Subscription, tx: StoreTransaction) -> list[Subscription]:
        """Cancel every active subscription of the user and append ``subscription``.

        Returns the subscriptions that were cancelled.
        """
        cancelled: list[Subscription] = []

        def _apply(rows: list[Subscription]) -> list[Subscription]:
            out = []
            for row in rows:
                if row.user_id == subscription.user_id and row.status == SubscriptionStatus.active:
                    row = row.model_copy(update={"status": SubscriptionStatus.cancelled, "auto_renew": False})
                    cancelled.append(row)
                out.append(row)
            return out + [subscription]

        await self._mutate(_apply, tx)
        return cancelled

    async def cancel_active(self, user_id: str, tx: StoreTransaction) -> Subscription | None:
        cancelled: list[Subscription] = []

        def _apply(rows: list[Subscription]) -> list[Subscription]:
            out = []
            for row in rows:
                if row.user_id == user_id and row.status == SubscriptionStatus.active:
                    row = row.model_copy(update={"status": SubscriptionStatus.cancelled, "auto_renew": False})
                    cancelled.append(row)
                out.append(row)
            return out

        await self._mutate(_apply, tx)
        return cancelled[0] if cancelled else None


class PaymentRepository(Repository[Payment]):
    """Append-only payment ledger."""

    model = Payment
    resource = "Payment"

    async def list(self, user_id: str) -> list[Payment]:
        return sorted(await self._for_user(user_id), key=lambda p: p.paid_at, reverse=True)

    async def record(self, payment: Payment, tx: StoreTransaction | None = None) -> Payment:
        return await self._insert(payment, tx)
