"""Plans, subscription changes, payment history and entitlement checks."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.billing import Entitlement, Payment, Plan, SubscribeRequest, Subscription

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/plans", response_model=list[Plan])
async def list_plans(services: AppServices) -> Any:
    return services.subscriptions.list_plans()


@router.get("/subscription", response_model=Subscription | None)
async def get_subscription(user: CurrentUser, services: AppServices) -> Any:
    return await services.subscriptions.get_active(user.user_id)


@router.post("/subscription", response_model=Subscription, status_code=201)
async def subscribe(user: CurrentUser, body: SubscribeRequest, services: AppServices) -> Any:
    return await services.billing.subscribe(user.user_id, body.plan_id)


@router.delete("/subscription", response_model=Subscription | None)
async def cancel_subscription(user: CurrentUser, services: AppServices) -> Any:
    return await services.billing.cancel(user.user_id)


@router.get("/subscriptions", response_model=list[Subscription])
async def subscription_history(user: CurrentUser, services: AppServices) -> Any:
    return await services.subscriptions.list(user.user_id)


@router.get("/payments", response_model=list[Payment])
async def list_payments(user: CurrentUser, services: AppServices) -> Any:
    return await services.payments.list(user.user_id)


@router.get("/entitlements/{feature}", response_model=Entitlement)
async def check_entitlement(feature: str, user: CurrentUser, services: AppServices) -> Any:
    has_access = await services.billing.check_entitlement(user.user_id, feature)
    return Entitlement(feature=feature, has_access=has_access)
