"""Pydantic models for plans, subscriptions and the payment ledger."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from bloom.models.base import BloomBase, UserScoped, utc_now


class BillingInterval(str, Enum):
    month = "month"
    year = "year"


class SubscriptionStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"
    past_due = "past_due"
    trialing = "trialing"


class PaymentStatus(str, Enum):
    succeeded = "succeeded"
    failed = "failed"
    pending = "pending"


class Plan(BloomBase):
    id: str
    name: str
    description: str = ""
    price: int = Field(ge=0)  # minor currency units
    currency: str = "USD"
    interval: BillingInterval = BillingInterval.month
    features: list[str] = Field(default_factory=list)
    is_featured: bool = False


class Subscription(UserScoped):
    plan_id: str
    status: SubscriptionStatus = SubscriptionStatus.active
    start_date: datetime
    end_date: datetime
    auto_renew: bool = True
    price: int = 0  # plan price captured when subscribing


class Payment(UserScoped):
    amount: int
    currency: str = "USD"
    status: PaymentStatus
    paid_at: datetime = Field(default_factory=utc_now)
    description: str
    reference: str | None = None


class Entitlement(BloomBase):
    feature: str
    has_access: bool


class SubscribeRequest(BloomBase):
    plan_id: str
