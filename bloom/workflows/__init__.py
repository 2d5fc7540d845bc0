"""Business-rule state machines layered on the repositories."""

from bloom.workflows.booking import BookingService
from bloom.workflows.subscriptions import SubscriptionService, add_months

__all__ = ["BookingService", "SubscriptionService", "add_months"]
