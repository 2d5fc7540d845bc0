"""Payment authorization collaborator.

The domain layer never talks to a card processor directly.  Workflows call
``PaymentGateway.authorize`` through ``call_with_retry`` and only persist
appointments or subscriptions after an authorization reference comes back.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Protocol

from bloom.services.resilience import simulate_latency

logger = logging.getLogger("bloom.services.payments")


class PaymentGatewayError(Exception):
    """Transient processor failure; safe to retry."""


class PaymentGateway(Protocol):
    async def authorize(
        self, user_id: str, amount: int, currency: str, description: str
    ) -> str:
        """Authorize ``amount`` minor units and return a processor reference."""
        ...


class SimulatedPaymentGateway:
    """Stand-in processor with bounded artificial latency.

    Args:
        latency_ms:   Delay applied to every authorization.
        failure_rate: Probability (0.0–1.0) that an attempt fails transiently.
        cap_ms:       Upper bound on the applied latency.
        rng:          Random source (inject a seeded one for reproducibility).
    """

    def __init__(
        self,
        latency_ms: int = 0,
        failure_rate: float = 0.0,
        cap_ms: int = 5000,
        rng: random.Random | None = None,
    ) -> None:
        self._latency_ms = latency_ms
        self._failure_rate = failure_rate
        self._cap_ms = cap_ms
        self._rng = rng or random.Random()

    async def authorize(
        self, user_id: str, amount: int, currency: str, description: str
    ) -> str:
        await simulate_latency(self._latency_ms, self._cap_ms)
        if self._rng.random() < self._failure_rate:
            raise PaymentGatewayError("Processor temporarily unavailable")
        reference = f"auth_{uuid.uuid4().hex[:16]}"
        logger.info(
            "Authorized %d %s for user %s (%s) → %s",
            amount, currency, user_id, description, reference,
        )
        return reference
