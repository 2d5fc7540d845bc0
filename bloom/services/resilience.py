"""Bounded retries and simulated latency for calls to external collaborators.

Every external call path ends deterministically: each attempt is capped by
``asyncio.wait_for`` and the number of attempts is finite, so a caller sees
either a result or the configured ``ExternalServiceError`` subclass.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from bloom.errors import ExternalServiceError

logger = logging.getLogger("bloom.services.resilience")

T = TypeVar("T")


async def simulate_latency(ms: int, cap_ms: int = 5000) -> None:
    """Sleep for ``ms`` milliseconds, never longer than ``cap_ms``."""
    delay = max(0, min(ms, cap_ms))
    if delay:
        await asyncio.sleep(delay / 1000)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    label: str,
    attempts: int,
    timeout: float,
    backoff: float = 0.0,
    error_cls: type[ExternalServiceError] = ExternalServiceError,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Await ``fn()`` up to ``attempts`` times, each capped at ``timeout`` seconds.

    Args:
        fn:        Zero-argument coroutine factory (called once per attempt).
        label:     Name used in log lines and the final error message.
        attempts:  Maximum number of attempts (at least one is made).
        timeout:   Per-attempt timeout in seconds.
        backoff:   Base delay between attempts; doubles after each failure.
        error_cls: Raised once every attempt has failed.
        retry_on:  Exception types that count as a failed attempt.  Anything
                   else propagates immediately.

    Returns:
        The first successful result.

    Raises:
        error_cls: When all attempts fail or time out.
    """
    attempts = max(1, attempts)
    last_exc: BaseException | None = None
    delay = backoff

    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.wait_for(fn(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            last_exc = exc
            logger.warning("%s timed out after %.1fs (attempt %d/%d)", label, timeout, attempt, attempts)
        except retry_on as exc:
            last_exc = exc
            logger.warning("%s failed (attempt %d/%d): %s", label, attempt, attempts, exc)

        if attempt < attempts and delay > 0:
            await asyncio.sleep(delay)
            delay *= 2

    logger.error("%s failed after %d attempts", label, attempts)
    raise error_cls(f"{label} failed after {attempts} attempts: {last_exc}") from last_exc
