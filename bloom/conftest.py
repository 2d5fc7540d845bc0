"""Shared fixtures: in-memory storage, a fixed catalogue and stub collaborators."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from bloom.catalog import Catalog, load_catalog
from bloom.config import Settings
from bloom.services.container import Services, build_services
from bloom.storage import EntityStore, MemoryBackend

# Catalogue slots are offsets from this instant
ANCHOR = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
TEST_DATE = date(2026, 3, 1)

ALICE = "alice-0001"
BOB = "bob-0002"


class StubPaymentGateway:
    """Authorizes everything unless told to fail; records every call."""

    def __init__(self, fail_times: int = 0, always_fail: bool = False) -> None:
        self.calls: list[tuple[str, int, str]] = []
        self._fail_times = fail_times
        self._always_fail = always_fail

    async def authorize(self, user_id: str, amount: int, currency: str, description: str) -> str:
        self.calls.append((user_id, amount, currency))
        if self._always_fail or self._fail_times > 0:
            self._fail_times -= 1
            raise ConnectionError("processor unavailable")
        return f"auth_test_{len(self.calls)}"


class StubInsightGenerator:
    def __init__(self, text: str = "Stay hydrated and rest well.") -> None:
        self.text = text
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        retry_backoff_seconds=0.0,
        payment_auth_timeout_seconds=1.0,
        payment_auth_max_attempts=3,
        insight_timeout_seconds=1.0,
        insight_max_attempts=2,
        simulated_latency_ms=0,
    )


@pytest.fixture
def catalog() -> Catalog:
    return load_catalog(anchor=ANCHOR)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> EntityStore:
    return EntityStore(backend)


@pytest.fixture
def gateway() -> StubPaymentGateway:
    return StubPaymentGateway()


@pytest.fixture
def generator() -> StubInsightGenerator:
    return StubInsightGenerator()


@pytest.fixture
def services(
    settings: Settings,
    backend: MemoryBackend,
    catalog: Catalog,
    gateway: StubPaymentGateway,
    generator: StubInsightGenerator,
) -> Services:
    return build_services(
        settings,
        backend,
        catalog=catalog,
        payment_gateway=gateway,
        insight_generator=generator,
    )
