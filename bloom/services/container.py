"""Wire the Entity Store, repositories and workflows from ``Settings``.

``build_services`` is the single construction point used by the FastAPI
lifespan and by tests.  Collaborators (storage backend, catalogue, payment
gateway, insight generator) can be injected; otherwise they are built from
configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from bloom.catalog import Catalog, get_catalog, load_catalog
from bloom.config import Settings
from bloom.repositories import (
    AppointmentRepository,
    ContentRepository,
    CycleRepository,
    GoalRepository,
    IntegrationRepository,
    JournalRepository,
    PaymentRepository,
    PrivacyRepository,
    ProfileRepository,
    ReminderRepository,
    ReportRepository,
    SubscriptionRepository,
    SymptomLogRepository,
)
from bloom.services.audit import AuditTrail
from bloom.services.auth import AuthService, OpaqueTokenIssuer, TokenIssuer
from bloom.services.cipher import Cipher, PlaceholderCipher
from bloom.services.insights import HttpInsightGenerator, InsightGenerator, InsightService
from bloom.services.payments import PaymentGateway, SimulatedPaymentGateway
from bloom.storage import (
    Collection,
    EntityStore,
    FileBackend,
    MemoryBackend,
    PostgresBackend,
    StorageBackend,
)
from bloom.workflows import BookingService, SubscriptionService

logger = logging.getLogger("bloom.services.container")


@dataclass
class Services:
    settings: Settings
    store: EntityStore
    catalog: Catalog
    cipher: Cipher
    audit: AuditTrail
    profiles: ProfileRepository
    privacy: PrivacyRepository
    cycles: CycleRepository
    symptoms: SymptomLogRepository
    journal: JournalRepository
    reports: ReportRepository
    goals: GoalRepository
    reminders: ReminderRepository
    appointments: AppointmentRepository
    integrations: IntegrationRepository
    content: ContentRepository
    subscriptions: SubscriptionRepository
    payments: PaymentRepository
    auth: AuthService
    booking: BookingService
    billing: SubscriptionService
    insights: InsightService

    async def close(self) -> None:
        await self.store.close()


async def create_backend(settings: Settings) -> StorageBackend:
    """Backend named by ``settings.storage_backend``."""
    kind = settings.storage_backend.lower()
    if kind == "memory":
        return MemoryBackend()
    if kind == "file":
        return FileBackend(settings.storage_dir)
    if kind == "postgres":
        if not settings.database_url:
            raise ValueError("BLOOM_DATABASE_URL is required for the postgres storage backend")
        return await PostgresBackend.connect(settings.database_url)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")


def build_services(
    settings: Settings,
    backend: StorageBackend | None = None,
    *,
    catalog: Catalog | None = None,
    payment_gateway: PaymentGateway | None = None,
    insight_generator: InsightGenerator | None = None,
    token_issuer: TokenIssuer | None = None,
    cipher: Cipher | None = None,
) -> Services:
    store = EntityStore(backend or MemoryBackend())
    if catalog is None:
        catalog = load_catalog(Path(settings.catalog_path)) if settings.catalog_path else get_catalog()
    cipher = cipher or PlaceholderCipher()
    version = settings.collection_version

    def key(collection: Collection) -> str:
        return collection.key(version)

    if payment_gateway is None:
        payment_gateway = SimulatedPaymentGateway(
            latency_ms=settings.simulated_latency_ms,
            failure_rate=settings.payment_failure_rate,
            cap_ms=settings.max_simulated_latency_ms,
        )
    if insight_generator is None and settings.insight_endpoint_url:
        insight_generator = HttpInsightGenerator(
            settings.insight_endpoint_url, settings.insight_api_key or ""
        )

    audit = AuditTrail(store, key(Collection.audit_log))
    profiles = ProfileRepository(store, key(Collection.profiles))
    cycles = CycleRepository(store, key(Collection.cycles))
    symptoms = SymptomLogRepository(store, key(Collection.symptom_logs))
    reports = ReportRepository(store, key(Collection.health_reports), cipher)
    appointments = AppointmentRepository(store, key(Collection.appointments), catalog)
    subscriptions = SubscriptionRepository(store, key(Collection.subscriptions), catalog)
    payments = PaymentRepository(store, key(Collection.payments))
    latency = min(settings.simulated_latency_ms, settings.max_simulated_latency_ms)

    services = Services(
        settings=settings,
        store=store,
        catalog=catalog,
        cipher=cipher,
        audit=audit,
        profiles=profiles,
        privacy=PrivacyRepository(store, key(Collection.privacy), audit),
        cycles=cycles,
        symptoms=symptoms,
        journal=JournalRepository(store, key(Collection.journal), cipher),
        reports=reports,
        goals=GoalRepository(store, key(Collection.goals)),
        reminders=ReminderRepository(store, key(Collection.reminders)),
        appointments=appointments,
        integrations=IntegrationRepository(
            store,
            key(Collection.integrations),
            key(Collection.genomic_uploads),
            audit,
            latency_ms=latency,
        ),
        content=ContentRepository(store, key(Collection.content_progress), catalog),
        subscriptions=subscriptions,
        payments=payments,
        auth=AuthService(profiles, token_issuer or OpaqueTokenIssuer()),
        booking=BookingService(
            store,
            appointments,
            audit,
            payment_gateway,
            duration_minutes=settings.appointment_duration_minutes,
            prevent_double_booking=settings.prevent_double_booking,
            auth_timeout=settings.payment_auth_timeout_seconds,
            auth_attempts=settings.payment_auth_max_attempts,
            retry_backoff=settings.retry_backoff_seconds,
            join_window_minutes=settings.join_window_minutes,
        ),
        billing=SubscriptionService(
            store,
            subscriptions,
            payments,
            audit,
            payment_gateway,
            period_months=settings.subscription_period_months,
            auth_timeout=settings.payment_auth_timeout_seconds,
            auth_attempts=settings.payment_auth_max_attempts,
            retry_backoff=settings.retry_backoff_seconds,
        ),
        insights=InsightService(
            profiles,
            cycles,
            symptoms,
            reports,
            insight_generator,
            timeout=settings.insight_timeout_seconds,
            attempts=settings.insight_max_attempts,
            retry_backoff=settings.retry_backoff_seconds,
        ),
    )
    logger.info(
        "Services ready (backend=%s, collections=%s)",
        type(store.backend).__name__, version,
    )
    return services
