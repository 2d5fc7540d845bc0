"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Bloom"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Storage ---
    storage_backend: str = "memory"  # memory | file | postgres
    storage_dir: str = ".bloom-data"
    database_url: str | None = None  # asyncpg DSN, required for the postgres backend
    collection_version: str = "v1"  # bump to discard data written under an older schema

    # --- Simulated externals ---
    simulated_latency_ms: int = 0
    max_simulated_latency_ms: int = 5000
    payment_failure_rate: float = 0.0

    # --- Resilience ---
    payment_auth_timeout_seconds: float = 10.0
    payment_auth_max_attempts: int = 3
    insight_timeout_seconds: float = 30.0
    insight_max_attempts: int = 2
    retry_backoff_seconds: float = 0.25

    # --- Telehealth ---
    appointment_duration_minutes: int = 30
    prevent_double_booking: bool = True
    join_window_minutes: int | None = None  # None = joinable at any time

    # --- Billing ---
    subscription_period_months: int = 1

    # --- Insights ---
    insight_endpoint_url: str | None = None
    insight_api_key: str | None = None

    # --- Reference data ---
    catalog_path: str | None = None  # defaults to the bundled catalog.yaml

    # --- Demo ---
    seed_demo_profile: bool = False
    demo_profile_email: str = "demo@bloom.example"

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_prefix="BLOOM_", env_file=".env", env_file_encoding="utf-8"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
