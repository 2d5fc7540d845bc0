"""Daily wellness insight generation.

The text generator is an external collaborator (a hosted language model in
production).  ``InsightService`` owns everything around it: building the
prompt from the user's own data, bounding the call with a timeout and a
finite number of retries, and storing the result encrypted as a
``daily_insight`` health report.  A failed or empty generation stores
nothing.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Protocol

import httpx

from bloom.cycle import snapshot
from bloom.errors import ExternalServiceError, InsightGenerationError
from bloom.models.tracking import CycleRecord, HealthReport, ReportType, SymptomLog
from bloom.models.users import UserProfile
from bloom.repositories.cycles import CycleRepository, SymptomLogRepository
from bloom.repositories.journal import ReportRepository
from bloom.repositories.profiles import ProfileRepository
from bloom.services.resilience import call_with_retry

logger = logging.getLogger("bloom.services.insights")

RECENT_LOG_COUNT = 5
SYSTEM_INSTRUCTION = (
    "You are a private, secure, and empathetic health wellness AI companion. "
    "You prioritize safety and flag unusual health data gently."
)


class InsightGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return generated text for ``prompt`` (may be empty)."""
        ...


class HttpInsightGenerator:
    """POSTs ``{"prompt", "system"}`` to a text-generation endpoint and reads ``text``.

    Args:
        endpoint:    Full URL of the generation endpoint.
        api_key:     Bearer token sent with every request (optional).
        http_client: Optional pre-configured httpx client (for testing).
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._http_client = http_client

    def _build_headers(self) -> dict[str, str]:
        if not self._api_key:
            return {}
        return {"Authorization": f"Bearer {self._api_key}"}

    async def generate(self, prompt: str) -> str:
        body = {"prompt": prompt, "system": SYSTEM_INSTRUCTION}
        headers = self._build_headers()

        if self._http_client:
            response = await self._http_client.post(self._endpoint, json=body, headers=headers)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(self._endpoint, json=body, headers=headers)

        response.raise_for_status()
        return response.json().get("text") or ""


def _age(born: date | None, today: date) -> int | None:
    if born is None:
        return None
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def build_prompt(
    profile: UserProfile,
    cycle: CycleRecord,
    recent_logs: list[SymptomLog],
    today: date | None = None,
) -> str:
    """Prompt for one daily insight.  Only this user's data goes in."""
    today = today or date.today()
    age = _age(profile.date_of_birth, today)
    position = snapshot(cycle, today)
    logs = json.dumps(
        [log.model_dump(mode="json", include={"log_date", "symptoms", "severity", "mood", "notes"})
         for log in recent_logs]
    )
    return f"""
Act as a compassionate, expert female health assistant for a cycle and wellness tracker.

User Profile:
- Name: {profile.first_name}
- Age: {age if age is not None else "Unknown"}

Cycle Context:
- Cycle Length: {cycle.cycle_length} days
- Period Length: {cycle.period_length} days
- Last Period Start: {cycle.start_date.isoformat()}
- Current Cycle Day: {position.cycle_day} ({position.phase.value} phase, approximate)

Recent Symptom Logs (Last few days):
{logs}

Based on this data, provide a personalized, empathetic, and scientifically grounded health insight.

CRITICAL INSTRUCTION FOR DATA ANOMALIES:
- If the user's cycle length is unusual (< 20 days or > 45 days), gently suggest consulting a healthcare provider about irregular cycles, while still offering general wellness advice.
- If the user's age is < 13 or > 100, provide generic, safe wellness advice suitable for all ages and do not make assumptions about fertility.
- If symptom severity is consistently 10/10, advise seeking immediate medical attention in a calm way.

Focus on specific advice regarding nutrition, stress management, or sleep that aligns with the likely cycle phase and reported symptoms.
Keep it concise (under 150 words).

Structure the response clearly. Do not use medical jargon without explanation.
IMPORTANT: This is for informational purposes only, not medical diagnosis.
""".strip()


class InsightService:
    def __init__(
        self,
        profiles: ProfileRepository,
        cycles: CycleRepository,
        symptoms: SymptomLogRepository,
        reports: ReportRepository,
        generator: InsightGenerator | None,
        *,
        timeout: float = 30.0,
        attempts: int = 2,
        retry_backoff: float = 0.0,
    ) -> None:
        self._profiles = profiles
        self._cycles = cycles
        self._symptoms = symptoms
        self._reports = reports
        self._generator = generator
        self._timeout = timeout
        self._attempts = attempts
        self._retry_backoff = retry_backoff

    async def generate_daily_insight(self, user_id: str, today: date | None = None) -> HealthReport:
        """Generate, store and return today's insight (plaintext content).

        Raises:
            NotFoundError:          Unknown user.
            ExternalServiceError:   No generator configured.
            InsightGenerationError: Every attempt failed or the text was empty.
        """
        if self._generator is None:
            raise ExternalServiceError("Insight generator is not configured")

        profile = await self._profiles.get(user_id)
        cycle = await self._cycles.get(user_id, today)
        recent = await self._symptoms.list(user_id, limit=RECENT_LOG_COUNT)
        prompt = build_prompt(profile, cycle, recent, today)

        generator = self._generator
        text = await call_with_retry(
            lambda: generator.generate(prompt),
            label="Insight generation",
            attempts=self._attempts,
            timeout=self._timeout,
            backoff=self._retry_backoff,
            error_cls=InsightGenerationError,
        )
        if not text.strip():
            raise InsightGenerationError("Insight generation returned no text")

        report = await self._reports.save(user_id, text, ReportType.daily_insight)
        logger.info("Stored daily insight %s for user %s", report.id, user_id)
        return report

    async def list_reports(self, user_id: str) -> list[HealthReport]:
        return await self._reports.list(user_id)
