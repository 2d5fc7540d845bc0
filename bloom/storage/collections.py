"""Stable collection names for every entity family.

Each name carries a schema version suffix.  Bumping ``collection_version``
in settings points every repository at fresh, empty collections; data under
the old names is left in place but no longer read.
"""

from __future__ import annotations

from enum import Enum


class Collection(str, Enum):
    profiles = "profiles"
    privacy = "privacy"
    cycles = "cycle_data"
    symptom_logs = "symptom_logs"
    journal = "journal"
    goals = "goals"
    reminders = "reminders"
    appointments = "appointments"
    integrations = "integrations"
    genomic_uploads = "genomic_uploads"
    content_progress = "content_progress"
    health_reports = "health_reports"
    subscriptions = "subscriptions"
    payments = "payments"
    audit_log = "audit_logs"

    def key(self, version: str) -> str:
        """Return the storage key, e.g. ``bloom_goals_v1``."""
        return f"bloom_{self.value}_{version}"
