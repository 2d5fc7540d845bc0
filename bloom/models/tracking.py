"""Pydantic models for personal tracking: cycle records, symptom logs,
journal entries, goals, reminders and generated health reports."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import Field, model_validator

from bloom.models.base import BloomBase, FreeText, UserScoped, utc_now


# ---------- Enums ----------

class Mood(str, Enum):
    happy = "happy"
    sad = "sad"
    anxious = "anxious"
    energetic = "energetic"
    tired = "tired"
    irritable = "irritable"


class GoalCategory(str, Enum):
    hydration = "hydration"
    activity = "activity"
    sleep = "sleep"
    nutrition = "nutrition"
    mindfulness = "mindfulness"
    other = "other"


class GoalStatus(str, Enum):
    active = "active"
    completed = "completed"
    archived = "archived"


class ReminderFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    specific_days = "specific_days"


class ReportType(str, Enum):
    daily_insight = "daily_insight"
    weekly_summary = "weekly_summary"


# ---------- Cycle ----------

class CycleSettings(BloomBase):
    start_date: date
    cycle_length: int = Field(default=28, ge=15, le=90)
    period_length: int = Field(default=5, ge=1, le=14)

    @model_validator(mode="after")
    def _period_shorter_than_cycle(self) -> "CycleSettings":
        if self.period_length >= self.cycle_length:
            raise ValueError("period_length must be shorter than cycle_length")
        return self


class CycleRecord(UserScoped, CycleSettings):
    pass


# ---------- Symptom Logs ----------

class SymptomLogCreate(BloomBase):
    log_date: date
    symptoms: list[str] = Field(default_factory=list)
    severity: int = Field(ge=1, le=10)
    mood: Mood
    notes: FreeText | None = None


class SymptomLog(UserScoped, SymptomLogCreate):
    created_at: datetime = Field(default_factory=utc_now)


# ---------- Journal ----------

class JournalEntryCreate(BloomBase):
    title: str = Field(min_length=1)
    content: FreeText
    entry_date: datetime = Field(default_factory=utc_now)


class JournalEntry(UserScoped, JournalEntryCreate):
    created_at: datetime = Field(default_factory=utc_now)


# ---------- Goals ----------

class GoalCreate(BloomBase):
    name: str = Field(min_length=1)
    description: str | None = None
    target_value: float = Field(gt=0)
    unit: str
    category: GoalCategory = GoalCategory.other
    start_date: date = Field(default_factory=date.today)
    end_date: date | None = None


class Goal(UserScoped, GoalCreate):
    current_value: float = Field(default=0, ge=0)
    status: GoalStatus = GoalStatus.active

    @property
    def completion_pct(self) -> int:
        """Progress against target; over-completion reads above 100."""
        return round(self.current_value / self.target_value * 100)


# ---------- Reminders ----------

class ReminderCreate(BloomBase):
    name: str = Field(min_length=1)
    dosage: str | None = None
    frequency: ReminderFrequency = ReminderFrequency.daily
    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")  # HH:MM
    is_active: bool = True
    notes: FreeText | None = None


class Reminder(UserScoped, ReminderCreate):
    pass


# ---------- Health Reports ----------

class HealthReport(UserScoped):
    report_date: date = Field(default_factory=date.today)
    content: FreeText  # ciphertext at rest, plaintext once read back
    report_type: ReportType = ReportType.daily_insight
    generated_at: datetime = Field(default_factory=utc_now)


# ---------- Request bodies ----------

class GoalProgressUpdate(BloomBase):
    current_value: float


class GoalStatusUpdate(BloomBase):
    status: GoalStatus
