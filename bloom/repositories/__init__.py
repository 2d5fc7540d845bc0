"""Per-family repositories over the Entity Store."""

from bloom.repositories.billing import PaymentRepository, SubscriptionRepository
from bloom.repositories.content import ContentRepository
from bloom.repositories.cycles import CycleRepository, SymptomLogRepository
from bloom.repositories.goals import GoalRepository, ReminderRepository
from bloom.repositories.integrations import IntegrationRepository
from bloom.repositories.journal import JournalRepository, ReportRepository
from bloom.repositories.profiles import PrivacyRepository, ProfileRepository
from bloom.repositories.telehealth import AppointmentRepository

__all__ = [
    "AppointmentRepository",
    "ContentRepository",
    "CycleRepository",
    "GoalRepository",
    "IntegrationRepository",
    "JournalRepository",
    "PaymentRepository",
    "PrivacyRepository",
    "ProfileRepository",
    "ReminderRepository",
    "ReportRepository",
    "SubscriptionRepository",
    "SymptomLogRepository",
]
