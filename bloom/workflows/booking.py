"""Telehealth booking state machine.

States::

    booked ──cancel──▶ cancelled
       └────complete──▶ completed

``cancelled`` and ``completed`` are terminal.  Cancelling an already
cancelled appointment is a no-op (no second audit entry).

Booking:
    1. Provider must exist and the slot must be one it lists.
    2. With double-booking prevention on, the (provider, slot) pair is locked
       for the whole booking and a slot already held by a booked appointment
       is refused with ``SlotUnavailableError`` (and a DENIED audit entry).
    3. Payment for the provider's rate is authorized with bounded retries.
       If authorization never completes nothing is written.
    4. The appointment and its BOOK_APPOINTMENT audit entry commit in one
       store transaction.

Cancelled appointments release their slot for a later booking; the provider
listing itself is never edited.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from bloom.errors import (
    InvalidInputError,
    InvalidTransitionError,
    PaymentAuthorizationError,
    SlotUnavailableError,
)
from bloom.models.base import utc_now
from bloom.models.system import AuditAction, AuditStatus
from bloom.models.telehealth import Appointment, AppointmentStatus, JoinCredential
from bloom.repositories.telehealth import AppointmentRepository
from bloom.services.audit import AuditTrail
from bloom.services.payments import PaymentGateway
from bloom.services.resilience import call_with_retry
from bloom.storage import EntityStore

logger = logging.getLogger("bloom.workflows.booking")


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class BookingService:
    """Book, cancel, complete and join telehealth appointments.

    Args:
        store:                  Entity Store shared with the repositories.
        appointments:           Appointment repository (also the provider directory).
        audit:                  Audit trail.
        payments:               Payment authorization collaborator.
        duration_minutes:       Length of every appointment.
        prevent_double_booking: Refuse a slot already held by a booked appointment.
        auth_timeout:           Per-attempt payment authorization timeout (seconds).
        auth_attempts:          Maximum payment authorization attempts.
        retry_backoff:          Base delay between authorization attempts.
        join_window_minutes:    If set, joining is only allowed from this many
                                minutes before start until the appointment ends.
    """

    def __init__(
        self,
        store: EntityStore,
        appointments: AppointmentRepository,
        audit: AuditTrail,
        payments: PaymentGateway,
        *,
        duration_minutes: int = 30,
        prevent_double_booking: bool = True,
        auth_timeout: float = 10.0,
        auth_attempts: int = 3,
        retry_backoff: float = 0.0,
        join_window_minutes: int | None = None,
    ) -> None:
        self._store = store
        self._appointments = appointments
        self._audit = audit
        self._payments = payments
        self._duration = timedelta(minutes=duration_minutes)
        self._prevent_double_booking = prevent_double_booking
        self._auth_timeout = auth_timeout
        self._auth_attempts = auth_attempts
        self._retry_backoff = retry_backoff
        self._join_window = (
            timedelta(minutes=join_window_minutes) if join_window_minutes is not None else None
        )
        self._slot_locks: dict[tuple[str, datetime], asyncio.Lock] = {}

    def _slot_lock(self, provider_id: str, slot: datetime) -> asyncio.Lock:
        key = (provider_id, slot)
        lock = self._slot_locks.get(key)
        if lock is None:
            lock = self._slot_locks[key] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def book(
        self, user_id: str, provider_id: str, slot: datetime, notes: str | None = None
    ) -> Appointment:
        provider = self._appointments.get_provider(provider_id)
        requested = _as_utc(slot)
        listed = next((s for s in provider.available_slots if _as_utc(s) == requested), None)
        if listed is None:
            raise InvalidInputError(f"Slot {requested.isoformat()} is not offered by {provider.name}")

        async with self._slot_lock(provider.id, listed):
            if self._prevent_double_booking and await self._appointments.holders(provider.id, listed):
                await self._audit.append(
                    AuditAction.BOOK_APPOINTMENT,
                    "Telehealth",
                    status=AuditStatus.DENIED,
                    details=f"Slot {listed.isoformat()} with {provider.name} already booked",
                    user_id=user_id,
                )
                raise SlotUnavailableError(f"Slot {listed.isoformat()} is already booked")

            reference = await call_with_retry(
                lambda: self._payments.authorize(
                    user_id, provider.rate, provider.currency, f"Consultation with {provider.name}"
                ),
                label="Payment authorization",
                attempts=self._auth_attempts,
                timeout=self._auth_timeout,
                backoff=self._retry_backoff,
                error_cls=PaymentAuthorizationError,
            )

            appointment = Appointment(
                user_id=user_id,
                provider_id=provider.id,
                start_time=listed,
                end_time=listed + self._duration,
                fee=provider.rate,
                currency=provider.currency,
                user_notes=notes,
                video_room_id=f"room_{uuid.uuid4()}",
                payment_reference=reference,
            )
            async with self._store.transaction(self._appointments.key, self._audit.key) as tx:
                await self._appointments.add(appointment, tx)
                await self._audit.append(
                    AuditAction.BOOK_APPOINTMENT,
                    "Telehealth",
                    details=f"Booked appt with {provider.name}",
                    user_id=user_id,
                    tx=tx,
                )

        logger.info("Booked appointment %s with %s for user %s", appointment.id, provider.id, user_id)
        return appointment

    async def cancel(self, user_id: str, appointment_id: str) -> Appointment:
        """booked → cancelled.  Cancelling twice returns the cancelled record unchanged."""
        async with self._store.transaction(self._appointments.key, self._audit.key) as tx:
            current = await self._appointments.get(user_id, appointment_id, tx)
            if current.status == AppointmentStatus.cancelled:
                return current
            if current.status != AppointmentStatus.booked:
                raise InvalidTransitionError(
                    f"Cannot cancel an appointment that is {current.status.value}"
                )
            cancelled = await self._appointments.set_status(
                user_id, appointment_id, AppointmentStatus.cancelled, tx
            )
            await self._audit.append(
                AuditAction.CANCEL_APPOINTMENT,
                "Telehealth",
                details=f"Cancelled appointment {appointment_id}",
                user_id=user_id,
                tx=tx,
            )
        logger.info("Cancelled appointment %s for user %s", appointment_id, user_id)
        return cancelled

    async def complete(self, user_id: str, appointment_id: str) -> Appointment:
        """booked → completed."""
        async with self._store.transaction(self._appointments.key) as tx:
            current = await self._appointments.get(user_id, appointment_id, tx)
            if current.status != AppointmentStatus.booked:
                raise InvalidTransitionError(
                    f"Cannot complete an appointment that is {current.status.value}"
                )
            return await self._appointments.set_status(
                user_id, appointment_id, AppointmentStatus.completed, tx
            )

    async def join_call(
        self, user_id: str, appointment_id: str, now: datetime | None = None
    ) -> JoinCredential:
        """Hand back an opaque room credential.  The appointment is not modified."""
        appointment = await self._appointments.get(user_id, appointment_id)
        if appointment.status != AppointmentStatus.booked:
            raise InvalidTransitionError(
                f"Cannot join an appointment that is {appointment.status.value}"
            )
        if self._join_window is not None:
            moment = _as_utc(now or utc_now())
            opens = appointment.start_time - self._join_window
            if not (opens <= moment <= appointment.end_time):
                raise InvalidTransitionError("Appointment is outside its joining window")
        return JoinCredential(
            appointment_id=appointment.id,
            room_id=appointment.video_room_id,
            token=f"{appointment.video_room_id}.{secrets.token_urlsafe(24)}",
        )
