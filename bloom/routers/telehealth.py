"""Provider directory and appointment endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.telehealth import Appointment, BookingRequest, JoinCredential, Provider

router = APIRouter(prefix="/telehealth", tags=["telehealth"])


# ---------- Providers ----------

@router.get("/providers", response_model=list[Provider])
async def list_providers(services: AppServices) -> Any:
    return services.appointments.list_providers()


@router.get("/providers/{provider_id}", response_model=Provider)
async def get_provider(provider_id: str, services: AppServices) -> Any:
    return services.appointments.get_provider(provider_id)


# ---------- Appointments ----------

@router.get("/appointments", response_model=list[Appointment])
async def list_appointments(user: CurrentUser, services: AppServices) -> Any:
    return await services.appointments.list(user.user_id)


@router.post("/appointments", response_model=Appointment, status_code=201)
async def book_appointment(user: CurrentUser, body: BookingRequest, services: AppServices) -> Any:
    return await services.booking.book(user.user_id, body.provider_id, body.slot, body.notes)


@router.post("/appointments/{appointment_id}/cancel", response_model=Appointment)
async def cancel_appointment(appointment_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.booking.cancel(user.user_id, appointment_id)


@router.post("/appointments/{appointment_id}/complete", response_model=Appointment)
async def complete_appointment(appointment_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.booking.complete(user.user_id, appointment_id)


@router.post("/appointments/{appointment_id}/join", response_model=JoinCredential)
async def join_appointment(appointment_id: str, user: CurrentUser, services: AppServices) -> Any:
    return await services.booking.join_call(user.user_id, appointment_id)
