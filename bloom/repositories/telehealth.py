"""Provider directory lookups and appointment reads.

State changes to appointments go through ``bloom.workflows.booking``.
"""

from __future__ import annotations

from datetime import datetime

from bloom.catalog import Catalog
from bloom.errors import NotFoundError
from bloom.models.telehealth import Appointment, AppointmentStatus, Provider
from bloom.repositories.base import Repository
from bloom.storage import EntityStore, StoreTransaction


class AppointmentRepository(Repository[Appointment]):
    model = Appointment
    resource = "Appointment"

    def __init__(self, store: EntityStore, key: str, catalog: Catalog) -> None:
        super().__init__(store, key)
        self._catalog = catalog

    def list_providers(self) -> list[Provider]:
        return list(self._catalog.providers)

    def get_provider(self, provider_id: str) -> Provider:
        provider = self._catalog.provider(provider_id)
        if provider is None:
            raise NotFoundError("Provider", provider_id)
        return provider

    async def list(self, user_id: str) -> list[Appointment]:
        return sorted(await self._for_user(user_id), key=lambda a: a.start_time)

    async def get(
        self, user_id: str, appointment_id: str, tx: StoreTransaction | None = None
    ) -> Appointment:
        for appt in await self._all(tx):
            if appt.id == appointment_id and appt.user_id == user_id:
                return appt
        raise NotFoundError(self.resource, appointment_id)

    async def add(self, appointment: Appointment, tx: StoreTransaction | None = None) -> Appointment:
        return await self._insert(appointment, tx)

    async def set_status(
        self,
        user_id: str,
        appointment_id: str,
        status: AppointmentStatus,
        tx: StoreTransaction | None = None,
    ) -> Appointment:
        return await self._replace(
            user_id, appointment_id, lambda a: a.model_copy(update={"status": status}), tx
        )

    async def holders(self, provider_id: str, slot: datetime) -> list[Appointment]:
        """Booked appointments (any user) occupying ``provider_id`` at ``slot``."""
        return [
            a for a in await self._all()
            if a.provider_id == provider_id
            and a.start_time == slot
            and a.status == AppointmentStatus.booked
        ]
