import asyncio
from typing import Any

from agenda.appointments.adapters.memory import InMemoryAppointmentStore
from agenda.domain.models import Appointment, AppointmentFields, AppointmentFilter


class FakeAppointmentStore(InMemoryAppointmentStore):
    """In-memory test double for the AppointmentStoreProtocol protocol.

    Set ``find_error``, ``insert_error``, etc. to make the corresponding
    method raise on every call. Set ``find_delay`` to suspend inside
    ``find`` so that concurrent callers interleave between the conflict
    read and the write.

    After calls, inspect ``inserted``, ``updated`` and ``deleted`` to verify
    what was passed to the store.
    """

    def __init__(self) -> None:
        super().__init__()
        self.inserted: list[AppointmentFields] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self.deleted: list[str] = []

        self.find_error: Exception | None = None
        self.get_error: Exception | None = None
        self.insert_error: Exception | None = None
        self.update_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.delete_succeeds: bool = True
        self.healthy: bool = True
        self.find_delay: float | None = None

    async def find(self, query: AppointmentFilter) -> list[Appointment]:
        if self.find_error:
            raise self.find_error
        if self.find_delay is not None:
            await asyncio.sleep(self.find_delay)
        return await super().find(query)

    async def get(self, appointment_id: str) -> Appointment | None:
        if self.get_error:
            raise self.get_error
        return await super().get(appointment_id)

    async def insert(self, fields: AppointmentFields) -> Appointment:
        if self.insert_error:
            raise self.insert_error
        self.inserted.append(fields)
        return await super().insert(fields)

    async def update(self, appointment_id: str, changes: dict[str, Any]) -> Appointment | None:
        if self.update_error:
            raise self.update_error
        self.updated.append((appointment_id, changes))
        return await super().update(appointment_id, changes)

    async def delete(self, appointment_id: str) -> bool:
        if self.delete_error:
            raise self.delete_error
        self.deleted.append(appointment_id)
        if not self.delete_succeeds:
            return False
        return await super().delete(appointment_id)

    async def health_check(self) -> bool:
        return self.healthy and await super().health_check()
