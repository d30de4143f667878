from typing import Any

from agenda.appointments.adapters.record_helpers import (
    changes_to_document,
    document_to_appointment,
    fields_to_document,
    format_date,
)
from agenda.domain.identifiers import new_appointment_id
from agenda.domain.models import Appointment, AppointmentFields, AppointmentFilter


class InMemoryAppointmentStore:
    """Process-local appointment store keeping storage documents in a dict."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self.closed: bool = False

    async def open(self) -> None:
        self.closed = False

    async def insert(self, fields: AppointmentFields) -> Appointment:
        appointment_id = new_appointment_id()
        self._documents[appointment_id] = fields_to_document(fields)
        return document_to_appointment(appointment_id, self._documents[appointment_id])

    async def find(self, query: AppointmentFilter) -> list[Appointment]:
        rows = list(self._documents.items())
        if query.date is not None:
            day = format_date(query.date)
            rows = [(i, d) for i, d in rows if d["date"] == day]
        elif query.is_range:
            start = format_date(query.start_date)  # type: ignore[arg-type]
            end = format_date(query.end_date)  # type: ignore[arg-type]
            rows = [(i, d) for i, d in rows if start <= d["date"] <= end]
        ordered = sorted(rows, key=lambda item: (item[1]["date"], item[1]["time"]))
        return [document_to_appointment(i, d) for i, d in ordered]

    async def get(self, appointment_id: str) -> Appointment | None:
        document = self._documents.get(appointment_id)
        if document is None:
            return None
        return document_to_appointment(appointment_id, document)

    async def update(self, appointment_id: str, changes: dict[str, Any]) -> Appointment | None:
        document = self._documents.get(appointment_id)
        if document is None:
            return None
        document.update(changes_to_document(changes))
        return document_to_appointment(appointment_id, document)

    async def delete(self, appointment_id: str) -> bool:
        return self._documents.pop(appointment_id, None) is not None

    async def health_check(self) -> bool:
        return not self.closed

    async def close(self) -> None:
        self.closed = True
