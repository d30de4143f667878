import datetime as dt
from collections.abc import Mapping
from typing import Any

from agenda.domain.models import Appointment, AppointmentFields


def format_time(time: dt.time) -> str:
    """Convert ``time(9, 5)`` → ``09:05``, the stored and wire format."""
    return time.strftime("%H:%M")


def parse_time(value: str) -> dt.time:
    """Convert ``"9:05"`` or ``"09:05"`` → ``time(9, 5)``."""
    hour, minute = value.strip().split(":")[:2]
    return dt.time(int(hour), int(minute))


def format_date(date: dt.date) -> str:
    """Convert a date to zero-padded ``YYYY-MM-DD`` so string order matches date order."""
    return date.isoformat()


def fields_to_document(fields: AppointmentFields) -> dict[str, Any]:
    """Shape validated booking fields into a storage document (no id, not completed)."""
    return {
        "date": format_date(fields.date),  # type: ignore[arg-type]
        "time": format_time(fields.time),  # type: ignore[arg-type]
        "duration_minutes": fields.duration_minutes,
        "title": fields.title,
        "client_id": fields.client_id,
        "client_name": fields.client_name,
        "value": fields.value,
        "note": fields.note,
        "completed": False,
    }


def changes_to_document(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Shape a partial update (domain types) into storage types."""
    document = dict(changes)
    if isinstance(document.get("date"), dt.date):
        document["date"] = format_date(document["date"])
    if isinstance(document.get("time"), dt.time):
        document["time"] = format_time(document["time"])
    return document


def document_to_appointment(appointment_id: str, document: Mapping[str, Any]) -> Appointment:
    """Shape a storage document back into the domain model."""
    return Appointment(
        appointment_id=appointment_id,
        date=dt.date.fromisoformat(document["date"]),
        time=parse_time(document["time"]),
        duration_minutes=document.get("duration_minutes") or 60,
        title=document["title"],
        client_id=document["client_id"],
        client_name=document["client_name"],
        value=document["value"],
        note=document.get("note"),
        completed=bool(document.get("completed", False)),
    )
