from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import datetime as dt

    from agenda.domain.models import Appointment


class SchedulingError(Exception):
    """Base exception for all scheduling errors."""


class ValidationError(SchedulingError):
    """Raised when appointment input is missing, null or malformed."""

    def __init__(self, reason: str, fields: list[str] | None = None) -> None:
        self.reason = reason
        self.fields = fields or []
        super().__init__(reason)


class InvalidTimeError(SchedulingError):
    """Raised when the start time falls outside the clinic's operating hours."""

    def __init__(self, time: dt.time, opening_time: dt.time, closing_time: dt.time) -> None:
        self.time = time
        self.opening_time = opening_time
        self.closing_time = closing_time
        super().__init__(
            f"Invalid time {time:%H:%M}: appointments must start between "
            f"{opening_time:%H:%M} and {closing_time:%H:%M}"
        )


class ConflictError(SchedulingError):
    """Raised when a candidate appointment overlaps an existing one on the same date."""

    def __init__(self, conflicts: list[Appointment]) -> None:
        self.conflicts = conflicts
        ids = ", ".join(a.appointment_id for a in conflicts)
        super().__init__(f"Schedule conflict with appointment(s): {ids}")


class NotFoundError(SchedulingError):
    """Raised when an operation targets an appointment that does not exist."""

    def __init__(self, appointment_id: str) -> None:
        self.appointment_id = appointment_id
        super().__init__(f"Appointment not found: {appointment_id}")


class StoreUnavailableError(SchedulingError):
    """Raised when the appointment store fails or is unreachable."""
