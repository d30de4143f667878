import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Protocol

from agenda.domain.models import Appointment, AppointmentFields, AppointmentFilter, TimeSlot


class AbstractAppointmentService(ABC):
    """Abstract base class for appointment scheduling operations."""

    @abstractmethod
    async def list_appointments(
        self,
        date: dt.date | None = None,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> list[Appointment]:
        """List appointments on one date or in an inclusive date range.

        Args:
            date: Exact date to list. Takes precedence over the range.
            start_date: First date of the range (inclusive).
            end_date: Last date of the range (inclusive).

        Returns:
            Appointments sorted by date then start time. All appointments
            when neither ``date`` nor both range bounds are given.
        """

    @abstractmethod
    async def get(self, appointment_id: str) -> Appointment:
        """Fetch a single appointment.

        Raises:
            ValidationError: If the id is malformed.
            NotFoundError: If no appointment has this id.
        """

    @abstractmethod
    async def create(self, fields: AppointmentFields) -> Appointment:
        """Book a new appointment.

        Args:
            fields: The appointment details. ``duration_minutes`` defaults to 60.

        Returns:
            The stored appointment with its assigned ID and ``completed=False``.

        Raises:
            ValidationError: If a required field is missing or invalid.
            InvalidTimeError: If the start time is outside operating hours.
            ConflictError: If the interval overlaps another appointment that day.
            StoreUnavailableError: If the store fails.
        """

    @abstractmethod
    async def update(self, appointment_id: str, fields: AppointmentFields) -> Appointment:
        """Apply the explicitly set ``fields`` to an existing appointment.

        The appointment never conflicts with its own previous interval and
        its completion state is left unchanged.

        Raises:
            ValidationError: If the id is malformed or the merged record is invalid.
            NotFoundError: If no appointment has this id.
            InvalidTimeError: If the start time is outside operating hours.
            ConflictError: If the new interval overlaps another appointment.
            StoreUnavailableError: If the store fails.
        """

    @abstractmethod
    async def mark_complete(self, appointment_id: str) -> Appointment:
        """Mark an appointment as completed. Completing twice is not an error.

        Raises:
            ValidationError: If the id is malformed.
            NotFoundError: If no appointment has this id.
        """

    @abstractmethod
    async def remove(self, appointment_id: str) -> Appointment:
        """Delete an appointment and return the deleted record.

        Raises:
            ValidationError: If the id is malformed.
            NotFoundError: If no appointment has this id.
        """

    @abstractmethod
    async def time_slots(
        self,
        date: dt.date,
        duration_minutes: int | None = None,
        exclude_id: str | None = None,
    ) -> list[TimeSlot]:
        """Compute bookable slots for ``date``.

        Args:
            date: Day to evaluate.
            duration_minutes: Length of the appointment being scheduled.
                Defaults to the clinic's default duration.
            exclude_id: Appointment being edited, treated as free.

        Returns:
            One slot per grid step from opening to closing time, in order.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if the store is healthy, False otherwise.
        """

    @abstractmethod
    async def open(self) -> None:
        """Acquire resources held by this service."""

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by this service."""


class AppointmentStoreProtocol(Protocol):
    """Low-level interface for appointment persistence."""

    async def open(self) -> None:
        """Prepare the store for use."""
        ...

    async def insert(self, fields: AppointmentFields) -> Appointment:
        """Persist a new appointment with ``completed=False`` and a fresh id."""
        ...

    async def find(self, query: AppointmentFilter) -> list[Appointment]:
        """Return matching appointments sorted by date then time."""
        ...

    async def get(self, appointment_id: str) -> Appointment | None:
        """Return the appointment, or None if absent."""
        ...

    async def update(self, appointment_id: str, changes: dict[str, Any]) -> Appointment | None:
        """Set ``changes`` on the appointment and return it, or None if absent."""
        ...

    async def delete(self, appointment_id: str) -> bool:
        """Delete the appointment. Returns False if nothing was deleted."""
        ...

    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...
