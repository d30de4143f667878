"""Half-open interval overlap detection between appointments on one date.

Each booking occupies ``[start, start + duration)``. Two bookings conflict
when ``S < E_A and S_A < E``; touching at a boundary is not a conflict, so
back-to-back appointments are allowed.
"""

from collections.abc import Iterable

from agenda.domain.models import Appointment, ScheduleCandidate


def intervals_overlap(
    candidate: ScheduleCandidate | Appointment, other: ScheduleCandidate | Appointment
) -> bool:
    return candidate.start < other.end and other.start < candidate.end


def find_conflicts(
    candidate: ScheduleCandidate,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
) -> list[Appointment]:
    """Return the appointments whose intervals overlap ``candidate``.

    Args:
        candidate: The proposed date, start time and duration.
        existing: Appointments to test against. Entries on other dates are ignored.
        exclude_id: Appointment to leave out, used when an appointment is
            being updated so it does not conflict with its own prior interval.

    Returns:
        Overlapping appointments in the order given. Empty list if none.
    """
    return [
        appointment
        for appointment in existing
        if appointment.appointment_id != exclude_id
        and appointment.date == candidate.date
        and intervals_overlap(candidate, appointment)
    ]


def check_conflict(
    candidate: ScheduleCandidate,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
) -> bool:
    """True if ``candidate`` overlaps any appointment in ``existing``."""
    return bool(find_conflicts(candidate, existing, exclude_id))
