import datetime as dt
from collections.abc import Iterator, Sequence

from agenda.domain.models import Appointment, ClinicHours, ScheduleCandidate, TimeSlot
from agenda.scheduling.overlap import check_conflict
from agenda.scheduling.rules import DEFAULT_HOURS


def slot_starts(date: dt.date, hours: ClinicHours = DEFAULT_HOURS) -> Iterator[dt.time]:
    """Yield slot start times from opening to closing time inclusive."""
    step = dt.timedelta(minutes=hours.slot_minutes)
    current = dt.datetime.combine(date, hours.opening_time)
    last = dt.datetime.combine(date, hours.closing_time)
    while current <= last:
        yield current.time()
        current += step


def generate_time_slots(
    date: dt.date,
    existing: Sequence[Appointment],
    duration_minutes: int | None = None,
    exclude_id: str | None = None,
    hours: ClinicHours = DEFAULT_HOURS,
) -> Iterator[TimeSlot]:
    """Lazily evaluate every slot of ``date`` against the existing bookings.

    A slot is available when an appointment of ``duration_minutes`` starting
    there would not overlap any booking. Pass the duration of the appointment
    being scheduled so that slots too short for it are reported as taken.
    """
    probe_minutes = duration_minutes or hours.default_duration_minutes
    for start in slot_starts(date, hours):
        candidate = ScheduleCandidate(date=date, time=start, duration_minutes=probe_minutes)
        yield TimeSlot(time=start, available=not check_conflict(candidate, existing, exclude_id))
