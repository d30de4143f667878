import datetime as dt

from pydantic import BaseModel, ConfigDict

DEFAULT_DURATION_MINUTES = 60


def interval_end(start: dt.datetime, duration_minutes: int) -> dt.datetime:
    """End of a booking, clamped to ``datetime.max`` on the last representable day."""
    try:
        return start + dt.timedelta(minutes=duration_minutes)
    except OverflowError:
        return dt.datetime.max


class ClinicHours(BaseModel):
    """Operating window and slot grid of the clinic.

    ``closing_time`` is the last permitted *start* time; an appointment
    starting at closing time may run past it.
    """

    model_config = ConfigDict(frozen=True)

    opening_time: dt.time = dt.time(7, 0)
    closing_time: dt.time = dt.time(22, 0)
    slot_minutes: int = 15
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES


class AppointmentFields(BaseModel):
    """Caller-supplied appointment fields for a create or an update.

    Every field is optional so that missing input can be reported as a
    whole; for updates only the fields in ``model_fields_set`` are applied.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date | None = None
    time: dt.time | None = None
    duration_minutes: int | None = None
    title: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    value: float | None = None
    note: str | None = None


class ScheduleCandidate(BaseModel):
    """A proposed interval to test against existing bookings."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    time: dt.time
    duration_minutes: int = DEFAULT_DURATION_MINUTES

    @property
    def start(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)

    @property
    def end(self) -> dt.datetime:
        return interval_end(self.start, self.duration_minutes)


class Appointment(BaseModel):
    """A persisted booking."""

    model_config = ConfigDict(frozen=True)

    appointment_id: str
    date: dt.date
    time: dt.time
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    title: str
    client_id: str
    client_name: str
    value: float
    note: str | None = None
    completed: bool = False

    @property
    def start(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)

    @property
    def end(self) -> dt.datetime:
        return interval_end(self.start, self.duration_minutes)


class AppointmentFilter(BaseModel):
    """Query for listing appointments by a single date or an inclusive range."""

    model_config = ConfigDict(frozen=True)

    date: dt.date | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    @property
    def is_range(self) -> bool:
        return self.date is None and self.start_date is not None and self.end_date is not None


class TimeSlot(BaseModel):
    """A 15-minute-aligned candidate start time and whether it can be booked."""

    model_config = ConfigDict(frozen=True)

    time: dt.time
    available: bool
