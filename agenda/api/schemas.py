import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agenda.appointments.adapters.record_helpers import format_time
from agenda.domain.models import Appointment, AppointmentFields, TimeSlot


class AppointmentPayload(BaseModel):
    """Request body for creating or updating an appointment.

    Accepts camelCase keys (``clientId``) as well as snake_case, and the
    legacy ``duration`` key. Unknown keys such as ``_id`` are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    date: dt.date | None = None
    time: dt.time | None = None
    duration_minutes: int | None = Field(
        default=None,
        validation_alias=AliasChoices("durationMinutes", "duration", "duration_minutes"),
    )
    title: str | None = None
    client_id: str | None = Field(
        default=None, validation_alias=AliasChoices("clientId", "client_id")
    )
    client_name: str | None = Field(
        default=None, validation_alias=AliasChoices("clientName", "client_name")
    )
    value: float | None = None
    note: str | None = None

    @field_validator("time")
    @classmethod
    def _naive_time(cls, value: dt.time | None) -> dt.time | None:
        if value is not None and value.tzinfo is not None:
            raise ValueError("time must be a local clinic time without a UTC offset")
        return value

    def to_fields(self) -> AppointmentFields:
        """Keep only the keys the caller sent, so updates merge instead of overwrite."""
        return AppointmentFields(**self.model_dump(include=self.model_fields_set))


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    date: dt.date
    time: str
    duration_minutes: int
    title: str
    client_id: str
    client_name: str
    value: float
    note: str | None = None
    completed: bool

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.appointment_id,
            date=appointment.date,
            time=format_time(appointment.time),
            duration_minutes=appointment.duration_minutes,
            title=appointment.title,
            client_id=appointment.client_id,
            client_name=appointment.client_name,
            value=appointment.value,
            note=appointment.note,
            completed=appointment.completed,
        )


class TimeSlotResponse(BaseModel):
    time: str
    available: bool

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "TimeSlotResponse":
        return cls(time=format_time(slot.time), available=slot.available)
