import datetime as dt

from agenda.domain.exceptions import InvalidTimeError, ValidationError
from agenda.domain.models import AppointmentFields, ClinicHours

DEFAULT_HOURS = ClinicHours()

REQUIRED_FIELDS: tuple[str, ...] = ("date", "time", "title", "client_id", "client_name", "value")


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def validate_required_fields(
    fields: AppointmentFields, hours: ClinicHours = DEFAULT_HOURS
) -> AppointmentFields:
    """Check that a booking has everything it needs and fill in the default duration.

    Raises:
        ValidationError: If a required field is missing, null or blank, if the
            duration is not positive, or if the value is negative.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_missing(getattr(fields, name))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    duration = fields.duration_minutes
    if duration is None:
        duration = hours.default_duration_minutes
    elif duration <= 0:
        raise ValidationError(
            f"Duration must be a positive number of minutes, got {duration}",
            fields=["duration_minutes"],
        )

    if fields.value is not None and fields.value < 0:
        raise ValidationError(f"Value must not be negative, got {fields.value}", fields=["value"])

    return fields.model_copy(update={"duration_minutes": duration})


def validate_business_hours(time: dt.time, hours: ClinicHours = DEFAULT_HOURS) -> None:
    """Reject start times outside ``[opening_time, closing_time]``.

    Only the start is bounded: a booking at closing time may end after it.
    """
    if time.tzinfo is not None:
        raise ValidationError(
            f"Invalid time {time.isoformat()}: expected a local time", fields=["time"]
        )
    start = time.replace(second=0, microsecond=0)
    if start < hours.opening_time or start > hours.closing_time:
        raise InvalidTimeError(time, hours.opening_time, hours.closing_time)
