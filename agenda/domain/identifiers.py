import re
import uuid

from agenda.domain.exceptions import ValidationError

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_appointment_id() -> str:
    """Return a fresh store identifier (uuid4 as 32 lowercase hex chars)."""
    return uuid.uuid4().hex


def validate_appointment_id(appointment_id: str) -> str:
    """Normalise ``appointment_id`` or raise ``ValidationError`` if it is malformed."""
    normalised = appointment_id.strip().lower() if isinstance(appointment_id, str) else ""
    if not _ID_PATTERN.match(normalised):
        raise ValidationError(f"Invalid appointment id: {appointment_id!r}", fields=["id"])
    return normalised
