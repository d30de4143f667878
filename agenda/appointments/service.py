import datetime as dt
from collections.abc import Awaitable
from typing import Any, TypeVar

from loguru import logger

from agenda.appointments.locks import DateLocks
from agenda.appointments.ports import AbstractAppointmentService, AppointmentStoreProtocol
from agenda.domain.exceptions import (
    ConflictError,
    NotFoundError,
    SchedulingError,
    StoreUnavailableError,
    ValidationError,
)
from agenda.domain.identifiers import validate_appointment_id
from agenda.domain.models import (
    Appointment,
    AppointmentFields,
    AppointmentFilter,
    ClinicHours,
    ScheduleCandidate,
    TimeSlot,
)
from agenda.scheduling.overlap import find_conflicts
from agenda.scheduling.rules import validate_business_hours, validate_required_fields
from agenda.scheduling.slots import generate_time_slots

T = TypeVar("T")


class AppointmentService(AbstractAppointmentService):
    """Appointment service that wraps an AppointmentStoreProtocol with scheduling rules."""

    def __init__(self, store: AppointmentStoreProtocol, hours: ClinicHours | None = None) -> None:
        self._store = store
        self._hours = hours or ClinicHours()
        self._locks = DateLocks()

    @property
    def hours(self) -> ClinicHours:
        return self._hours

    async def _call_store(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except SchedulingError:
            raise
        except Exception as exc:
            raise StoreUnavailableError(f"Appointment store {operation} failed: {exc}") from exc

    def _validate(self, fields: AppointmentFields) -> AppointmentFields:
        fields = validate_required_fields(fields, self._hours)
        validate_business_hours(fields.time, self._hours)  # type: ignore[arg-type]
        return fields

    def _merge(self, current: Appointment, changes: dict[str, Any]) -> AppointmentFields:
        merged = AppointmentFields(
            **current.model_dump(include=set(AppointmentFields.model_fields)),
        ).model_copy(update=changes)
        return self._validate(merged)

    async def _ensure_free(self, fields: AppointmentFields, exclude_id: str | None = None) -> None:
        candidate = ScheduleCandidate(
            date=fields.date,  # type: ignore[arg-type]
            time=fields.time,  # type: ignore[arg-type]
            duration_minutes=fields.duration_minutes,  # type: ignore[arg-type]
        )
        same_day = await self._call_store(
            "find", self._store.find(AppointmentFilter(date=candidate.date))
        )
        conflicts = find_conflicts(candidate, same_day, exclude_id)
        if conflicts:
            logger.info(
                "Rejected booking on {} at {}: overlaps {} appointment(s)",
                candidate.date,
                candidate.time,
                len(conflicts),
            )
            raise ConflictError(conflicts)

    async def _require(self, appointment_id: str) -> Appointment:
        appointment = await self._call_store("get", self._store.get(appointment_id))
        if appointment is None:
            raise NotFoundError(appointment_id)
        return appointment

    async def list_appointments(
        self,
        date: dt.date | None = None,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> list[Appointment]:
        query = AppointmentFilter(date=date, start_date=start_date, end_date=end_date)
        appointments = await self._call_store("find", self._store.find(query))
        logger.debug("Listed {} appointment(s) for {}", len(appointments), query)
        return appointments

    async def get(self, appointment_id: str) -> Appointment:
        return await self._require(validate_appointment_id(appointment_id))

    async def create(self, fields: AppointmentFields) -> Appointment:
        """Validate, check for conflicts under the date lock, then insert."""
        fields = self._validate(fields)
        logger.info(
            "Creating appointment: date={}, time={}, duration={}",
            fields.date,
            fields.time,
            fields.duration_minutes,
        )

        async with self._locks.hold(fields.date):  # type: ignore[arg-type]
            await self._ensure_free(fields)
            appointment = await self._call_store("insert", self._store.insert(fields))

        logger.info("Appointment created: id={}", appointment.appointment_id)
        return appointment

    async def update(self, appointment_id: str, fields: AppointmentFields) -> Appointment:
        """Merge the explicitly set fields onto the stored record and re-check it."""
        appointment_id = validate_appointment_id(appointment_id)
        changes: dict[str, Any] = fields.model_dump(include=fields.model_fields_set)
        logger.info("Updating appointment: id={}, fields={}", appointment_id, sorted(changes))

        current = await self._require(appointment_id)
        while True:
            merged = self._merge(current, changes)
            async with self._locks.hold(current.date, merged.date):  # type: ignore[arg-type]
                # Another update may have committed while we waited for the lock.
                latest = await self._require(appointment_id)
                if latest.date != current.date:
                    current = latest
                    continue
                merged = self._merge(latest, changes)
                await self._ensure_free(merged, exclude_id=appointment_id)
                updated = await self._call_store(
                    "update",
                    self._store.update(
                        appointment_id,
                        merged.model_dump(include=set(AppointmentFields.model_fields)),
                    ),
                )
            break

        if updated is None:
            raise NotFoundError(appointment_id)
        logger.info("Appointment updated: id={}", appointment_id)
        return updated

    async def mark_complete(self, appointment_id: str) -> Appointment:
        appointment_id = validate_appointment_id(appointment_id)
        updated = await self._call_store(
            "update", self._store.update(appointment_id, {"completed": True})
        )
        if updated is None:
            raise NotFoundError(appointment_id)
        logger.info("Appointment completed: id={}", appointment_id)
        return updated

    async def remove(self, appointment_id: str) -> Appointment:
        appointment_id = validate_appointment_id(appointment_id)
        appointment = await self._require(appointment_id)

        async with self._locks.hold(appointment.date):
            deleted = await self._call_store("delete", self._store.delete(appointment_id))
        if not deleted:
            raise StoreUnavailableError(f"Appointment store did not delete {appointment_id}")

        logger.info("Appointment deleted: id={}", appointment_id)
        return appointment

    async def time_slots(
        self,
        date: dt.date,
        duration_minutes: int | None = None,
        exclude_id: str | None = None,
    ) -> list[TimeSlot]:
        if exclude_id is not None:
            exclude_id = validate_appointment_id(exclude_id)
        if duration_minutes is not None and duration_minutes <= 0:
            raise ValidationError(
                f"Duration must be a positive number of minutes, got {duration_minutes}",
                fields=["duration_minutes"],
            )

        same_day = await self._call_store("find", self._store.find(AppointmentFilter(date=date)))
        return list(
            generate_time_slots(
                date,
                same_day,
                duration_minutes=duration_minutes,
                exclude_id=exclude_id,
                hours=self._hours,
            )
        )

    async def health_check(self) -> bool:
        return await self._store.health_check()

    async def open(self) -> None:
        await self._call_store("open", self._store.open())

    async def close(self) -> None:
        await self._store.close()
