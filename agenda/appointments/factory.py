from typing import Callable

from loguru import logger

from agenda.appointments.adapters.memory import InMemoryAppointmentStore
from agenda.appointments.adapters.sqlalchemy import SQLAlchemyAppointmentStore
from agenda.appointments.service import AppointmentService
from agenda.config import AppConfig, ScheduleConfig, StoreBackend
from agenda.domain.models import ClinicHours


def clinic_hours_from(config: ScheduleConfig) -> ClinicHours:
    return ClinicHours(
        opening_time=config.opening_time,
        closing_time=config.closing_time,
        slot_minutes=config.slot_minutes,
        default_duration_minutes=config.default_duration_minutes,
    )


def _build_memory(config: AppConfig) -> AppointmentService:
    return AppointmentService(InMemoryAppointmentStore(), clinic_hours_from(config.schedule))


def _build_sqlalchemy(config: AppConfig) -> AppointmentService:
    store = SQLAlchemyAppointmentStore(config.store.database_url, echo=config.store.echo)
    return AppointmentService(store, clinic_hours_from(config.schedule))


_BUILDERS: dict[StoreBackend, Callable[[AppConfig], AppointmentService]] = {
    StoreBackend.MEMORY: _build_memory,
    StoreBackend.SQLALCHEMY: _build_sqlalchemy,
}


def build_appointment_service(config: AppConfig) -> AppointmentService:
    """Build the appointment service on the store backend selected in config."""
    backend = config.store.backend
    logger.info("Building appointment service with store backend: {}", backend.value)
    return _BUILDERS[backend](config)
