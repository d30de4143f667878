import datetime as dt

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from agenda.api.auth import require_session
from agenda.api.schemas import AppointmentPayload, AppointmentResponse, TimeSlotResponse
from agenda.appointments.ports import AbstractAppointmentService

appointments_router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(require_session)],
)
health_router = APIRouter(tags=["Health"])


def get_service(request: Request) -> AbstractAppointmentService:
    return request.app.state.appointment_service


@appointments_router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    date: dt.date | None = Query(default=None),
    start_date: dt.date | None = Query(default=None, alias="startDate"),
    end_date: dt.date | None = Query(default=None, alias="endDate"),
    service: AbstractAppointmentService = Depends(get_service),
) -> list[AppointmentResponse]:
    appointments = await service.list_appointments(date, start_date, end_date)
    return [AppointmentResponse.from_domain(a) for a in appointments]


@appointments_router.get("/slots", response_model=list[TimeSlotResponse])
async def list_time_slots(
    date: dt.date = Query(),
    duration: int | None = Query(default=None),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
    service: AbstractAppointmentService = Depends(get_service),
) -> list[TimeSlotResponse]:
    slots = await service.time_slots(date, duration_minutes=duration, exclude_id=exclude_id)
    return [TimeSlotResponse.from_domain(s) for s in slots]


@appointments_router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str, service: AbstractAppointmentService = Depends(get_service)
) -> AppointmentResponse:
    return AppointmentResponse.from_domain(await service.get(appointment_id))


@appointments_router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    payload: AppointmentPayload, service: AbstractAppointmentService = Depends(get_service)
) -> AppointmentResponse:
    appointment = await service.create(payload.to_fields())
    return AppointmentResponse.from_domain(appointment)


@appointments_router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    payload: AppointmentPayload,
    service: AbstractAppointmentService = Depends(get_service),
) -> AppointmentResponse:
    appointment = await service.update(appointment_id, payload.to_fields())
    return AppointmentResponse.from_domain(appointment)


@appointments_router.patch("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: str, service: AbstractAppointmentService = Depends(get_service)
) -> AppointmentResponse:
    return AppointmentResponse.from_domain(await service.mark_complete(appointment_id))


@appointments_router.delete("/{appointment_id}", response_model=AppointmentResponse)
async def delete_appointment(
    appointment_id: str, service: AbstractAppointmentService = Depends(get_service)
) -> AppointmentResponse:
    return AppointmentResponse.from_domain(await service.remove(appointment_id))


@health_router.get("/health")
async def health(service: AbstractAppointmentService = Depends(get_service)) -> JSONResponse:
    healthy = await service.health_check()
    if not healthy:
        logger.warning("Health check failed: appointment store unavailable")
        return JSONResponse({"status": "unavailable"}, status_code=503)
    return JSONResponse({"status": "ok"})
