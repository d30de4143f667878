from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from agenda.api.auth import AuthenticationError, SessionVerifier, StaticTokenVerifier
from agenda.api.routes import appointments_router, health_router
from agenda.appointments.factory import build_appointment_service
from agenda.appointments.ports import AbstractAppointmentService
from agenda.config import AppConfig
from agenda.domain.exceptions import (
    ConflictError,
    InvalidTimeError,
    NotFoundError,
    SchedulingError,
    StoreUnavailableError,
    ValidationError,
)

ERROR_STATUS: dict[type[SchedulingError], int] = {
    ValidationError: 400,
    InvalidTimeError: 400,
    ConflictError: 400,
    NotFoundError: 404,
    StoreUnavailableError: 503,
}


def status_for(exc: SchedulingError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


async def _scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    status = status_for(exc)
    body: dict[str, object] = {"error": str(exc)}
    if isinstance(exc, ConflictError):
        body["conflicts"] = [a.appointment_id for a in exc.conflicts]
    if status >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc)
    else:
        logger.info("{} {} rejected ({}): {}", request.method, request.url.path, status, exc)
    return JSONResponse(body, status_code=status)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or error['loc'][0]}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse({"error": f"Invalid request: {problems}"}, status_code=400)


async def _authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=401)


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error in {} {}", request.method, request.url.path)
    return JSONResponse({"error": "An unexpected error occurred."}, status_code=500)


def create_app(
    config: AppConfig | None = None,
    *,
    service: AbstractAppointmentService | None = None,
    verifier: SessionVerifier | None = None,
) -> FastAPI:
    """Build the HTTP app around an explicitly constructed appointment service.

    The service is opened when the app starts and closed when it shuts down.
    """
    config = config or AppConfig()
    appointment_service = service or build_appointment_service(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await appointment_service.open()
        logger.info("Clinic agenda API started")
        try:
            yield
        finally:
            await appointment_service.close()
            logger.info("Clinic agenda API stopped")

    app = FastAPI(title="Clinic Agenda API", version="1.0.0", lifespan=lifespan)
    app.state.appointment_service = appointment_service
    app.state.session_verifier = verifier or StaticTokenVerifier(config.api.session_tokens)
    app.state.session_cookie = config.api.session_cookie

    app.add_exception_handler(SchedulingError, _scheduling_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AuthenticationError, _authentication_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(appointments_router, prefix=config.api.prefix)
    app.include_router(health_router, prefix=config.api.prefix)
    return app
