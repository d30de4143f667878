from typing import Any

from loguru import logger
from sqlalchemy import Boolean, Float, Integer, String, Text, delete, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from agenda.appointments.adapters.record_helpers import (
    changes_to_document,
    document_to_appointment,
    fields_to_document,
    format_date,
)
from agenda.domain.identifiers import new_appointment_id
from agenda.domain.models import Appointment, AppointmentFields, AppointmentFilter

_COLUMNS = (
    "date",
    "time",
    "duration_minutes",
    "title",
    "client_id",
    "client_name",
    "value",
    "note",
    "completed",
)


class Base(DeclarativeBase):
    pass


class AppointmentRow(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # Zero-padded YYYY-MM-DD / HH:MM so string comparison is chronological.
    date: Mapped[str] = mapped_column(String(10), index=True)
    time: Mapped[str] = mapped_column(String(5))
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60)
    title: Mapped[str] = mapped_column(String(255))
    client_id: Mapped[str] = mapped_column(String(64))
    client_name: Mapped[str] = mapped_column(String(255))
    value: Mapped[float] = mapped_column(Float)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)

    def to_document(self) -> dict[str, Any]:
        return {column: getattr(self, column) for column in _COLUMNS}


class SQLAlchemyAppointmentStore:
    """Appointment store on a SQLAlchemy async engine (SQLite via aiosqlite by default)."""

    def __init__(
        self,
        database_url: str = "sqlite+aiosqlite:///agenda.db",
        *,
        echo: bool = False,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._engine = engine or create_async_engine(database_url, echo=echo)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

    async def open(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Appointment table ready on {}", self._engine.url.render_as_string())

    async def insert(self, fields: AppointmentFields) -> Appointment:
        row = AppointmentRow(id=new_appointment_id(), **fields_to_document(fields))
        async with self._sessions.begin() as session:
            session.add(row)
        return document_to_appointment(row.id, row.to_document())

    async def find(self, query: AppointmentFilter) -> list[Appointment]:
        stmt = select(AppointmentRow)
        if query.date is not None:
            stmt = stmt.where(AppointmentRow.date == format_date(query.date))
        elif query.is_range:
            stmt = stmt.where(
                AppointmentRow.date.between(
                    format_date(query.start_date),  # type: ignore[arg-type]
                    format_date(query.end_date),  # type: ignore[arg-type]
                )
            )
        stmt = stmt.order_by(AppointmentRow.date, AppointmentRow.time)

        async with self._sessions() as session:
            rows = (await session.scalars(stmt)).all()
        return [document_to_appointment(row.id, row.to_document()) for row in rows]

    async def get(self, appointment_id: str) -> Appointment | None:
        async with self._sessions() as session:
            row = await session.get(AppointmentRow, appointment_id)
        if row is None:
            return None
        return document_to_appointment(row.id, row.to_document())

    async def update(self, appointment_id: str, changes: dict[str, Any]) -> Appointment | None:
        async with self._sessions.begin() as session:
            row = await session.get(AppointmentRow, appointment_id)
            if row is None:
                return None
            for column, value in changes_to_document(changes).items():
                setattr(row, column, value)
        return document_to_appointment(row.id, row.to_document())

    async def delete(self, appointment_id: str) -> bool:
        async with self._sessions.begin() as session:
            result = await session.execute(
                delete(AppointmentRow).where(AppointmentRow.id == appointment_id)
            )
        return bool(result.rowcount)

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning("Appointment store health check failed: {}", exc)
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()
