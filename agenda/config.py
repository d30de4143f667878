import datetime as dt
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(Enum):
    MEMORY = "memory"
    SQLALCHEMY = "sqlalchemy"


class StoreConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AGENDA_STORE_", env_file=".env", extra="ignore")

    backend: StoreBackend = StoreBackend.MEMORY
    database_url: str = "sqlite+aiosqlite:///agenda.db"
    echo: bool = False


class ScheduleConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AGENDA_SCHEDULE_", env_file=".env", extra="ignore"
    )

    opening_time: dt.time = dt.time(7, 0)
    closing_time: dt.time = dt.time(22, 0)
    slot_minutes: int = Field(default=15, gt=0)
    default_duration_minutes: int = Field(default=60, gt=0)


class ApiConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AGENDA_API_", env_file=".env", extra="ignore")

    host: str = "127.0.0.1"
    port: int = 8000
    prefix: str = "/api/agenda"
    session_cookie: str = "token"
    session_tokens: list[str] = Field(default_factory=list)


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AGENDA_", env_file=".env", extra="ignore")

    log_level: str = "INFO"
    store: StoreConfig = Field(default_factory=lambda: StoreConfig())
    schedule: ScheduleConfig = Field(default_factory=lambda: ScheduleConfig())
    api: ApiConfig = Field(default_factory=lambda: ApiConfig())
