"""Pydantic v2 configuration schema with strict validation."""

from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, Field, field_serializer, field_validator

from weathd.config.defaults import (
    DEFAULT_FORECAST_DAYS,
    DEFAULT_NOTIFY_INTERVAL,
    DEFAULT_REFRESH_INTERVAL,
    default_working_directory,
)
from weathd.config.duration import format_duration, parse_duration
from weathd.models.common import Category
from weathd.models.location import Auto, Location


class RequestTypes(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    current: bool = True
    forecast: bool = True
    alerts: bool = False

    def enabled(self, category: Category) -> bool:
        return getattr(self, category.value)


class ApiRequestConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    location: Location = Auto()
    forecast_days: int | None = Field(default=DEFAULT_FORECAST_DAYS, ge=1, le=14)
    include_hourly: bool | None = None
    requests: RequestTypes = RequestTypes()


class DaemonConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    working_directory: Path = Field(default_factory=default_working_directory)
    refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL
    notify_interval: timedelta = DEFAULT_NOTIFY_INTERVAL

    @field_validator("refresh_interval", "notify_interval", mode="before")
    @classmethod
    def _parse_compact(cls, value: object) -> object:
        # Persisted files store "10m0s"; bare numbers are seconds
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("refresh_interval", "notify_interval")
    @classmethod
    def _positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("interval must be positive")
        return value

    @field_serializer("refresh_interval", "notify_interval")
    def _format_compact(self, value: timedelta) -> str:
        return format_duration(value)

    @field_serializer("working_directory")
    def _format_path(self, value: Path) -> str:
        return str(value)
