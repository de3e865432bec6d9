"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from enum import StrEnum


class Category(StrEnum):
    CURRENT = "current"
    FORECAST = "forecast"
    ALERTS = "alerts"


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()
