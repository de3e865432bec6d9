"""Typed views over the provider's documents.

Only the fields that get rendered are modelled. Shape mismatches raise
DataContractViolation instead of leaking untyped lookups.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from weathd.models.common import Category


class DataContractViolation(Exception):
    """A provider document no longer matches the expected shape."""

    def __init__(self, category: Category, message: str):
        super().__init__(f"{category} payload: {message}")
        self.category = category


@dataclass(frozen=True)
class CacheEntry:
    payload: dict[str, Any]
    fetched_at: float  # monotonic seconds
    fetched_at_iso: str


class _Document(BaseModel):
    model_config = {"extra": "ignore"}


class Condition(_Document):
    text: str


class CurrentConditions(_Document):
    temp_f: float
    temp_c: float
    feelslike_f: float
    feelslike_c: float
    wind_mph: float
    wind_kph: float
    wind_dir: str
    windchill_f: float | None = None
    windchill_c: float | None = None
    humidity: float
    pressure_in: float
    pressure_mb: float
    condition: Condition


class DaySummary(_Document):
    avgtemp_f: float
    avgtemp_c: float
    maxtemp_f: float
    maxtemp_c: float
    mintemp_f: float
    mintemp_c: float
    maxwind_mph: float
    maxwind_kph: float
    avghumidity: float
    daily_chance_of_rain: float = 0
    daily_chance_of_snow: float = 0
    totalprecip_in: float
    totalprecip_mm: float
    condition: Condition


class ForecastDay(_Document):
    date: str
    day: DaySummary


class WeatherAlert(_Document):
    headline: str
    instruction: str | None = None
    severity: str | None = None
    event: str | None = None
    areas: str | None = None


def parse_current(payload: dict[str, Any]) -> CurrentConditions:
    current = payload.get("current")
    if not isinstance(current, dict):
        raise DataContractViolation(Category.CURRENT, "missing 'current' object")
    try:
        return CurrentConditions.model_validate(current)
    except ValidationError as e:
        raise DataContractViolation(Category.CURRENT, str(e)) from e


def parse_forecast(payload: dict[str, Any]) -> list[ForecastDay]:
    forecast = payload.get("forecast")
    days = forecast.get("forecastday") if isinstance(forecast, dict) else None
    if not isinstance(days, list):
        raise DataContractViolation(
            Category.FORECAST, "'forecast.forecastday' is not a list"
        )
    try:
        return [ForecastDay.model_validate(d) for d in days]
    except ValidationError as e:
        raise DataContractViolation(Category.FORECAST, str(e)) from e


def parse_alerts(payload: dict[str, Any]) -> list[WeatherAlert]:
    """Extract alert records, stopping at the first null entry."""
    alerts = payload.get("alerts")
    records = alerts.get("alert") if isinstance(alerts, dict) else None
    if not isinstance(records, list):
        raise DataContractViolation(Category.ALERTS, "'alerts.alert' is not a list")

    parsed: list[WeatherAlert] = []
    for record in records:
        if record is None:
            break
        try:
            parsed.append(WeatherAlert.model_validate(record))
        except ValidationError as e:
            raise DataContractViolation(Category.ALERTS, str(e)) from e
    return parsed
