"""Tests for config schema validation."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from weathd.config.defaults import (
    DEFAULT_FORECAST_DAYS,
    DEFAULT_NOTIFY_INTERVAL,
    DEFAULT_REFRESH_INTERVAL,
)
from weathd.config.schema import ApiRequestConfig, DaemonConfig, RequestTypes
from weathd.models.common import Category
from weathd.models.location import Auto, MetarStation


class TestRequestTypes:
    def test_defaults(self):
        r = RequestTypes()
        assert r.current is True
        assert r.forecast is True
        assert r.alerts is False

    def test_enabled_by_category(self):
        r = RequestTypes(current=False, forecast=True, alerts=True)
        assert not r.enabled(Category.CURRENT)
        assert r.enabled(Category.FORECAST)
        assert r.enabled(Category.ALERTS)


class TestApiRequestConfig:
    def test_defaults(self):
        config = ApiRequestConfig()
        assert config.location == Auto()
        assert config.forecast_days == DEFAULT_FORECAST_DAYS
        assert config.include_hourly is None

    def test_location_from_dict(self):
        config = ApiRequestConfig(location={"kind": "metar", "code": "KJFK"})
        assert config.location == MetarStation(code="KJFK")

    def test_unknown_location_kind(self):
        with pytest.raises(ValidationError):
            ApiRequestConfig(location={"kind": "planet", "name": "Mars"})

    def test_forecast_days_bounds(self):
        with pytest.raises(ValidationError):
            ApiRequestConfig(forecast_days=0)
        with pytest.raises(ValidationError):
            ApiRequestConfig(forecast_days=15)

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            ApiRequestConfig(lang="fr")

    def test_frozen(self):
        config = ApiRequestConfig()
        with pytest.raises(ValidationError):
            config.forecast_days = 5


class TestDaemonConfig:
    def test_defaults(self):
        config = DaemonConfig()
        assert config.refresh_interval == DEFAULT_REFRESH_INTERVAL
        assert config.notify_interval == DEFAULT_NOTIFY_INTERVAL
        assert config.working_directory == Path.home() / ".weathd"

    def test_compact_strings_parsed(self):
        config = DaemonConfig(refresh_interval="5m", notify_interval="2h")
        assert config.refresh_interval == timedelta(minutes=5)
        assert config.notify_interval == timedelta(hours=2)

    def test_seconds_accepted(self):
        config = DaemonConfig(refresh_interval=90)
        assert config.refresh_interval == timedelta(seconds=90)

    def test_invalid_duration_text(self):
        with pytest.raises(ValidationError):
            DaemonConfig(refresh_interval="often")

    def test_zero_interval_rejected(self):
        with pytest.raises(ValidationError):
            DaemonConfig(refresh_interval="0s")

    def test_dump_uses_compact_form(self, tmp_path: Path):
        config = DaemonConfig(
            working_directory=tmp_path, refresh_interval="1h", notify_interval="6h"
        )
        data = config.model_dump(mode="json")
        assert data["refresh_interval"] == "60m0s"
        assert data["notify_interval"] == "360m0s"
        assert data["working_directory"] == str(tmp_path)
        assert DaemonConfig(**data) == config
