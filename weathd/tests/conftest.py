"""Shared test fixtures."""

import json
from datetime import timedelta
from pathlib import Path

import pytest
import yaml

from weathd.config.schema import ApiRequestConfig, DaemonConfig, RequestTypes
from weathd.models.location import City

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def current_payload() -> dict:
    return load_fixture("current_london.json")


@pytest.fixture
def forecast_payload() -> dict:
    return load_fixture("forecast_london.json")


@pytest.fixture
def alerts_payload() -> dict:
    return load_fixture("alerts_london.json")


@pytest.fixture
def error_payload() -> dict:
    return load_fixture("error_invalid_key.json")


@pytest.fixture
def api_config() -> ApiRequestConfig:
    """London, all three categories enabled."""
    return ApiRequestConfig(
        location=City(name="London"),
        forecast_days=3,
        requests=RequestTypes(current=True, forecast=True, alerts=True),
    )


@pytest.fixture
def daemon_config(tmp_path: Path) -> DaemonConfig:
    return DaemonConfig(
        working_directory=tmp_path,
        refresh_interval=timedelta(seconds=60),
        notify_interval=timedelta(seconds=600),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Working directory with a key and minimal valid YAML configs."""
    (tmp_path / "api_key").write_text("test-key-123\n")
    with open(tmp_path / "api_config.yaml", "w") as f:
        yaml.dump(
            {
                "location": {"kind": "metar", "code": "EGLL"},
                "forecast_days": 2,
                "requests": {"current": True, "forecast": False, "alerts": True},
            },
            f,
        )
    with open(tmp_path / "daemon_config.yaml", "w") as f:
        yaml.dump({"refresh_interval": "5m", "notify_interval": "1h30m"}, f)
    return tmp_path
