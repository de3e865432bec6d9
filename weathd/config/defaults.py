"""Documented defaults used when neither CLI nor persisted config says otherwise."""

from datetime import timedelta
from pathlib import Path

WEATHERAPI_BASE_URL = "https://api.weatherapi.com/v1"

DEFAULT_REFRESH_INTERVAL = timedelta(minutes=10)
DEFAULT_NOTIFY_INTERVAL = timedelta(hours=6)
DEFAULT_FORECAST_DAYS = 3
DEFAULT_REQUEST_TIMEOUT = 30.0

API_KEY_FILE = "api_key"
API_CONFIG_FILE = "api_config.yaml"
DAEMON_CONFIG_FILE = "daemon_config.yaml"
PID_FILE = "pid"
STATE_FILE = "daemon_state.json"
LOG_FILE = "weathd.log"


def default_working_directory() -> Path:
    return Path.home() / ".weathd"
