"""YAML config persistence for the working directory.

Three independent records live side by side: the raw API key, the API
request config and the daemon config. Each loader tolerates a missing or
malformed file by logging and returning defaults.
"""

import logging
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from weathd.config.defaults import (
    API_CONFIG_FILE,
    API_KEY_FILE,
    DAEMON_CONFIG_FILE,
)
from weathd.config.schema import ApiRequestConfig, DaemonConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_api_key(working_directory: str | Path) -> str | None:
    """Read the raw API key. Returns None if absent or empty."""
    path = Path(working_directory) / API_KEY_FILE
    try:
        key = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read API key from %s: %s", path, e)
        return None
    return key or None


def load_api_config(working_directory: str | Path) -> ApiRequestConfig:
    return _load_model(Path(working_directory) / API_CONFIG_FILE, ApiRequestConfig)


def load_daemon_config(working_directory: str | Path) -> DaemonConfig:
    working_directory = Path(working_directory)
    config = _load_model(working_directory / DAEMON_CONFIG_FILE, DaemonConfig)
    if "working_directory" not in config.model_fields_set:
        config = config.model_copy(update={"working_directory": working_directory})
    return config


def _load_model(path: Path, model: type[ModelT]) -> ModelT:
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.info("No %s found, using defaults", path)
        return model()
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Failed to read %s, using defaults: %s", path, e)
        return model()

    if not isinstance(raw, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", path, type(raw).__name__)
        return model()

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.warning("Invalid config in %s, using defaults: %s", path, e)
        return model()


def save_config(
    working_directory: str | Path,
    api_key: str,
    api_config: ApiRequestConfig,
    daemon_config: DaemonConfig,
) -> bool:
    """Persist all three records. Failures are logged, never raised."""
    working_directory = Path(working_directory)
    try:
        working_directory.mkdir(parents=True, exist_ok=True)
        (working_directory / API_KEY_FILE).write_text(api_key)
        _dump_model(working_directory / API_CONFIG_FILE, api_config)
        _dump_model(working_directory / DAEMON_CONFIG_FILE, daemon_config)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", working_directory, e)
        return False
    logger.info("Saved config to %s", working_directory)
    return True


def _dump_model(path: Path, config: BaseModel) -> None:
    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)
