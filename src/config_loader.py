"""Load cleanup settings from a YAML configuration file.

The file keeps the section layout of the classic cleanup INI files::

    Debug:
      LogLevel: info
      LogDirectory: ./logs
      LogRetentionDays: 7
    MultiThreads:
      DefaultThreadsCount: 4
    Paths:
      - /tmp/build-cache
      - /var/tmp/old-reports

Command line overrides are merged on top of the file values, first non-None
value wins.
"""

import logging
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from src import constants
from src.errors import ConfigError
from src.settings import CleanupSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_not_none(*values: T | None) -> T | None:
    for v in values:
        if v is not None:
            return v
    return None


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic validation error as one line per invalid field."""
    return "Invalid config\n" + "\n".join(
        [
            f"{'.'.join([str(loc) for loc in err['loc']])}: {err['msg']} (got {err.get('input')})"
            for err in error.errors()
        ]
    )


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Read the raw YAML document from the config file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Parsed document, empty dict for an empty file.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    logger.info("Loading configuration from %s", config_path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file '{config_path}': {e}") from e

    if config_dict is None:
        return {}
    if not isinstance(config_dict, dict):
        raise ConfigError(
            f"Config file '{config_path}' must contain a mapping of sections"
        )
    return config_dict


def _section(config_dict: dict[str, Any], name: str) -> dict[str, Any]:
    section = config_dict.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return section


def build_settings(
    config_dict: dict[str, Any],
    log_level: str | None = None,
    log_directory: Path | str | None = None,
    log_retention_days: int | None = None,
    worker_count: int | None = None,
    paths: list[str] | None = None,
) -> CleanupSettings:
    """Build settings from a config document and optional overrides.

    Raises:
        ConfigError: If a required value is missing or a value is invalid.
    """
    debug = _section(config_dict, constants.DEBUG_SECTION)
    threads = _section(config_dict, constants.THREADS_SECTION)

    try:
        return CleanupSettings(
            log_level=first_not_none(
                log_level, debug.get("LogLevel"), constants.DEFAULT_LOG_LEVEL
            ),
            log_directory=first_not_none(log_directory, debug.get("LogDirectory")),
            log_retention_days=first_not_none(
                log_retention_days,
                debug.get("LogRetentionDays"),
                constants.DEFAULT_LOG_RETENTION_DAYS,
            ),
            worker_count=first_not_none(
                worker_count,
                threads.get("DefaultThreadsCount"),
                constants.DEFAULT_WORKER_COUNT,
            ),
            paths=first_not_none(paths, config_dict.get(constants.PATHS_SECTION), []),
        )
    except ValidationError as e:
        raise ConfigError(format_validation_error(e)) from e


def load_settings(config_path: Path | None, **overrides: Any) -> CleanupSettings:
    """Load settings from the config file (if any) merged with overrides."""
    config_dict = read_config_file(config_path) if config_path else {}
    return build_settings(config_dict, **overrides)
