from enum import Enum
from pathlib import Path

from pydantic import (
    BaseModel,
    NonNegativeInt,
    PositiveInt,
    ConfigDict,
    field_validator,
)


class LogLevel(str, Enum):
    """Severity of a run log entry, also used as the configured threshold."""

    NONE = "none"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


class CleanupSettings(BaseModel):
    """Cleanup settings loaded from YAML configuration files.

    Settings are immutable per runtime and loaded once before any deletion.
    """

    model_config = ConfigDict(frozen=True)

    log_level: LogLevel
    log_directory: Path
    log_retention_days: NonNegativeInt
    worker_count: PositiveInt
    paths: list[str]

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_directory", mode="before")
    @classmethod
    def _require_log_directory(cls, value: object) -> object:
        # Path("") silently becomes Path("."), so reject empty input up front
        if value is None or not str(value).strip():
            raise ValueError("log directory must not be empty")
        return value

    @field_validator("paths", mode="before")
    @classmethod
    def _parse_paths(cls, value: object) -> object:
        """Accept a list of paths or a block of text with one path per line.

        Blank lines and lines starting with '#' are ignored.
        """
        if value is None:
            return []
        if isinstance(value, str):
            value = value.splitlines()
        if not isinstance(value, (list, tuple)):
            return value
        paths = []
        for item in value:
            # a commented-out YAML list item "- # ..." loads as None
            if item is None:
                continue
            if not isinstance(item, str):
                item = str(item)
            item = item.strip()
            if item and not item.startswith("#"):
                paths.append(item)
        return paths
