"""Run log collection shared by the orchestrator and the deletion workers.

Entries are filtered by the configured level when they are created, kept in
memory for the whole run and written to the run log file once at the end.

Two collectors share the same filter and entry format:

- ``LogBuffer`` belongs to exactly one worker thread and needs no locking.
- ``LogSink`` is the run-level log. It can be written from any thread and
  merges finished worker buffers as whole, already ordered blocks.

Every admitted entry is also mirrored to the console through the standard
``logging`` module.
"""

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from src.constants import LOG_LINE_FORMAT, LOG_LINE_TIMESTAMP_FORMAT
from src.settings import LogLevel

logger = logging.getLogger(__name__)

LEVEL_PRIORITY = MappingProxyType(
    {
        LogLevel.DEBUG: 1,
        LogLevel.INFO: 2,
        LogLevel.WARNING: 3,
        LogLevel.ERROR: 4,
        LogLevel.NONE: 5,
    }
)

_CONSOLE_LEVELS = MappingProxyType(
    {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
)


def is_enabled(level: LogLevel, configured: LogLevel) -> bool:
    """Check whether an entry of `level` passes the `configured` threshold.

    A configured level of ``none`` admits nothing, and ``none`` itself is
    never a valid entry level.
    """
    if level is LogLevel.NONE or configured is LogLevel.NONE:
        return False
    return LEVEL_PRIORITY[level] >= LEVEL_PRIORITY[configured]


def console_level(level: LogLevel) -> int:
    """Map a run log level to the matching stdlib logging level."""
    return _CONSOLE_LEVELS.get(level, logging.CRITICAL + 1)


class LogEntry(BaseModel):
    """Single run log entry, immutable once created."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    level: LogLevel
    message: str

    def to_line(self) -> str:
        return LOG_LINE_FORMAT.format(
            timestamp=self.timestamp.strftime(LOG_LINE_TIMESTAMP_FORMAT),
            level=self.level.value.upper(),
            message=" ".join(self.message.splitlines()),
        )


class LogBuffer:
    """Ordered, unsynchronized log of a single worker."""

    def __init__(self, configured_level: LogLevel):
        self.configured_level = configured_level
        self._entries: list[LogEntry] = []

    def _create(self, level: LogLevel, message: str) -> LogEntry | None:
        if not is_enabled(level, self.configured_level):
            return None
        logger.log(console_level(level), "%s", message)
        return LogEntry(timestamp=datetime.now(), level=level, message=message)

    def submit(self, level: LogLevel, message: str) -> None:
        entry = self._create(level, message)
        if entry is not None:
            self._entries.append(entry)

    def debug(self, message: str) -> None:
        self.submit(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.submit(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.submit(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.submit(LogLevel.ERROR, message)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class LogSink(LogBuffer):
    """Run-level log that is safe to write from any number of threads.

    The entry list is only ever mutated while holding the sink lock, so
    concurrent writers never interleave or lose entries. Nothing is dropped
    for capacity reasons.
    """

    def __init__(self, configured_level: LogLevel):
        super().__init__(configured_level)
        self._lock = threading.Lock()

    def submit(self, level: LogLevel, message: str) -> None:
        entry = self._create(level, message)
        if entry is None:
            return
        with self._lock:
            self._entries.append(entry)

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """Append an ordered block of entries, e.g. a finished worker buffer."""
        entries = list(entries)
        with self._lock:
            self._entries.extend(entries)

    @property
    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def flush(self, path: Path) -> None:
        """Append all collected entries to `path`, one line per entry.

        Args:
            path: Run log file, created if missing.

        Raises:
            OSError: If the file cannot be opened or written.
        """
        lines = [entry.to_line() + "\n" for entry in self.entries]
        with open(path, "a", encoding="utf-8") as f:
            f.writelines(lines)
