"""Run a complete cleanup: delete the configured paths and write the run log.

A run goes through these steps:

1. make sure the log directory exists (fatal when it cannot be created),
2. log the start marker,
3. delete all configured paths with the worker pool,
4. remove run logs older than the retention period,
5. log the completion marker and write the run log file.

Nothing is deleted when step 1 fails. Failures while deleting are contained
per path and only show up in the run log.
"""

import logging
import threading
from collections import Counter
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from src.constants import LOG_FILE_NAME, LOG_FILE_TIMESTAMP_FORMAT
from src.deletion import DeletionOutcome, DeletionStatus
from src.errors import LogDirectoryError
from src.log_sink import LogSink
from src.retention import sweep_old_logs
from src.settings import CleanupSettings
from src.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


def log_file_path(log_directory: Path, started_at: datetime) -> Path:
    """Return the run log file path for a run started at `started_at`."""
    return log_directory / LOG_FILE_NAME.format(
        timestamp=started_at.strftime(LOG_FILE_TIMESTAMP_FORMAT)
    )


def ensure_log_directory(log_directory: Path) -> None:
    """Create the log directory if it does not exist yet.

    Raises:
        LogDirectoryError: If the directory cannot be created.
    """
    if log_directory.is_dir():
        return
    try:
        log_directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LogDirectoryError(
            f"Cannot create log directory '{log_directory}': {e}"
        ) from e
    logger.info("Created log directory %s", log_directory)


class RunSummary(BaseModel):
    """Counts of a finished run."""

    model_config = ConfigDict(frozen=True)

    log_file: Path
    outcomes: list[DeletionOutcome]
    log_written: bool

    def count(self, status: DeletionStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def deleted(self) -> int:
        return self.count(DeletionStatus.DELETED)

    @property
    def not_found(self) -> int:
        return self.count(DeletionStatus.NOT_FOUND)

    @property
    def failed(self) -> int:
        return self.count(DeletionStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return self.count(DeletionStatus.CANCELLED)


class CleanupService:
    """Service deleting the configured paths and writing the run log.

    Each service instance owns its own `LogSink`, there is no process wide
    log state.
    """

    shutdown_event: threading.Event

    def __init__(self, settings: CleanupSettings) -> None:
        """Initialize the cleanup service.

        Args:
            settings: Configuration settings of this run
        """
        self.settings = settings

        self.log_directory = settings.log_directory
        self.log_sink = LogSink(settings.log_level)
        self.shutdown_event = threading.Event()

        self.worker_pool = WorkerPool(
            worker_count=settings.worker_count,
            log_level=settings.log_level,
            shutdown_event=self.shutdown_event,
        )

    def _delete_paths(self) -> list[DeletionOutcome]:
        """Run the worker pool and merge worker logs in worker order."""
        outcomes: list[DeletionOutcome] = []
        for result in self.worker_pool.run(self.settings.paths):
            self.log_sink.extend(result.entries)
            outcomes.extend(result.outcomes)
        return outcomes

    def _sweep_logs(self) -> None:
        for removed in sweep_old_logs(
            self.log_directory, self.settings.log_retention_days
        ):
            self.log_sink.debug(f"Removed old log file {removed}")

    def _write_log(self, log_file: Path) -> bool:
        try:
            self.log_sink.flush(log_file)
        except OSError as e:
            logger.error("Failed to write log file '%s': %s", log_file, e)
            return False
        logger.info("Log written to %s", log_file)
        return True

    def run(self) -> RunSummary:
        """Run a single cleanup.

        Returns:
            Summary with every path outcome and the run log file.

        Raises:
            LogDirectoryError: If the log directory cannot be created.
        """
        ensure_log_directory(self.log_directory)

        started_at = datetime.now()
        log_file = log_file_path(self.log_directory, started_at)

        self.log_sink.info(
            f"Cleanup started: {len(self.settings.paths)} path(s) "
            f"with {self.settings.worker_count} worker(s)"
        )

        outcomes = self._delete_paths()
        counts = Counter(outcome.status for outcome in outcomes)

        self._sweep_logs()

        completion = (
            f"Cleanup completed: {counts[DeletionStatus.DELETED]} cleaned, "
            f"{counts[DeletionStatus.NOT_FOUND]} not found, "
            f"{counts[DeletionStatus.FAILED]} failed"
        )
        if counts[DeletionStatus.CANCELLED]:
            completion += f", {counts[DeletionStatus.CANCELLED]} cancelled"
        self.log_sink.info(completion)

        log_written = self._write_log(log_file)
        return RunSummary(log_file=log_file, outcomes=outcomes, log_written=log_written)

    def shutdown(self) -> None:
        self.shutdown_event.set()
