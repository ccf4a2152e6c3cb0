"""Bounded concurrent execution of deletion tasks.

The configured path list is split into contiguous chunks, one per worker, and
every chunk runs sequentially on its own thread. Workers write only to their
own `LogBuffer`, so the deletion loop never takes a lock; the caller merges
the returned buffers into the run log after all workers finished.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel, ConfigDict

from src.deletion import DeletionOutcome, DeletionStatus, delete_path
from src.log_sink import LogBuffer, LogEntry
from src.settings import LogLevel

logger = logging.getLogger(__name__)


def partition_paths(paths: list[str], worker_count: int) -> list[list[str]]:
    """Split paths into at most `worker_count` contiguous chunks.

    Args:
        paths: Ordered list of paths to partition.
        worker_count: Maximum number of chunks, at least 1.

    Returns:
        Non-empty chunks of ``ceil(len(paths) / worker_count)`` paths (the last
        one may be shorter). Concatenated they give back `paths` unchanged.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be at least 1, got {worker_count}")
    if not paths:
        return []

    chunk_size = math.ceil(len(paths) / worker_count)
    return [paths[i : i + chunk_size] for i in range(0, len(paths), chunk_size)]


class WorkerResult(BaseModel):
    """Everything one worker produced for its chunk, in execution order."""

    model_config = ConfigDict(frozen=True)

    worker_index: int
    outcomes: list[DeletionOutcome]
    entries: list[LogEntry]


class _Worker:
    """State of one worker, kept outside the thread so a crash loses nothing."""

    def __init__(self, index: int, paths: list[str], log_level: LogLevel):
        self.index = index
        self.paths = paths
        self.log = LogBuffer(log_level)
        self.outcomes: list[DeletionOutcome] = []

    def run(self, shutdown_event: threading.Event) -> None:
        logger.debug("Worker %d processing %d paths", self.index, len(self.paths))
        for path in self.paths:
            if shutdown_event.is_set():
                self.log.warning(f"Skipped {path}: cleanup cancelled")
                self.outcomes.append(
                    DeletionOutcome(
                        path=path,
                        status=DeletionStatus.CANCELLED,
                        reason="cleanup cancelled",
                    )
                )
                continue
            self.outcomes.append(delete_path(path, self.log))

    def fail_remaining(self, error: BaseException) -> None:
        """Record a failed outcome for every path the worker did not finish."""
        for path in self.paths[len(self.outcomes) :]:
            self.log.error(f"Error cleaning path {path}: worker failed: {error}")
            self.outcomes.append(
                DeletionOutcome(
                    path=path,
                    status=DeletionStatus.FAILED,
                    reason=f"worker failed: {error}",
                )
            )

    def result(self) -> WorkerResult:
        return WorkerResult(
            worker_index=self.index,
            outcomes=self.outcomes,
            entries=self.log.entries,
        )


class WorkerPool:
    """Runs deletion tasks with at most `worker_count` of them at a time."""

    def __init__(
        self,
        worker_count: int,
        log_level: LogLevel,
        shutdown_event: threading.Event | None = None,
    ):
        """Initialize the worker pool.

        Args:
            worker_count: Maximum number of concurrently running workers
            log_level: Threshold applied to every worker log buffer
            shutdown_event: Once set, workers skip the paths they did not start
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        self.worker_count = worker_count
        self.log_level = log_level
        if shutdown_event is None:
            shutdown_event = threading.Event()
        self.shutdown_event = shutdown_event

    def run(self, paths: list[str]) -> list[WorkerResult]:
        """Delete all paths and wait for every worker to finish.

        Returns:
            One result per worker, ordered by worker index. Every input path
            has exactly one outcome across all results.
        """
        chunks = partition_paths(paths, self.worker_count)
        if not chunks:
            return []

        workers = [
            _Worker(index, chunk, self.log_level) for index, chunk in enumerate(chunks)
        ]
        logger.debug("Dispatching %d paths to %d workers", len(paths), len(workers))

        with ThreadPoolExecutor(
            max_workers=len(workers), thread_name_prefix="cleanup-worker"
        ) as executor:
            futures = [
                executor.submit(worker.run, self.shutdown_event) for worker in workers
            ]

        for worker, future in zip(workers, futures):
            error = future.exception()
            if error is not None:
                logger.error(
                    "Worker %d failed: %s", worker.index, error, exc_info=error
                )
                worker.fail_remaining(error)

        return [worker.result() for worker in workers]
