"""Age based removal of old run log files."""

import logging
import time
from pathlib import Path

from src.constants import LOG_FILE_NAME, SECONDS_PER_DAY

logger = logging.getLogger(__name__)


def sweep_old_logs(
    log_directory: Path, retention_days: int, now: float | None = None
) -> list[Path]:
    """Delete log files older than the retention period.

    Only run log files (`cleanup_log_*.txt`) directly inside `log_directory`
    are considered, other files are left alone. A log file is removed when its
    last modification is more than `retention_days` days before `now`.

    Args:
        log_directory: Directory holding the run log files.
        retention_days: Number of days to keep log files.
        now: Reference time as a POSIX timestamp, defaults to the current time.

    Returns:
        List of removed files.
    """
    if not log_directory.is_dir():
        logger.warning("Log directory %s does not exist", log_directory)
        return []

    cutoff = (time.time() if now is None else now) - retention_days * SECONDS_PER_DAY

    pattern = LOG_FILE_NAME.format(timestamp="*")
    removed: list[Path] = []
    for file_path in sorted(log_directory.glob(pattern)):
        if file_path.is_symlink() or not file_path.is_file():
            continue
        try:
            if file_path.stat().st_mtime >= cutoff:
                continue
            file_path.unlink()
        except FileNotFoundError:
            logger.debug("Log file '%s' already deleted", file_path)
        except OSError as e:
            logger.warning("Failed to remove old log file '%s': %s", file_path, e)
        else:
            logger.debug("Removed old log file '%s'", file_path)
            removed.append(file_path)

    if removed:
        logger.info(
            "Removed %d log files older than %d days", len(removed), retention_days
        )
    return removed
