"""Deletion of a single configured path.

`delete_path` is the unit of work a worker runs for every path it owns. It
never raises: every outcome, including filesystem errors, is returned as a
`DeletionOutcome` and described in the worker's log buffer.
"""

import logging
import os
import shutil
import stat
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from src.log_sink import LogBuffer

logger = logging.getLogger(__name__)


class DeletionStatus(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DeletionOutcome(BaseModel):
    """Result of one deletion task."""

    model_config = ConfigDict(frozen=True)

    path: str
    status: DeletionStatus
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is DeletionStatus.DELETED


def _writable_retry(root: Path):
    """Build an rmtree error handler that clears read-only bits and retries once.

    Only entries inside `root` are touched.
    """

    def handler(func, path, exc) -> None:
        if func not in (os.unlink, os.remove, os.rmdir) or os.path.islink(path):
            raise exc
        try:
            mode = stat.S_IREAD | stat.S_IWRITE
            if os.path.isdir(path):
                mode |= stat.S_IEXEC
            os.chmod(path, mode)
            parent = Path(path).parent
            # removing an entry needs a writable parent
            if parent != root.parent:
                os.chmod(parent, parent.stat().st_mode | stat.S_IWRITE)
        except OSError:
            raise exc
        func(path)

    return handler


def _remove(path: Path) -> str:
    """Remove a file, symlink or directory tree and return what it was."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, onexc=_writable_retry(path))
        return "directory"
    kind = "symlink" if path.is_symlink() else "file"
    try:
        path.unlink()
    except PermissionError:
        if kind == "symlink":
            raise
        path.chmod(stat.S_IWRITE | stat.S_IREAD)
        path.unlink()
    return kind


def delete_path(path: str, log: LogBuffer) -> DeletionOutcome:
    """Delete a single file or directory tree.

    Args:
        path: Path as configured.
        log: Log buffer of the worker running this task.

    Returns:
        Outcome of the deletion; a missing path is reported as not found.
    """
    log.info(f"Starting deletion of {path}")

    target = Path(path)
    # lexists semantics: a dangling symlink is still something to remove
    if not target.exists() and not target.is_symlink():
        log.warning(f"Path not found: {path}")
        return DeletionOutcome(path=path, status=DeletionStatus.NOT_FOUND)

    try:
        kind = _remove(target)
    except OSError as e:
        log.error(f"Error cleaning path {path}: {e}")
        return DeletionOutcome(path=path, status=DeletionStatus.FAILED, reason=str(e))

    log.debug(f"Removed {kind} {path}")
    log.info(f"Successfully cleaned: {path}")
    return DeletionOutcome(path=path, status=DeletionStatus.DELETED)
