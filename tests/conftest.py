"""Shared pytest fixtures and configuration."""

import pytest
import tempfile
from pathlib import Path

from src.settings import CleanupSettings, LogLevel


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_settings(temp_dir):
    """Factory for CleanupSettings with test defaults."""

    def _make_settings(**overrides) -> CleanupSettings:
        defaults = {
            "log_level": LogLevel.INFO,
            "log_directory": temp_dir / "logs",
            "log_retention_days": 7,
            "worker_count": 2,
            "paths": [],
        }
        defaults.update(overrides)
        return CleanupSettings(**defaults)

    return _make_settings


@pytest.fixture
def sample_paths(temp_dir):
    """Create a sample set of files and directories to clean."""
    targets = temp_dir / "targets"
    targets.mkdir()

    single_file = targets / "report.txt"
    single_file.write_text("report")

    tree = targets / "cache"
    (tree / "nested" / "deeper").mkdir(parents=True)
    (tree / "a.bin").write_bytes(b"\x00" * 16)
    (tree / "nested" / "b.txt").write_text("b")
    (tree / "nested" / "deeper" / "c.txt").write_text("c")

    empty_dir = targets / "empty"
    empty_dir.mkdir()

    missing = targets / "missing"

    return {
        "root": targets,
        "file": single_file,
        "tree": tree,
        "empty_dir": empty_dir,
        "missing": missing,
    }
