#!/usr/bin/env python3
"""Main entrypoint for the path cleaner."""

import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import cast

from src.cleaner import CleanupService
from src.config_loader import load_settings
from src.errors import CleanupError
from src.log_sink import console_level
from src.settings import CleanupSettings, LogLevel


class Args(argparse.Namespace):
    config: Path | None
    log_level: str | None
    log_directory: str | None
    log_retention_days: int | None
    workers: int | None
    paths: list[str]
    rich_logs: bool
    print_config_and_exit: bool


logger = logging.getLogger(__name__)


def parse_args() -> Args:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Delete configured files and directories in parallel",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    # Configuration overrides (optional when using config file)
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=[level.value for level in LogLevel],
        help="Minimum level of entries written to the run log",
    )

    parser.add_argument(
        "--log-directory",
        type=str,
        help="Directory receiving the run log files",
    )

    parser.add_argument(
        "--log-retention-days",
        type=int,
        help="Delete run log files older than this number of days",
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Number of paths deleted concurrently",
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Paths to delete. If specified, replaces the paths from the config file.",
    )

    parser.add_argument(
        "--rich-logs",
        action="store_true",
        help="Enable rich colored logging output",
    )

    parser.add_argument(
        "--print-config-and-exit",
        action="store_true",
        help="Print the resolved configuration as JSON and exit without deleting anything",
    )

    return cast(Args, parser.parse_args())


def configure_logging(log_level: int, use_rich: bool = False) -> None:
    """Configure console logging with optional rich formatting.

    Args:
        log_level: Stdlib logging level
        use_rich: Whether to use rich colored logging
    """
    if use_rich:
        from rich.logging import RichHandler
        from rich.console import Console

        console = Console(stderr=True)

        logging.basicConfig(
            level=log_level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(
                    console=console,
                    show_path=True,
                    show_time=True,
                    show_level=True,
                    markup=False,
                    rich_tracebacks=True,
                )
            ],
        )
    else:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s",
        )

    # run log entries are filtered by the configured level before they are
    # mirrored, so the mirror itself lets everything through
    logging.getLogger("src.log_sink").setLevel(logging.DEBUG)


def print_settings(settings: CleanupSettings) -> None:
    settings_dict = settings.model_dump(mode="json")
    print(json.dumps(settings_dict, indent=2, sort_keys=True))


def main() -> int:
    """Main function."""
    args = parse_args()

    configure_logging(logging.INFO, args.rich_logs)

    try:
        settings = load_settings(
            args.config,
            log_level=args.log_level,
            log_directory=args.log_directory,
            log_retention_days=args.log_retention_days,
            worker_count=args.workers,
            paths=args.paths or None,
        )
        logging.getLogger().setLevel(console_level(settings.log_level))

        if args.print_config_and_exit:
            print_settings(settings)
            return 0

        service = CleanupService(settings)

        _ = signal.signal(signal.SIGTERM, lambda _, _2: service.shutdown())

        summary = service.run()

    except CleanupError as e:
        logger.error("Cleanup aborted: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Cleanup stopped by user")
        return 0
    except Exception as e:
        logger.error("Error running cleanup: %s", e, exc_info=True)
        return 1

    if summary.failed:
        logger.warning(
            "%d of %d paths could not be cleaned, see %s",
            summary.failed,
            len(summary.outcomes),
            summary.log_file,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
