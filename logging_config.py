"""
Structured logging configuration for the funnel-model project.

This module provides a centralized way to configure logging across the application
with different log levels and output files for different concerns.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Set

# Define logger names for different concerns
ANALYSIS_LOGGER = "funnel_model.analysis"
PERFORMANCE_LOGGER = "funnel_model.performance"
ERROR_LOGGER = "funnel_model.errors"
# Package logger; every funnel_model.* module logger propagates to it
DEBUG_LOGGER = "funnel_model"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES = (
    "analysis_events.log",
    "performance_metrics.log",
    "warnings_errors.log",
    "debug_detail.log",
    "combined.log",
)

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

# Track if logging is already configured and log files
_LOGGING_CONFIGURED = False
_log_files_created: Set[Path] = set()


def clear_logs(log_dir: Path) -> None:
    """
    Clear all log files in the specified directory.

    Args:
        log_dir: Directory containing log files to clear
    """
    for name in LOG_FILES:
        log_file = log_dir / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not delete {log_file}: {e}")


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8',
        mode='a'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    _log_files_created.add(path)
    return handler


def _attach(logger_name: str, handler: logging.Handler, level: int) -> None:
    named = logging.getLogger(logger_name)
    for h in named.handlers[:]:
        named.removeHandler(h)
    named.setLevel(level)
    named.addHandler(handler)
    named.propagate = True  # Allow to bubble up to root


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True) -> None:
    """
    Configure structured logging for the application.

    Creates separate log files for different concerns:
    - analysis_events.log: Chain analysis workflow events (INFO+)
    - performance_metrics.log: Timing of analysis runs (INFO+)
    - warnings_errors.log: Warnings and errors (WARNING+)
    - debug_detail.log: Detailed debug information (DEBUG, only if debug=True)
    - combined.log: Combined log of all messages (INFO+)

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    # Remove all handlers from the root logger before setup
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Console handler (for warnings and above)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)-8s %(message)s"))
    root_logger.addHandler(console)

    root_logger.addHandler(_file_handler(log_dir / "combined.log", logging.INFO))
    root_logger.addHandler(_file_handler(log_dir / "warnings_errors.log", logging.WARNING))

    _attach(ANALYSIS_LOGGER, _file_handler(log_dir / "analysis_events.log", logging.INFO), logging.INFO)
    _attach(PERFORMANCE_LOGGER, _file_handler(log_dir / "performance_metrics.log", logging.INFO), logging.INFO)

    if debug:
        _attach(DEBUG_LOGGER, _file_handler(log_dir / "debug_detail.log", logging.DEBUG), logging.DEBUG)

    _LOGGING_CONFIGURED = True


def reset_logging() -> None:
    """Detach configured handlers so setup_logging can run again."""
    global _LOGGING_CONFIGURED

    for name in (None, ANALYSIS_LOGGER, PERFORMANCE_LOGGER, DEBUG_LOGGER):
        target = logging.getLogger(name)
        for h in target.handlers[:]:
            target.removeHandler(h)
            h.close()
        if name is not None:
            target.setLevel(logging.NOTSET)
    _log_files_created.clear()
    _LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (e.g., __name__). If None, returns root logger.

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
