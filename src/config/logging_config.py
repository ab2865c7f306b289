# src/config/logging_config.py

"""Per-run timestamped logging configuration for affiliate_bot.

Each launch (API server or CLI run) writes one log file inside ``logs/``,
named after the launch time (e.g. ``logs/run_20260214_153045.log``).
The ``affiliate_bot.*`` loggers and uvicorn's server loggers share that
file, so a scraper retry, a fallback substitution, a quota rejection and
the request that triggered them can be read side by side.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

PROJECT_LOGGER = "affiliate_bot"
SERVER_LOGGER = "uvicorn"

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _run_log_path(logs_dir: Path) -> Path:
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{timestamp}.log"


def _console_level() -> int:
    """Console threshold from ``LOG_LEVEL``; unknown names mean WARNING."""
    level = logging.getLevelName(Settings.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.WARNING


def _attach_server_logger(file_handler: logging.Handler) -> None:
    """Send uvicorn's loggers (error and access are children) to the run file."""
    server_logger = logging.getLogger(SERVER_LOGGER)
    if file_handler not in server_logger.handlers:
        server_logger.addHandler(file_handler)
    server_logger.setLevel(logging.INFO)


def setup_logging() -> Path:
    """Initialise the ``affiliate_bot`` logger tree for the current run.

    Safe to call more than once: a configured logger keeps its handlers
    and only the would-be path of a new file is returned.

    Returns:
        The :class:`~pathlib.Path` to the log file for this run.
    """
    log_file = _run_log_path(Settings.LOGS_DIR)

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level())
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)
    _attach_server_logger(file_handler)

    project_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
