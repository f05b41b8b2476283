# src/config/logging_config.py

"""Per-run timestamped logging configuration for fx_convert.

Each launch creates a dedicated log file inside ``logs/``, named with the
launch timestamp (e.g. ``logs/run_20260214_153045.log``). All
``fx_convert.*`` loggers route through this file handler so that the
store, the refresher and the front ends land in the same per-run log.

Only warnings and errors reach the console; stdout stays reserved for
conversion output. Both handlers mask the ``app_id`` API key wherever a
request URL ends up in a message or traceback.
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

# Reusable format strings --------------------------------------------------

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# curl errors quote the request URL, which carries the API key
_APP_ID_PATTERN = re.compile(r"(app_id=)[^&\s'\"]+")


class RedactingFormatter(logging.Formatter):
    """Formatter that masks ``app_id`` query values, tracebacks included."""

    def format(self, record: logging.LogRecord) -> str:
        return _APP_ID_PATTERN.sub(r"\1***", super().format(record))


def setup_logging() -> Path:
    """Initialise the root ``fx_convert`` logger for the current run.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger("fx_convert")
    root_logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers on repeated calls (e.g. tests)
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        RedactingFormatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        RedactingFormatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
