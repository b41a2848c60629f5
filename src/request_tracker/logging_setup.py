# src/request_tracker/logging_setup.py

"""
Logging for the tracker.

The console shares the terminal with the REPL, so its handler only lets
through what a user of the prompt should see. Every record written by the
storage backends (one per mutation) stays in tracker.log unless it is a
WARNING or worse. The log file gets everything.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER_PREFIX = "request_tracker."
LOG_FILE_NAME = "tracker.log"

# Minimum console level per logger prefix inside the app.
_APP_CONSOLE_FLOOR: dict[str, int] = {
    "request_tracker.records.backends": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console-only filter:
    - request_tracker logs pass, except backend write chatter below WARNING
    - captured warnings ('py.warnings') and third-party loggers need ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith(APP_LOGGER_PREFIX):
            return record.levelno >= logging.ERROR

        for prefix, floor in _APP_CONSOLE_FLOOR.items():
            if name.startswith(prefix):
                return record.levelno >= floor
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/tracker",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a file handler on the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
