# src/devtask_notify/logging_setup.py

"""
Logging for the notification engine.

Everything goes to a file under the data dir. The console only shows what a
person running the app should act on: scheduling decisions and failures from
the engine, but not every local delivery or timer.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Console thresholds by logger prefix; the longest matching prefix wins.
# - platforms.*: one INFO line per delivered notification
# - asyncio: slow-callback and never-retrieved-exception warnings from delivery timers
# - dotenv: a malformed .env line silently changes settings
CONSOLE_THRESHOLDS: dict[str, int] = {
    "devtask_notify": logging.NOTSET,
    "devtask_notify.platforms": logging.WARNING,
    "asyncio": logging.WARNING,
    "dotenv": logging.WARNING,
    "py.warnings": logging.ERROR,
}
DEFAULT_CONSOLE_THRESHOLD = logging.ERROR


def console_threshold(name: str) -> int:
    best, level = "", DEFAULT_CONSOLE_THRESHOLD
    for prefix, threshold in CONSOLE_THRESHOLDS.items():
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best, level = prefix, threshold
    return level


class _ConsoleNoiseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/devtask",
    log_file: str = "devtask_notify.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full file handler on the root logger.

    Replaces whatever handlers the root logger had, so calling it again
    (e.g. after settings change) does not duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / log_file

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))

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

    file_handler = logging.FileHandler(str(path), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # DeprecationWarning and friends arrive as 'py.warnings'.
    logging.captureWarnings(True)
    return path
