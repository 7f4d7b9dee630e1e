"""
Logging for modrelay.

Every component logger is a child of the ``modrelay`` package logger, so the
handlers are attached once, on first use, and shared:

* a prompt_toolkit console handler (colored when stderr is a TTY) at the level
  named by ``MODRELAY_LOG_LEVEL`` (INFO by default);
* a rotating file handler at DEBUG writing the session log under
  ``MODRELAY_LOG_DIR`` (``<project>/logs`` by default).

Messages carry a bracketed component tag, e.g. ``[BLOCK STORE] ...``.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

ROOT_LOGGER_NAME = "modrelay"

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H-%M-%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3
# A restart within this window keeps appending to the previous session file
SESSION_REUSE_SECONDS = 60

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[38;5;88m",
}
RESET_COLOR = "\033[0m"

# Third-party loggers that only reach our handlers at WARNING and above
LIBRARY_LOGGERS = ("discord", "aiosqlite", "websockets", "aiohttp")

_session_log_path: Path | None = None


class ColorFormatter(logging.Formatter):
    """Wraps each formatted record in the ANSI color of its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """
    Console handler printing through prompt_toolkit.

    ``print_formatted_text`` keeps ANSI sequences intact and does not clobber
    an active prompt.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


def logs_dir() -> Path:
    """Directory holding the session logs; created on demand."""
    configured = os.getenv("MODRELAY_LOG_DIR")
    path = Path(configured) if configured else Path(__file__).resolve().parents[3] / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def console_level() -> int:
    """Console level from ``MODRELAY_LOG_LEVEL``; unknown names fall back to INFO."""
    name = os.getenv("MODRELAY_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_log_filepath() -> Path:
    """
    Return the log file of the current session.

    Resolved once per process: the newest ``modrelay-*.log`` is reused when it
    was written within the last minute, otherwise a new timestamped file is
    chosen.
    """
    global _session_log_path

    if _session_log_path is None:
        directory = logs_dir()
        previous = max(directory.glob("modrelay-*.log"), key=lambda p: p.stat().st_mtime, default=None)
        now = datetime.now()
        if previous is not None and now.timestamp() - previous.stat().st_mtime < SESSION_REUSE_SECONDS:
            _session_log_path = previous
        else:
            _session_log_path = directory / f"modrelay-{now.strftime(DATE_FORMAT)}.log"

    return _session_log_path


def _build_handlers() -> list[logging.Handler]:
    plain = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = PromptToolkitHandler()
    console.setLevel(console_level())
    console.setFormatter(ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain)

    log_file = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    log_file.setLevel(logging.DEBUG)
    log_file.setFormatter(plain)

    return [console, log_file]


def configure_logging() -> logging.Logger:
    """Attach the shared handlers to the package logger. Safe to call repeatedly."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    root.setLevel(logging.DEBUG)
    root.propagate = False
    for handler in _build_handlers():
        root.addHandler(handler)

    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(logging.WARNING)
        library_logger.propagate = False
        library_logger.handlers = list(root.handlers)

    return root


def get_logger(component: str) -> logging.Logger:
    """Return the ``modrelay.<component>`` logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """``sys.excepthook`` that logs uncaught exceptions; Ctrl+C exits normally."""
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    get_logger("main").critical(
        "Uncaught exception",
        exc_info=(exception_type, exception_instance, exception_traceback),
    )
