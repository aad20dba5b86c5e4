# pull_logger.py
"""
Console logging for the WQP pull, with an optional rotating log file.

Usage:
    from src.utils.pull_logger import pullLogger, get_logger, configure_logger

    pullLogger.info("Starting pull")
    log = get_logger("inventory")
    log.debug("details...")

Env overrides:
    WQP_LOG_LEVEL=INFO
    WQP_LOG_FILE=/path/to/wqp_pull.log
    WQP_LOG_NO_COLOR=1
"""

# pylint: disable=W0718, W0603

from __future__ import annotations

import os
import sys
from typing import Optional
import logging
import logging.handlers
import colorama

BASE_NAME = "wqpPull"
__CONFIGURED = False


_RESET = "\x1b[0m"
_BOLD = "\x1b[1m"

ANSI = {
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "cyan": "\x1b[36m",
    "light_green": "\x1b[92m",
}

LOG_FMT = (
    "Process:%(process)d||%(asctime)s-%(levelname)s "
    "[%(name)s:%(funcName)s():%(lineno)d]: %(message)s"
)
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _stream_supports_color(stream: object) -> bool:
    """Return True if stream is a TTY."""
    if not hasattr(stream, "isatty"):
        return False
    try:
        return bool(stream.isatty())
    except Exception:
        return False


def _enable_windows_ansi() -> bool:
    try:
        colorama.just_fix_windows_console()
        return True
    except Exception:
        return False


class ColorFormatter(logging.Formatter):
    """
    Highlights the level name and message by level.
    Plain text when color is off or the stream is not a terminal.
    """

    LEVEL_STYLE = {
        logging.DEBUG: ANSI["cyan"],
        logging.INFO: ANSI["light_green"],
        logging.WARNING: ANSI["yellow"],
        logging.ERROR: ANSI["red"],
        logging.CRITICAL: _BOLD + ANSI["red"],
    }

    def __init__(
                self,
                use_color: Optional[bool] = None,
                stream: Optional[object] = None
                ):
        super().__init__(LOG_FMT, LOG_DATEFMT)
        if use_color is None:
            use_color = _stream_supports_color(stream or sys.stdout)
            if sys.platform.startswith("win"):
                use_color = _enable_windows_ansi() and use_color
        self.use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        style = self.LEVEL_STYLE.get(record.levelno, "")
        levelname, msg, args = record.levelname, record.msg, record.args
        record.levelname = f"{style}{levelname}{_RESET}"
        # message is rendered here, so args must not be applied twice
        record.msg = f"{style}{record.getMessage()}{_RESET}"
        record.args = None
        try:
            return super().format(record)
        finally:
            record.levelname, record.msg, record.args = levelname, msg, args


def _coerce_level(level: Optional[int | str]) -> int:
    if level is None:
        level = os.getenv("WQP_LOG_LEVEL") or "INFO"
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logger(
                    level: Optional[int | str] = None,
                    use_color: Optional[bool] = None,
                    filename: Optional[str] = None,
                    max_bytes: int = 10 * 1024 * 1024,
                    backup_count: int = 5,
                ) -> logging.Logger:
    """
    Configure and return the base pull logger.

    Args:
        level: Logging level or name. Defaults to env WQP_LOG_LEVEL or INFO.
        use_color: Force color on/off. Defaults to auto-detect.
        filename: Rotating log file. Defaults to env WQP_LOG_FILE; no file if unset.
        max_bytes: Rotation size.
        backup_count: Number of rotated backups to keep.
    """
    global __CONFIGURED

    level = _coerce_level(level)
    filename = filename or os.getenv("WQP_LOG_FILE")
    if use_color is None and os.getenv("WQP_LOG_NO_COLOR"):
        use_color = False

    logger = logging.getLogger(BASE_NAME)
    logger.setLevel(level)

    for h in list(logger.handlers):
        logger.removeHandler(h)

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(level)
    console.setFormatter(ColorFormatter(use_color=use_color, stream=sys.stdout))
    logger.addHandler(console)

    if filename:
        folder = os.path.dirname(filename)
        if folder:
            os.makedirs(folder, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
                                                            filename,
                                                            maxBytes=max_bytes,
                                                            backupCount=backup_count,
                                                            encoding="utf-8"
                                                            )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FMT, datefmt=LOG_DATEFMT))
        logger.addHandler(file_handler)

    logger.propagate = False
    __CONFIGURED = True
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the pull logger; configures the base logger on first use."""
    if not __CONFIGURED:
        configure_logger()
    return logging.getLogger(BASE_NAME if not name else f"{BASE_NAME}.{name}")


pullLogger = get_logger()
