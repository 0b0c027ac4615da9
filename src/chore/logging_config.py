# chore/logging_config.py
"""
Opt-in logging configuration for the `chore` logger hierarchy.

Library modules only create loggers; nothing is emitted until an application
(or the CLI's --debug flag) calls setup_logging().
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "chore"

FORMATS = {
    "default": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}

_DEFAULT_LOG_FILE = Path(".chore") / "chore.log"
_log_file_path: Path | None = None

# Marker so we only ever remove handlers we installed
_HANDLER_ATTR = "_chore_handler"


def _remove_our_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)
            handler.close()


def setup_logging(
    level: int | str = logging.INFO,
    *,
    format: str = "default",
    format_string: str | None = None,
    console: bool = True,
    file: bool | str | Path = False,
    propagate: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the `chore` logger.

    Args:
        level: Logging level (e.g. "DEBUG" or logging.DEBUG)
        format: Named format: "default", "simple" or "detailed"
        format_string: Explicit format string; overrides `format`
        console: Log to stderr
        file: True for .chore/chore.log, or a path to log to
        propagate: Whether records also reach the root logger

    Returns:
        The configured `chore` logger
    """
    global _log_file_path

    logger = logging.getLogger(LOGGER_NAME)
    _remove_our_handlers(logger)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)
    logger.propagate = propagate
    logger.disabled = False

    formatter = logging.Formatter(format_string or FORMATS.get(format, FORMATS["default"]))

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_ATTR, True)
        logger.addHandler(stream_handler)

    if file:
        path = _DEFAULT_LOG_FILE if file is True else Path(file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_ATTR, True)
        logger.addHandler(file_handler)
        _log_file_path = path.resolve()
    else:
        _log_file_path = None

    logger.debug(f"Logging configured (level={logging.getLevelName(level)}, file={_log_file_path})")
    return logger


def disable_logging() -> None:
    """Remove our handlers and silence the `chore` logger (useful for tests)."""
    global _log_file_path
    logger = logging.getLogger(LOGGER_NAME)
    _remove_our_handlers(logger)
    null_handler = logging.NullHandler()
    setattr(null_handler, _HANDLER_ATTR, True)
    logger.addHandler(null_handler)
    logger.propagate = False
    _log_file_path = None


def get_log_file_path() -> Path | None:
    """Path of the active log file, if file logging is enabled."""
    return _log_file_path
