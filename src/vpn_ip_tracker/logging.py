"""Logging setup for the tracker process.

Every module logs through ``logging.getLogger(__name__)``; all of them sit
below the package logger configured here, so one call to
:func:`setup_logging` routes the whole tracker to the console and,
optionally, a log file.
"""

import logging
from pathlib import Path

from vpn_ip_tracker.config import Config

LOGGER_NAME = "vpn_ip_tracker"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(name: str | None) -> int:
    """Map a level name from the config file to a logging level."""
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _open_log_file(log_file: str) -> logging.Handler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path)


def setup_logging(config: Config, verbose: bool = False) -> logging.Logger:
    """Attach handlers to the package logger once per process.

    Args:
        config: Tracker configuration; ``log_level`` and ``log_file`` are used.
        verbose: Log at DEBUG whatever the configured level.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else _resolve_level(config.log_level))

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(_open_log_file(config.log_file))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Detach and close the package handlers. Used by tests."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
