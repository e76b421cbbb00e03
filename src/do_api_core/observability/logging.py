"""Logging for the client.

Every module logger lives under the `do_api_core` namespace and hands its
records to the package logger, which owns the single stream handler. One
call to `set_log_level` therefore adjusts the whole client.

Usage example:
    from do_api_core.observability.logging import get_logger

    logger = get_logger("do_api_core.executor")
    logger.warning("Retrying %s %s", method, path)
"""

from __future__ import annotations

import logging
import time

from ..exceptions import LogLevelError

PACKAGE_LOGGER_NAME = "do_api_core"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _attach_utc_handler(logger: logging.Logger) -> logging.Logger:
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER_NAME or name.startswith(f"{PACKAGE_LOGGER_NAME}.")


def get_logger(name: str) -> logging.Logger:
    """Return a logger that writes UTC-stamped lines to stderr.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        For names under `do_api_core`, a handler-less child of the package
        logger. Any other name gets its own handler and INFO level.
    """
    if not _in_package(name):
        return _attach_utc_handler(logging.getLogger(name))
    _attach_utc_handler(logging.getLogger(PACKAGE_LOGGER_NAME))
    return logging.getLogger(name)


def parse_log_level(value: str | int) -> int:
    """Resolve a level name such as `debug` or a numeric level.

    Raises:
        LogLevelError: If the name is not a standard logging level.
    """
    if isinstance(value, int):
        return value
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        raise LogLevelError(value)
    return level


def set_log_level(level: str | int) -> None:
    """Set the level for every `do_api_core` logger at once."""
    get_logger(PACKAGE_LOGGER_NAME).setLevel(parse_log_level(level))
