"""
================================================================================
Logging Setup
================================================================================

Centralized Loguru configuration for the suites.

Every record carries a ``component`` field (page object class, API helper,
global hooks) so interleaved output from parallel steps stays attributable.

Usage:
    from booker_tools.common import get_logger

    log = get_logger("BookingPage")
    log.info(f"Filling booking form for {guest.first_name}")

================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)

_logger_initialized = False
# resolved path -> loguru sink id
_file_sinks: Dict[str, int] = {}


def init_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Initialize the loguru logger with suite-wide settings.

    Safe to call many times. The first call configures the console sink;
    a ``log_file`` passed on any later call is still attached, once per path.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        log_file: Optional file path to additionally write logs to.
    """
    global _logger_initialized

    config = ConfigLoader()
    level = (level or config.get("logging.level", "INFO")).upper()
    log_format = config.get("logging.format", DEFAULT_FORMAT)

    if _logger_initialized:
        if log_file:
            _add_file_sink(log_file, log_format, level, config)
        return

    logger.remove()
    logger.configure(extra={"component": "-"})
    logger.add(
        sys.stderr,
        format=log_format,
        level=level,
        colorize=True,
    )

    _file_sinks.clear()
    log_file = log_file or config.get("logging.file")
    if log_file:
        _add_file_sink(log_file, log_format, level, config)

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


def _add_file_sink(log_file: str, log_format: str, level: str, config: ConfigLoader) -> None:
    key = str(Path(log_file).resolve())
    if key in _file_sinks:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    _file_sinks[key] = logger.add(
        log_file,
        format=log_format,
        level=level,
        rotation=config.get("logging.rotation", "10 MB"),
        retention=config.get("logging.retention", "7 days"),
    )


def get_logger(component: str):
    """
    Return a logger bound to a named component.

    Args:
        component: Name shown in the component column of each record

    Returns:
        A loguru logger carrying ``component`` in its extra dict
    """
    if not _logger_initialized:
        init_logger()
    return logger.bind(component=component)


def reset_logger() -> None:
    """Forget initialization so the next call reconfigures sinks."""
    global _logger_initialized
    _logger_initialized = False


__all__ = [
    "init_logger",
    "get_logger",
    "reset_logger",
]
