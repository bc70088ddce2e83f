"""
================================================================================
Booker Tools Common Utilities
================================================================================

Shared configuration management and logging setup.

Exports:
    - ConfigLoader: Singleton YAML + environment configuration
    - init_logger / get_logger: Loguru setup and component-bound loggers
    - ensure_directory: Create artifact directories on demand

================================================================================
"""

import os

from .config_loader import ConfigLoader, ConfigurationError, DEFAULT_BASE_URL
from .logger import get_logger, init_logger, reset_logger


def ensure_directory(path: str) -> str:
    """
    Ensures a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    os.makedirs(path, exist_ok=True)
    return path


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_BASE_URL",
    "init_logger",
    "get_logger",
    "reset_logger",
    "ensure_directory",
]
