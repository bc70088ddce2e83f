"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Single YAML file (config/config.yaml) with dot notation access
    - Environment variable override (API_BASE_URL overrides api.base_url)
    - Alias support (BASE_URL feeds both API and UI base URLs)
    - Type conversion of environment strings based on the default value

License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

# Public demo instance of the Restful Booker Platform
DEFAULT_BASE_URL = "https://automationintesting.online"

# Keys that accept more than one environment variable, highest priority first
ENV_ALIASES: Dict[str, List[str]] = {
    "api.base_url": ["API_BASE_URL", "BASE_URL"],
    "ui.base_url": ["UI_BASE_URL", "BASE_URL", "API_BASE_URL"],
    "runner.ci": ["CI"],
    "logging.level": ["LOG_LEVEL"],
}


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (aliases first, then A_B for key a.b)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("api.base_url", DEFAULT_BASE_URL)
        'https://automationintesting.online'

        >>> config.get("api.timeout", 30)
        30
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Singleton pattern - configuration is loaded once per process."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "api.base_url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_value = self._lookup_env(key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section, or an empty dict."""
        return self._config.get(section, {})

    @property
    def api_base_url(self) -> str:
        """Base URL of the booking REST API, without trailing slash."""
        return str(self.get("api.base_url", DEFAULT_BASE_URL)).rstrip("/")

    @property
    def ui_base_url(self) -> str:
        """Base URL of the booking web UI, without trailing slash."""
        return str(self.get("ui.base_url", DEFAULT_BASE_URL)).rstrip("/")

    def is_ci(self) -> bool:
        """True when running under a CI system (CI env var set)."""
        return bool(self.get("runner.ci", False))

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _lookup_env(self, key: str) -> Optional[str]:
        names = ENV_ALIASES.get(key, []) + [key.upper().replace(".", "_")]
        for name in names:
            value = os.environ.get(name)
            if value:
                return value
        return None

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance so the next access reloads settings."""
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_BASE_URL",
]
