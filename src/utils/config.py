"""
Configuration management for the Recipe Costing Engine.

This module handles:
- Environment-specific configuration (development vs. production)
- Costing settings (maximum sub-recipe depth, volume table, density fallback)
- Display settings (currency symbol)

Every setting is read from a ``RECIPE_COSTING_*`` environment variable when
the configuration is created. Invalid values fall back to the default and
log a warning.
"""

import logging
import os
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_VOLUME_SYSTEM,
    ENV_PREFIX,
    MAX_RECIPE_DEPTH,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_VOLUME_SYSTEMS = {"uk", "us"}


class Config:
    """
    Application configuration manager.

    Handles all configuration settings read from the environment. The
    costing services consult the global instance only for defaults; every
    setting can also be passed explicitly per call.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION

        self._max_recipe_depth = self._read_int("MAX_DEPTH", MAX_RECIPE_DEPTH, minimum=1)
        self._volume_system = self._read_choice(
            "VOLUME_SYSTEM", DEFAULT_VOLUME_SYSTEM, _VOLUME_SYSTEMS
        )
        self._use_reference_densities = self._read_bool("REFERENCE_DENSITIES", False)
        self._currency_symbol = os.environ.get(
            f"{ENV_PREFIX}CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL
        )

    # ------------------------------------------------------------------
    # Environment parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _read_int(name: str, default: int, minimum: Optional[int] = None) -> int:
        """Read an integer setting, falling back to default if invalid."""
        var = f"{ENV_PREFIX}{name}"
        raw = os.environ.get(var)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid {var}={raw!r}; using default {default}")
            return default
        if minimum is not None and value < minimum:
            logger.warning(f"Invalid {var}={raw!r} (minimum {minimum}); using default {default}")
            return default
        return value

    @staticmethod
    def _read_bool(name: str, default: bool) -> bool:
        """Read a boolean flag, falling back to default if invalid."""
        var = f"{ENV_PREFIX}{name}"
        raw = os.environ.get(var)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid {var}={raw!r}; using default {default}")
        return default

    @staticmethod
    def _read_choice(name: str, default: str, choices: set) -> str:
        """Read a setting restricted to a fixed set of values."""
        var = f"{ENV_PREFIX}{name}"
        raw = os.environ.get(var)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value not in choices:
            logger.warning(f"Invalid {var}={raw!r}; using default {default!r}")
            return default
        return value

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def max_recipe_depth(self) -> int:
        """Maximum sub-recipe nesting depth before costing is abandoned."""
        return self._max_recipe_depth

    @property
    def volume_system(self) -> str:
        """Volume table to use: 'uk' (metric culinary + UK imperial) or 'us'."""
        return self._volume_system

    @property
    def use_reference_densities(self) -> bool:
        """
        Whether ingredients without a density may borrow one from the
        reference density table, looked up by ingredient name.
        """
        return self._use_reference_densities

    @property
    def currency_symbol(self) -> str:
        """Currency symbol used in formatted costs."""
        return self._currency_symbol

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(environment='{self.environment}', "
            f"max_recipe_depth={self._max_recipe_depth}, "
            f"volume_system='{self._volume_system}')"
        )


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    This function implements a singleton pattern for the configuration.
    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    RECIPE_COSTING_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(f"{ENV_PREFIX}ENV", "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
