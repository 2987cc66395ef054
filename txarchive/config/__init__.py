"""
Configuration for txarchive.
"""

from ..exceptions import ConfigurationError
from .environment import EnvironmentLoader
from .settings import (
    AppConfig,
    ArchiveConfig,
    CaisseEpargneConfig,
    LogLevel,
    ReconcileSettings,
)
from .validation import ConfigValidator


def load_config(use_dotenv: bool = True) -> AppConfig:
    """Load configuration from the environment and validate it."""
    config = EnvironmentLoader.load_config(use_dotenv=use_dotenv)
    errors = ConfigValidator.validate_config(config)
    if errors:
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(errors)}",
            errors,
        )
    return config


__all__ = [
    "AppConfig",
    "ArchiveConfig",
    "CaisseEpargneConfig",
    "LogLevel",
    "ReconcileSettings",
    "EnvironmentLoader",
    "ConfigValidator",
    "load_config",
]
