"""Configuration loading: YAML file, environment variables and validation."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import (
    AIConfig,
    AppConfig,
    CategorizationConfig,
    FetchConfig,
    LoggingConfig,
    ReportConfig,
)

__all__ = [
    "AIConfig",
    "AppConfig",
    "CategorizationConfig",
    "ConfigurationError",
    "EnvironmentConfig",
    "FetchConfig",
    "LoggingConfig",
    "ReportConfig",
    "load_config",
    "load_environment_config",
]
