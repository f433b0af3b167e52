"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Secrets and overrides read from the process environment."""

    def __init__(
        self,
        github_token: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
    ):
        self.github_token = github_token
        self.log_level = log_level
        self.environment = environment or "local"
        self.anthropic_api_key = anthropic_api_key
        self.openai_api_key = openai_api_key
        self.gemini_api_key = gemini_api_key


def _read(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - GITHUB_TOKEN: token sent to the GitHub API (raises the rate limit)
    - LOG_LEVEL: override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - PATCHWORKS_ENVIRONMENT: environment label attached to log records
    - ANTHROPIC_API_KEY, OPENAI_API_KEY, GEMINI_API_KEY: enrichment
      credentials, these take precedence over keys in the config file

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    log_level = _read("LOG_LEVEL")
    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=[
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            ],
            suggestions=["Unset LOG_LEVEL or use one of the standard level names"],
        )

    return EnvironmentConfig(
        github_token=_read("GITHUB_TOKEN"),
        log_level=log_level.upper() if log_level else None,
        environment=_read("PATCHWORKS_ENVIRONMENT"),
        anthropic_api_key=_read("ANTHROPIC_API_KEY"),
        openai_api_key=_read("OPENAI_API_KEY"),
        gemini_api_key=_read("GEMINI_API_KEY"),
    )
