"""Configuration loader for Patchworks."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from patchworks.logging import get_logger

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

logger = get_logger(__name__, component="config")

DEFAULT_CONFIG_LOCATIONS = (
    Path("patchworks.yaml"),
    Path("config") / "patchworks.yaml",
)

_ENV_CREDENTIALS = ("anthropic_api_key", "openai_api_key", "gemini_api_key")


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration from YAML and the environment.

    Lookup order for the file:
    1. ``config_path`` when given (must exist)
    2. ``patchworks.yaml`` in the current directory
    3. ``config/patchworks.yaml``
    4. built-in defaults when neither default location exists

    Environment credentials override the ``ai`` keys from the file.

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    env_config = load_environment_config()

    config_file = _find_config_file(config_path)
    if config_file is None:
        logger.debug(
            "No configuration file found, using defaults",
            extra={"event": "config.defaults_used"},
        )
        config_dict: Dict[str, Any] = {}
    else:
        config_dict = _read_yaml(config_file)

    _merge_environment(config_dict, env_config)

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        app_config = AppConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=format_validation_errors(e),
            suggestions=[
                "Review patchworks.example.yaml for the expected layout",
                "Verify field types match the expected schema",
            ],
        ) from e

    return app_config, env_config


def format_validation_errors(error: ValidationError) -> List[str]:
    """Turn a Pydantic ``ValidationError`` into readable one-line messages."""
    messages = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"]) or "<root>"
        error_type = item["type"]
        if error_type == "missing":
            messages.append(f"Missing required field: {field_path}")
        elif error_type.endswith("_type"):
            expected = error_type[: -len("_type")]
            messages.append(
                f"Invalid type for '{field_path}': expected {expected}, got {item.get('input')!r}"
            )
        else:
            messages.append(f"{field_path}: {item['msg']}")
    return messages


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} is readable"],
        ) from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"Configuration file {config_file} must contain a mapping at the top level",
            suggestions=["Start from patchworks.example.yaml"],
        )
    return loaded


def _merge_environment(config_dict: Dict[str, Any], env_config: EnvironmentConfig) -> None:
    ai = config_dict.get("ai")
    if ai is None:
        ai = {}
    if not isinstance(ai, dict):
        # Let model validation report the bad type
        return
    for field in _ENV_CREDENTIALS:
        value = getattr(env_config, field)
        if value:
            ai[field] = value
    if ai:
        config_dict["ai"] = ai


def _find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to run with defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate
    return None
