"""Non-fatal configuration checks reported as warnings."""

import warnings
from typing import Any, Dict, List

_PROVIDER_KEYS = {
    "anthropic": "anthropic_api_key",
    "openai": "openai_api_key",
    "gemini": "gemini_api_key",
}


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration dictionary for suspicious settings.

    Args:
        config_dict: Raw configuration dictionary, after environment
            credentials were merged in

    Returns:
        List of warning messages
    """
    messages = []

    ai = config_dict.get("ai") or {}
    if isinstance(ai, dict) and ai.get("enabled"):
        keys = [ai.get(field) for field in _PROVIDER_KEYS.values()]
        if not any(keys):
            messages.append(
                "ai.enabled is true but no API key is configured; "
                "the enrichment step will be skipped"
            )

        provider = ai.get("provider", "auto")
        key_field = _PROVIDER_KEYS.get(provider)
        if key_field and not ai.get(key_field) and any(keys):
            messages.append(
                f"ai.provider is '{provider}' but {key_field} is not set"
            )

        if ai.get("focus_areas") == []:
            messages.append("ai.focus_areas is empty; the summary will not be focused")

    fetch = config_dict.get("fetch") or {}
    if isinstance(fetch, dict):
        timeout = fetch.get("http_request_timeout")
        if isinstance(timeout, int) and timeout > 30:
            messages.append(
                f"Large fetch.http_request_timeout ({timeout}s) can stall a run on one slow package"
            )

    return messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a ``UserWarning``."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
