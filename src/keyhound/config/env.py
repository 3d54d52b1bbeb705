"""Environment variable mapping for keyhound configuration.

This module defines the flat environment variables that can be used to
configure keyhound and provides utilities for reading them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

# Environment variable names
ENV_CONFIG_PATH = "KEYHOUND_CONFIG_PATH"
ENV_REGION = "KEYHOUND_REGION"
ENV_ENDPOINT_URL = "KEYHOUND_ENDPOINT_URL"
ENV_CONCURRENCY = "KEYHOUND_CONCURRENCY"
ENV_TIMEOUT = "KEYHOUND_TIMEOUT"
ENV_HISTORY_SCOPE = "KEYHOUND_HISTORY_SCOPE"
ENV_OUTPUT_FORMAT = "KEYHOUND_OUTPUT_FORMAT"
ENV_LOG_LEVEL = "KEYHOUND_LOG_LEVEL"


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    Returns:
        Nested dictionary of configuration values that can be merged with
        other config sources. Unparseable numbers are ignored.
    """
    overrides: dict[str, Any] = {
        "scan": {},
        "validator": {},
        "output": {},
    }

    if ENV_REGION in os.environ:
        overrides["validator"]["region"] = os.environ[ENV_REGION]

    if ENV_ENDPOINT_URL in os.environ:
        overrides["validator"]["endpoint_url"] = os.environ[ENV_ENDPOINT_URL]

    if ENV_CONCURRENCY in os.environ:
        value = _parse_int(os.environ[ENV_CONCURRENCY])
        if value is not None:
            overrides["validator"]["concurrency"] = value

    if ENV_TIMEOUT in os.environ:
        timeout_value = _parse_float(os.environ[ENV_TIMEOUT])
        if timeout_value is not None:
            overrides["validator"]["timeout"] = timeout_value

    if ENV_HISTORY_SCOPE in os.environ:
        overrides["scan"]["history_scope"] = os.environ[ENV_HISTORY_SCOPE].lower()

    if ENV_OUTPUT_FORMAT in os.environ:
        overrides["output"]["format"] = os.environ[ENV_OUTPUT_FORMAT].lower()

    if ENV_LOG_LEVEL in os.environ:
        overrides["log_level"] = os.environ[ENV_LOG_LEVEL].lower()

    # Clean up empty sections
    return {k: v for k, v in overrides.items() if v}


def get_config_path_from_env() -> Path | None:
    """Get the config file path from environment variable, if it exists."""
    if ENV_CONFIG_PATH in os.environ:
        path = Path(os.environ[ENV_CONFIG_PATH])
        if path.exists():
            return path
    return None
