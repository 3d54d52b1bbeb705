"""Configuration management for keyhound.

Configuration sources are merged with this priority:

1. CLI arguments (highest priority)
2. Environment variables
3. Configuration file
4. Default values (lowest priority)

Example usage::

    from keyhound.config import load_config

    config = load_config(cli_args={"concurrency": 4})
    print(config.validator.region)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from keyhound.config.env import (
    ENV_CONFIG_PATH,
    get_config_path_from_env,
    get_env_overrides,
)
from keyhound.config.loader import ConfigLoader
from keyhound.config.schema import (
    HistoryScope,
    KeyhoundConfig,
    LogLevel,
    OutputFormatConfig,
    OutputSettings,
    ScanSettings,
    ValidatorSettings,
)
from keyhound.core.exceptions import ConfigError

__all__ = [
    "ENV_CONFIG_PATH",
    "ConfigLoader",
    "HistoryScope",
    "KeyhoundConfig",
    "LogLevel",
    "OutputFormatConfig",
    "OutputSettings",
    "ScanSettings",
    "ValidatorSettings",
    "get_env_overrides",
    "load_config",
]

# Mapping of CLI arg names to config paths
CLI_MAPPINGS: dict[str, tuple[str, str]] = {
    "include_snapshots": ("scan", "include_snapshots"),
    "include_history": ("scan", "include_history"),
    "history_scope": ("scan", "history_scope"),
    "branches": ("scan", "branches"),
    "region": ("validator", "region"),
    "endpoint_url": ("validator", "endpoint_url"),
    "concurrency": ("validator", "concurrency"),
    "timeout": ("validator", "timeout"),
    "format": ("output", "format"),
    "output": ("output", "output_path"),
    "output_path": ("output", "output_path"),
    "quiet": ("output", "quiet"),
    "verbose": ("output", "verbose"),
}


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``, skipping None values."""
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _normalize_cli_args(cli_args: dict[str, Any]) -> dict[str, Any]:
    """Convert flat CLI argument names into the nested config structure."""
    result: dict[str, Any] = {"scan": {}, "validator": {}, "output": {}}

    for arg_name, value in cli_args.items():
        if value is None:
            continue
        if arg_name in CLI_MAPPINGS:
            section, key = CLI_MAPPINGS[arg_name]
            result[section][key] = value
        else:
            result[arg_name] = value

    return {k: v for k, v in result.items() if v or not isinstance(v, dict)}


def load_config(
    config_path: Path | str | None = None,
    cli_args: dict[str, Any] | None = None,
    use_env: bool = True,
    use_file: bool = True,
) -> KeyhoundConfig:
    """Load configuration with proper priority handling.

    Args:
        config_path: Optional explicit path to a config file.
        cli_args: Optional dictionary of CLI argument overrides.
        use_env: Whether to apply environment variable overrides.
        use_file: Whether to look for and load config files.

    Returns:
        A fully merged KeyhoundConfig instance.

    Raises:
        ConfigError: If a config file is unreadable or the merged
            configuration is invalid.
    """
    config_dict: dict[str, Any] = {}

    if use_file:
        loader = ConfigLoader()
        file_path = config_path or get_config_path_from_env() or loader.find_config_file()
        if file_path:
            config_dict = _merge_configs(config_dict, loader.load_dict(file_path))

    if use_env:
        config_dict = _merge_configs(config_dict, get_env_overrides())

    if cli_args:
        config_dict = _merge_configs(config_dict, _normalize_cli_args(cli_args))

    try:
        return KeyhoundConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
