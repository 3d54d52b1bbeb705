"""Configuration file loading and discovery.

This module handles finding and loading configuration files from various
locations and formats (YAML, TOML, JSON).
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from keyhound.config.schema import KeyhoundConfig
from keyhound.core.exceptions import ConfigError

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = [
    ".keyhound.yml",
    ".keyhound.yaml",
    ".keyhound.toml",
    "keyhound.config.json",
]

# User-level config directories
USER_CONFIG_DIRS = [
    Path.home() / ".config" / "keyhound",
]


class ConfigLoader:
    """Loads and parses configuration files.

    Handles automatic discovery of config files in the working directory,
    its parents, and user-level config directories.
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        """Initialize the config loader.

        Args:
            search_paths: Additional directories to search for config files.
        """
        self.search_paths = search_paths or []

    def find_config_file(self, start_path: Path | None = None) -> Path | None:
        """Find a configuration file by searching standard locations.

        Searches the start directory (or cwd) and its parents, then the user
        config directories, then any additional search paths.

        Returns:
            Path to the config file if found, None otherwise.
        """
        start = Path(start_path).resolve() if start_path else Path.cwd()

        search_dirs: list[Path] = [start, *start.parents]
        search_dirs.extend(USER_CONFIG_DIRS)
        search_dirs.extend(self.search_paths)

        for search_dir in search_dirs:
            if not search_dir.is_dir():
                continue
            for config_name in CONFIG_FILE_NAMES:
                config_path = search_dir / config_name
                if config_path.is_file():
                    return config_path

        return None

    def load_dict(self, path: Path | str) -> dict[str, Any]:
        """Load a configuration file into a plain dictionary.

        Raises:
            ConfigError: If the file is missing or cannot be parsed.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        if not path.is_file():
            raise ConfigError(f"Configuration path is not a file: {path}")

        content = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()

        if suffix in (".yml", ".yaml"):
            data = self._load_yaml(content, path)
        elif suffix == ".toml":
            data = self._load_toml(content, path)
        else:
            data = self._load_json(content, path)

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file must contain a mapping, got: {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def load(self, path: Path | str) -> KeyhoundConfig:
        """Load and validate a configuration file.

        Raises:
            ConfigError: If the file cannot be loaded or fails validation.
        """
        data = self.load_dict(path)
        try:
            return KeyhoundConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    def _load_yaml(self, content: str, path: Path) -> Any:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return {} if data is None else data

    def _load_toml(self, content: str, path: Path) -> Any:
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def _load_json(self, content: str, path: Path) -> Any:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
