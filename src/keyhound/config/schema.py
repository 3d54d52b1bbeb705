"""Configuration schema definitions using Pydantic Settings.

This module defines all configuration models for keyhound with proper
validation, defaults, and documentation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class OutputFormatConfig(str, Enum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"
    TABLE = "table"


class HistoryScope(str, Enum):
    """Where history-diff mode starts walking commits."""

    HEAD = "head"
    BRANCH = "branch"


class ScanSettings(BaseModel):
    """Settings for repository traversal."""

    include_snapshots: bool = Field(
        default=True,
        description="Scan the full file tree at every branch tip",
    )
    include_history: bool = Field(
        default=True,
        description="Scan every commit's diff against its first parent",
    )
    history_scope: HistoryScope = Field(
        default=HistoryScope.HEAD,
        description="List history once from HEAD, or from each branch tip",
    )
    branches: list[str] = Field(
        default_factory=list,
        description="Only scan these branches (empty = all local branches)",
    )

    @field_validator("history_scope", mode="before")
    @classmethod
    def validate_history_scope(cls, v: Any) -> HistoryScope:
        """Validate and normalize the history scope."""
        if v is None:
            return HistoryScope.HEAD
        if isinstance(v, HistoryScope):
            return v
        try:
            return HistoryScope(str(v).lower())
        except ValueError:
            valid = ", ".join(s.value for s in HistoryScope)
            raise ValueError(f"history_scope must be one of: {valid}")

    @field_validator("branches", mode="before")
    @classmethod
    def parse_branches(cls, v: Any) -> list[str]:
        """Parse branches from a comma-separated string or a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [b.strip() for b in v.split(",") if b.strip()]
        return list(v)


class ValidatorSettings(BaseModel):
    """Settings for the AWS identity probe."""

    region: str = Field(
        default="us-west-2",
        description="AWS region used to create the IAM client",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Override the IAM endpoint (e.g., a local emulator)",
    )
    concurrency: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Maximum number of probes in flight",
    )
    timeout: float = Field(
        default=15.0,
        gt=0,
        description="Timeout in seconds for a single probe",
    )


class OutputSettings(BaseModel):
    """Settings for report output."""

    format: OutputFormatConfig = Field(
        default=OutputFormatConfig.TEXT,
        description="Report format",
    )
    output_path: Path | None = Field(
        default=None,
        description="Path to save the report (None for stdout)",
    )
    quiet: bool = Field(
        default=False,
        description="Suppress non-essential output",
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose output",
    )

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Any) -> OutputFormatConfig:
        """Validate and normalize output format."""
        if v is None:
            return OutputFormatConfig.TEXT
        if isinstance(v, OutputFormatConfig):
            return v
        v = str(v).lower()
        try:
            return OutputFormatConfig(v)
        except ValueError:
            valid = ", ".join(f.value for f in OutputFormatConfig)
            raise ValueError(f"format must be one of: {valid}")


class KeyhoundConfig(BaseSettings):
    """Main configuration for keyhound.

    Combines all settings sections into a single configuration object.
    This can be loaded from environment variables, config files, or
    constructed programmatically.
    """

    model_config = SettingsConfigDict(
        env_prefix="KEYHOUND_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    scan: ScanSettings = Field(
        default_factory=ScanSettings,
        description="Traversal settings",
    )
    validator: ValidatorSettings = Field(
        default_factory=ValidatorSettings,
        description="Identity probe settings",
    )
    output: OutputSettings = Field(
        default_factory=OutputSettings,
        description="Output settings",
    )
    log_level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> LogLevel:
        """Validate and normalize log level."""
        if v is None:
            return LogLevel.WARNING
        if isinstance(v, LogLevel):
            return v
        v = str(v).lower()
        try:
            return LogLevel(v)
        except ValueError:
            valid = ", ".join(level.value for level in LogLevel)
            raise ValueError(f"log_level must be one of: {valid}")
