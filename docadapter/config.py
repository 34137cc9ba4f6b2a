"""
Configuration for docadapter.

Uses pydantic-settings so every option can also come from the environment.
Explicit values passed to configure() always win over the environment.

Invariants:
    - All settings have sensible defaults for local development
    - in_memory_only takes precedence over filename
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings


class StoreOptions(BaseSettings):
    """Options consumed once by configure() to build the embedded store."""

    filename: str | None = Field(
        default=None, description="Database file path (None = in memory)"
    )
    in_memory_only: bool = Field(default=False, description="Ignore filename, keep data in memory")
    autoload: bool = Field(default=True, description="Open the database at construction")
    timestamp_data: bool = Field(
        default=False, description="Maintain createdAt/updatedAt fields (Unix ms)"
    )

    # SQLite tuning
    wal_mode: bool = Field(default=True, description="Enable SQLite WAL journal mode")
    busy_timeout_ms: int = Field(default=5000, description="SQLite busy timeout")

    model_config = {"env_prefix": "DOCADAPTER_STORE_"}

    @property
    def in_memory(self) -> bool:
        """Whether the store keeps its data in memory only."""
        return self.in_memory_only or not self.filename

    @classmethod
    def coerce(cls, options: StoreOptions | Mapping[str, Any] | None) -> StoreOptions:
        """Build options from an instance, a mapping, or the environment."""
        if options is None:
            return cls()
        if isinstance(options, StoreOptions):
            return options
        return cls(**dict(options))


class LoggingSettings(BaseSettings):
    """Logging configuration loaded from environment."""

    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "DOCADAPTER_"}
