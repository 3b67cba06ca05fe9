"""Logging section of the Stratus configuration.

Stratus logs through structlog. Each output destination gets its own
renderer: the console always receives human-readable lines on stderr, and
any file receives one JSON object per line, so log shippers never see
terminal color codes.

Example YAML:
    logging:
      level: DEBUG
      format: both
      file_path: /var/log/provider/stratus.jsonl
      colors: false
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from stratus.core.logging import LogFormat, LogLevel, configure_logging


class LogConfig(BaseModel):
    """Where Stratus log events go and how each destination renders them.

    ``format`` picks the destinations:

    - ``console``: readable lines to stderr. ``file_path`` must be unset.
    - ``json``: JSON lines to ``file_path``, or to stdout without one.
    - ``both``: readable lines to stderr and JSON lines to ``file_path``.
    """

    level: LogLevel = Field(
        default="INFO",
        description="Minimum level of retry and decoding events to emit",
    )
    format: LogFormat = Field(
        default="console",
        description="Destinations: console (stderr), json (file or stdout), "
        "or both (stderr plus JSON file)",
    )
    file_path: Path | None = Field(
        default=None,
        description="JSON lines file, rotated by size; required for format='both'",
    )
    max_file_size_mb: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="Size in MB at which the JSON file rotates",
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Rotated JSON files to keep",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Stamp each event with an ISO8601 UTC timestamp",
    )
    include_context: bool = Field(
        default=True,
        description="Add resource_type, operation and request_id of the "
        "lifecycle call being decorated",
    )
    colors: bool = Field(
        default=True,
        description="Use ANSI colors on the console destination",
    )

    @model_validator(mode="after")
    def _check_destinations(self) -> LogConfig:
        if self.format == "both" and self.file_path is None:
            raise ValueError("file_path is required when format='both'")
        if self.format == "console" and self.file_path is not None:
            raise ValueError(
                "file_path is only written with format='json' or format='both'"
            )
        return self

    def apply(self) -> None:
        """Install this configuration on structlog and the root logger."""
        configure_logging(
            level=self.level,
            format=self.format,
            file_path=self.file_path,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
            include_timestamps=self.include_timestamps,
            include_context=self.include_context,
            colors=self.colors,
        )
