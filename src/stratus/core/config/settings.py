"""Top-level Stratus configuration."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from stratus.core.config.execution import DecodingConfig, RetryConfig
from stratus.core.config.log import LogConfig


class StratusConfig(BaseModel):
    """Complete configuration for the resilience layer.

    Example YAML:
        retry:
          single_code_timeout_seconds: 120
          multi_code_timeout_seconds: 60
        decoding:
          enabled: true
        logging:
          level: DEBUG
          format: json
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)
    decoding: DecodingConfig = Field(default_factory=DecodingConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> StratusConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> StratusConfig:
        """Load configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    def configure_logging(self) -> None:
        """Apply the ``logging`` section to structlog and the root logger."""
        self.logging.apply()
