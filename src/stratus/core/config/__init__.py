"""Configuration models for Stratus.

Pydantic models for loading and validating the resilience layer's YAML
configuration. All models are re-exported from this ``__init__``.
"""

from stratus.core.config.execution import DecodingConfig, RetryConfig
from stratus.core.config.log import LogConfig
from stratus.core.config.settings import StratusConfig

__all__ = [
    "DecodingConfig",
    "LogConfig",
    "RetryConfig",
    "StratusConfig",
]
