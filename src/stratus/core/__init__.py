"""Core error model, configuration and logging."""

from stratus.core.config import DecodingConfig, LogConfig, RetryConfig, StratusConfig
from stratus.core.errors import CloudApiError, ErrorDetails, error_details
from stratus.core.resources import Resource, ResourceImporter

__all__ = [
    "CloudApiError",
    "DecodingConfig",
    "ErrorDetails",
    "LogConfig",
    "Resource",
    "ResourceImporter",
    "RetryConfig",
    "StratusConfig",
    "error_details",
]
