"""Stratus: retries and authorization-message decoding for cloud API clients."""

from stratus.authz import StsAuthorizationDecoder, decode_error, decorate_all
from stratus.core import CloudApiError, Resource, ResourceImporter, StratusConfig
from stratus.core.errors import (
    matches_any_code,
    matches_code,
    matches_code_and_message,
    matches_status_code,
)
from stratus.execution import RetryExecutor, retry_on_code, retry_on_codes, retry_when

__version__ = "0.1.0"

__all__ = [
    "CloudApiError",
    "Resource",
    "ResourceImporter",
    "RetryExecutor",
    "StratusConfig",
    "StsAuthorizationDecoder",
    "decode_error",
    "decorate_all",
    "matches_any_code",
    "matches_code",
    "matches_code_and_message",
    "matches_status_code",
    "retry_on_code",
    "retry_on_codes",
    "retry_when",
]
