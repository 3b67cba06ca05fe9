"""Cloud API error shape and classification.

Re-exports all public symbols.
"""

from stratus.core.errors.classifier import (
    matches_any_code,
    matches_code,
    matches_code_and_message,
    matches_status_code,
)
from stratus.core.errors.models import (
    CloudApiError,
    ErrorDetails,
    error_details,
    replace_message,
)

__all__ = [
    "CloudApiError",
    "ErrorDetails",
    "error_details",
    "matches_any_code",
    "matches_code",
    "matches_code_and_message",
    "matches_status_code",
    "replace_message",
]
