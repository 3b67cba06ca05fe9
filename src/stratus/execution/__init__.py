"""Execution layer: bounded-time retries for transient API failures."""

from stratus.execution.retry import (
    RetryExecutor,
    RetryOutcome,
    RetryPredicate,
    retry_on_code,
    retry_on_codes,
    retry_when,
)

__all__ = [
    "RetryExecutor",
    "RetryOutcome",
    "RetryPredicate",
    "retry_on_code",
    "retry_on_codes",
    "retry_when",
]
