"""Global constants for Stratus.

Centralizes the retry budgets and backoff numbers used by the retry
executor and its configuration defaults.
"""

# =============================================================================
# Retry Budgets (seconds)
# =============================================================================

SINGLE_CODE_RETRY_TIMEOUT_SECONDS = 120.0
"""Time budget for retrying on a single error code (2 minutes)."""

MULTI_CODE_RETRY_TIMEOUT_SECONDS = 60.0
"""Time budget for retrying on any of several error codes (1 minute)."""

# =============================================================================
# Backoff Shape
# =============================================================================

RETRY_BASE_DELAY_SECONDS = 0.5
"""Delay before the first retry."""

RETRY_MAX_DELAY_SECONDS = 10.0
"""Upper bound on any single backoff delay."""

RETRY_MIN_DELAY_SECONDS = 0.05
"""Floor on the poll interval so a retry loop never spins hot."""

RETRY_EXPONENTIAL_BASE = 2.0
"""Multiplier applied to the delay after each retry."""

RETRY_JITTER_FACTOR = 0.25
"""Maximum random jitter as a fraction of the computed delay."""
