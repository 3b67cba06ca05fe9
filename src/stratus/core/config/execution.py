"""Retry and decoding configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from stratus.core.constants import (
    MULTI_CODE_RETRY_TIMEOUT_SECONDS,
    RETRY_BASE_DELAY_SECONDS,
    RETRY_EXPONENTIAL_BASE,
    RETRY_JITTER_FACTOR,
    RETRY_MAX_DELAY_SECONDS,
    RETRY_MIN_DELAY_SECONDS,
    SINGLE_CODE_RETRY_TIMEOUT_SECONDS,
)


class RetryConfig(BaseModel):
    """Configuration for the bounded-time retry executor.

    Budgets bound how long a call keeps retrying; once exhausted the
    executor makes one final attempt and returns its outcome.
    """

    single_code_timeout_seconds: float = Field(
        default=SINGLE_CODE_RETRY_TIMEOUT_SECONDS,
        gt=0,
        description="Time budget for retry_on_code (2 minutes)",
    )
    multi_code_timeout_seconds: float = Field(
        default=MULTI_CODE_RETRY_TIMEOUT_SECONDS,
        gt=0,
        description="Time budget for retry_on_codes (1 minute)",
    )
    base_delay_seconds: float = Field(
        default=RETRY_BASE_DELAY_SECONDS,
        gt=0,
        lt=1,
        description="Delay before the first retry (must be sub-second)",
    )
    max_delay_seconds: float = Field(
        default=RETRY_MAX_DELAY_SECONDS, gt=0, description="Maximum single delay"
    )
    min_delay_seconds: float = Field(
        default=RETRY_MIN_DELAY_SECONDS,
        gt=0,
        description="Floor on the poll interval",
    )
    exponential_base: float = Field(
        default=RETRY_EXPONENTIAL_BASE, gt=1, description="Exponential backoff multiplier"
    )
    jitter: bool = Field(default=True, description="Add randomness to delays")
    jitter_factor: float = Field(
        default=RETRY_JITTER_FACTOR,
        ge=0,
        le=1,
        description="Maximum jitter as a fraction of the delay",
    )

    @model_validator(mode="after")
    def _validate_delay_range(self) -> RetryConfig:
        if self.base_delay_seconds > self.max_delay_seconds:
            raise ValueError(
                f"base_delay_seconds ({self.base_delay_seconds}) must not exceed "
                f"max_delay_seconds ({self.max_delay_seconds})"
            )
        if self.jitter and self.base_delay_seconds * (1 + self.jitter_factor) >= 1:
            raise ValueError(
                "base_delay_seconds plus jitter must keep the first retry sub-second"
            )
        if self.min_delay_seconds > self.base_delay_seconds:
            raise ValueError(
                f"min_delay_seconds ({self.min_delay_seconds}) must not exceed "
                f"base_delay_seconds ({self.base_delay_seconds})"
            )
        return self


class DecodingConfig(BaseModel):
    """Configuration for encoded authorization message decoding."""

    enabled: bool = Field(
        default=True,
        description="Replace encoded authorization failures with decoded text",
    )
