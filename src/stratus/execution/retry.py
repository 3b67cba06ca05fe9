"""Bounded-time retry executor for transient cloud API failures.

Wraps a zero-argument operation in a retry loop driven by an error
signature predicate:

- The operation returns normally → the result is returned at once.
- It raises an error matching the signature → back off and try again
  while the time budget lasts.
- It raises anything else → re-raised immediately, never retried.
- The budget runs out while the error is still retryable → the operation
  is invoked exactly once more and whatever it produces (result or
  exception) is handed to the caller. The caller never sees an internal
  timeout, only a real API outcome.

Backoff is exponential with jitter, starts sub-second, never decreases and
never drops below a floor of tens of milliseconds.

Example usage:
    from stratus.execution.retry import retry_on_code, retry_on_codes

    role = retry_on_code(
        "InvalidParameterValue",
        lambda: iam.get_role(RoleName=name),
    )

    retry_on_codes(
        ("ThrottlingException", "DependencyViolation"),
        lambda: ec2.delete_security_group(GroupId=group_id),
    )

The loop blocks the calling thread. Each call owns all of its state, so
concurrent calls on the same executor do not interact.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from stratus.core.config import RetryConfig
from stratus.core.errors import matches_any_code, matches_code
from stratus.core.logging import get_logger

T = TypeVar("T")

RetryPredicate = Callable[[BaseException], bool]
"""Decides whether an exception raised by the operation is retryable."""

_logger = get_logger("retry")


@dataclass
class RetryOutcome:
    """Summary of one retry loop, logged when the loop finishes.

    Attributes:
        attempts: Total number of times the operation was invoked.
        elapsed_seconds: Wall time spent in the loop, sleeps included.
        timed_out: Whether the budget ran out on a retryable error.
        succeeded: Whether the last invocation returned normally.
    """

    attempts: int
    elapsed_seconds: float
    timed_out: bool
    succeeded: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "attempts": self.attempts,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "timed_out": self.timed_out,
            "succeeded": self.succeeded,
        }


class RetryExecutor:
    """Runs operations under a bounded-time retry policy.

    Thread-safe: the executor holds only configuration; every call keeps
    its attempt count, delay and deadline in local variables.

    Attributes:
        config: Budgets and backoff shape.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Retry configuration. Uses defaults if not provided.
            clock: Monotonic clock in seconds.
            sleep: Blocking sleep function.
            rng: Source of jitter in [0, 1).
        """
        self.config = config or RetryConfig()
        self._clock = clock
        self._sleep = sleep
        self._rng = rng

    def retry_on_code(
        self,
        code: str,
        operation: Callable[[], T],
        *,
        timeout: float | None = None,
    ) -> T:
        """Retry ``operation`` while it fails with error code ``code``.

        Args:
            code: The retryable error code.
            operation: Zero-argument callable to invoke.
            timeout: Budget in seconds. Defaults to the single-code budget.

        Returns:
            The operation's result.

        Raises:
            Whatever the operation raised on its last invocation.
        """
        budget = timeout if timeout is not None else self.config.single_code_timeout_seconds
        return self.run(lambda exc: matches_code(exc, code), operation, timeout=budget)

    def retry_on_codes(
        self,
        codes: Iterable[str],
        operation: Callable[[], T],
        *,
        timeout: float | None = None,
    ) -> T:
        """Retry ``operation`` while it fails with any of ``codes``.

        Args:
            codes: The retryable error codes.
            operation: Zero-argument callable to invoke.
            timeout: Budget in seconds. Defaults to the multi-code budget.

        Returns:
            The operation's result.

        Raises:
            TypeError: If ``codes`` is a single string.
            Whatever the operation raised on its last invocation.
        """
        if isinstance(codes, str):
            raise TypeError(
                f"codes must be an iterable of codes, not the string {codes!r}; "
                "use retry_on_code for a single code"
            )
        retryable = tuple(codes)
        budget = timeout if timeout is not None else self.config.multi_code_timeout_seconds
        return self.run(lambda exc: matches_any_code(exc, retryable), operation, timeout=budget)

    def run(
        self,
        predicate: RetryPredicate,
        operation: Callable[[], T],
        *,
        timeout: float,
    ) -> T:
        """Invoke ``operation`` until it succeeds, fails hard, or time runs out.

        Args:
            predicate: Returns True for exceptions worth retrying.
            operation: Zero-argument callable to invoke.
            timeout: Budget in seconds, must be positive.

        Returns:
            The operation's result.

        Raises:
            ValueError: If timeout is not positive.
            Exception: A non-retryable exception from any attempt, or any
                exception from the final attempt made after the budget ran out.
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        started = self._clock()
        deadline = started + timeout
        attempts = 0
        delay = 0.0

        while True:
            attempts += 1
            try:
                result = operation()
            except Exception as exc:
                if not predicate(exc):
                    _logger.debug(
                        "retry.non_retryable",
                        attempt=attempts,
                        error_type=type(exc).__name__,
                    )
                    self._log_outcome(started, attempts, timed_out=False, succeeded=False)
                    raise

                remaining = deadline - self._clock()
                if remaining <= 0:
                    break

                delay = self._next_delay(delay, attempts)
                _logger.debug(
                    "retry.attempt_failed",
                    attempt=attempts,
                    error=str(exc),
                    delay_seconds=round(delay, 3),
                    remaining_seconds=round(remaining, 3),
                )
                self._sleep(min(delay, remaining))
                if self._clock() >= deadline:
                    break
                continue

            if attempts > 1:
                _logger.info("retry.succeeded", attempts=attempts)
            self._log_outcome(started, attempts, timed_out=False, succeeded=True)
            return result

        # Budget spent on a retryable error: one final real attempt
        _logger.warning("retry.budget_exhausted", attempts=attempts, timeout_seconds=timeout)
        attempts += 1
        try:
            result = operation()
        except Exception:
            self._log_outcome(started, attempts, timed_out=True, succeeded=False)
            raise
        self._log_outcome(started, attempts, timed_out=True, succeeded=True)
        return result

    def _next_delay(self, previous: float, attempt: int) -> float:
        """Compute the delay before retry number ``attempt``.

        Exponential in the attempt number, jittered, capped at the maximum,
        floored at the minimum poll interval, and never below ``previous``.
        """
        cfg = self.config
        delay = cfg.base_delay_seconds * (cfg.exponential_base ** (attempt - 1))
        if cfg.jitter:
            delay += delay * cfg.jitter_factor * self._rng()
        delay = min(delay, cfg.max_delay_seconds)
        return max(delay, previous, cfg.min_delay_seconds)

    def _log_outcome(
        self,
        started: float,
        attempts: int,
        *,
        timed_out: bool,
        succeeded: bool,
    ) -> None:
        outcome = RetryOutcome(
            attempts=attempts,
            elapsed_seconds=self._clock() - started,
            timed_out=timed_out,
            succeeded=succeeded,
        )
        _logger.debug("retry.finished", **outcome.to_dict())


def retry_on_code(
    code: str,
    operation: Callable[[], T],
    *,
    timeout: float | None = None,
    config: RetryConfig | None = None,
) -> T:
    """Retry ``operation`` on error code ``code`` for up to 2 minutes.

    See ``RetryExecutor.retry_on_code``.
    """
    return RetryExecutor(config).retry_on_code(code, operation, timeout=timeout)


def retry_on_codes(
    codes: Iterable[str],
    operation: Callable[[], T],
    *,
    timeout: float | None = None,
    config: RetryConfig | None = None,
) -> T:
    """Retry ``operation`` on any of ``codes`` for up to 1 minute.

    See ``RetryExecutor.retry_on_codes``.
    """
    return RetryExecutor(config).retry_on_codes(codes, operation, timeout=timeout)


def retry_when(
    predicate: RetryPredicate,
    operation: Callable[[], T],
    *,
    timeout: float,
    config: RetryConfig | None = None,
) -> T:
    """Retry ``operation`` while ``predicate`` accepts the raised exception.

    Use with a bound classifier for finer signatures, e.g.::

        retry_when(
            lambda exc: matches_code_and_message(exc, "InvalidParameterValue", "role"),
            create_function,
            timeout=120,
        )
    """
    return RetryExecutor(config).run(predicate, operation, timeout=timeout)


__all__ = [
    "RetryExecutor",
    "RetryOutcome",
    "RetryPredicate",
    "retry_on_code",
    "retry_on_codes",
    "retry_when",
]
