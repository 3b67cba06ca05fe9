"""Tests for the bounded-time retry executor.

Tests cover:
- Success on first attempt and after retryable failures
- Non-retryable errors are raised after exactly one attempt
- Budget exhaustion triggers exactly one final attempt whose outcome is returned
- Backoff shape: sub-second start, non-decreasing, floored, capped
- Default budgets for retry_on_code (2 min) and retry_on_codes (1 min)
- Module-level helpers with real time
"""

import time

import pytest
from structlog.testing import capture_logs

from helpers import FakeClock
from stratus.core.config import RetryConfig
from stratus.core.errors import CloudApiError, codes, matches_code_and_message
from stratus.execution.retry import (
    RetryExecutor,
    retry_on_code,
    retry_on_codes,
    retry_when,
)

RETRYABLE = codes.INVALID_PARAMETER_VALUE


class FlakyOperation:
    """Fails with the given errors in order, then returns ``result``."""

    def __init__(self, errors: list[Exception], result: object = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def make_executor(clock: FakeClock, config: RetryConfig | None = None) -> RetryExecutor:
    return RetryExecutor(config, clock=clock.monotonic, sleep=clock.sleep, rng=lambda: 0.0)


# =============================================================================
# Success paths
# =============================================================================


class TestSuccess:
    """Tests for operations that eventually succeed."""

    def test_first_attempt_success_returns_immediately(self, clock: FakeClock) -> None:
        op = FlakyOperation([])

        result = make_executor(clock).retry_on_code(RETRYABLE, op)

        assert result == "ok"
        assert op.calls == 1
        assert clock.sleeps == []

    def test_succeeds_after_two_retryable_failures(self, clock: FakeClock) -> None:
        op = FlakyOperation([
            CloudApiError(RETRYABLE, "role not ready"),
            CloudApiError(RETRYABLE, "role not ready"),
        ], result={"Arn": "arn:role"})

        result = make_executor(clock).retry_on_code(RETRYABLE, op)

        assert result == {"Arn": "arn:role"}
        assert op.calls == 3
        assert len(clock.sleeps) == 2
        assert clock.now < 120

    def test_none_result_is_a_success(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")], result=None)

        assert make_executor(clock).retry_on_code(RETRYABLE, op) is None
        assert op.calls == 2

    def test_success_after_retries_is_logged(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")])

        with capture_logs() as logs:
            make_executor(clock).retry_on_code(RETRYABLE, op)

        events = [entry["event"] for entry in logs]
        assert "retry.attempt_failed" in events
        assert "retry.succeeded" in events


# =============================================================================
# Non-retryable errors
# =============================================================================


class TestNonRetryable:
    """Errors outside the retry signature are never retried."""

    def test_other_code_raised_after_one_attempt(self, clock: FakeClock) -> None:
        err = CloudApiError("AccessDenied", "not allowed")
        op = FlakyOperation([err] * 5)

        with pytest.raises(CloudApiError) as exc_info:
            make_executor(clock).retry_on_code(RETRYABLE, op)

        assert exc_info.value is err
        assert op.calls == 1
        assert clock.sleeps == []

    def test_unstructured_error_raised_after_one_attempt(self, clock: FakeClock) -> None:
        op = FlakyOperation([ValueError("bad input")])

        with pytest.raises(ValueError, match="bad input"):
            make_executor(clock).retry_on_codes([RETRYABLE, "Throttling"], op)

        assert op.calls == 1

    def test_error_with_failing_properties_is_raised_unchanged(self, clock: FakeClock) -> None:
        class OpaqueError(Exception):
            @property
            def response(self) -> dict:
                raise RuntimeError("response unavailable")

        err = OpaqueError("connection reset")
        op = FlakyOperation([err])

        with pytest.raises(OpaqueError) as exc_info:
            make_executor(clock).retry_on_code(RETRYABLE, op)

        assert exc_info.value is err
        assert op.calls == 1

    def test_non_retryable_after_retryable_stops_loop(self, clock: FakeClock) -> None:
        hard = CloudApiError("AccessDenied", "not allowed")
        op = FlakyOperation([CloudApiError(RETRYABLE, "x"), hard, CloudApiError(RETRYABLE, "x")])

        with pytest.raises(CloudApiError) as exc_info:
            make_executor(clock).retry_on_code(RETRYABLE, op)

        assert exc_info.value is hard
        assert op.calls == 2


# =============================================================================
# Budget exhaustion
# =============================================================================


class TestBudgetExhaustion:
    """Tests for the final attempt made after the budget runs out."""

    def test_exactly_one_attempt_after_deadline(self, clock: FakeClock) -> None:
        call_times: list[float] = []

        def always_retryable() -> None:
            call_times.append(clock.now)
            raise CloudApiError(RETRYABLE, f"attempt {len(call_times)}")

        with pytest.raises(CloudApiError) as exc_info:
            make_executor(clock).retry_on_code(RETRYABLE, always_retryable, timeout=5)

        after_deadline = [t for t in call_times if t >= 5]
        assert len(after_deadline) == 1
        assert call_times[-1] == after_deadline[0]
        # The final attempt's own error is surfaced verbatim
        assert exc_info.value.message == f"attempt {len(call_times)}"

    def test_final_attempt_success_is_returned(self, clock: FakeClock) -> None:
        def ready_after_deadline() -> str:
            if clock.now < 5:
                raise CloudApiError(RETRYABLE, "not yet")
            return "ready"

        assert make_executor(clock).retry_on_code(
            RETRYABLE, ready_after_deadline, timeout=5
        ) == "ready"

    def test_final_attempt_error_surfaces_even_if_non_retryable(
        self, clock: FakeClock
    ) -> None:
        final = CloudApiError("AccessDenied", "revoked")

        def operation() -> None:
            if clock.now < 5:
                raise CloudApiError(RETRYABLE, "not yet")
            raise final

        with pytest.raises(CloudApiError) as exc_info:
            make_executor(clock).retry_on_code(RETRYABLE, operation, timeout=5)

        assert exc_info.value is final

    def test_sleep_never_passes_deadline(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")] * 100)

        with pytest.raises(CloudApiError):
            make_executor(clock).retry_on_code(RETRYABLE, op, timeout=5)

        assert clock.now == pytest.approx(5)

    def test_budget_exhaustion_is_logged(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")] * 100)

        with capture_logs() as logs, pytest.raises(CloudApiError):
            make_executor(clock).retry_on_code(RETRYABLE, op, timeout=2)

        exhausted = [entry for entry in logs if entry["event"] == "retry.budget_exhausted"]
        assert len(exhausted) == 1
        assert exhausted[0]["log_level"] == "warning"


# =============================================================================
# Budgets and backoff
# =============================================================================


class TestBudgets:
    """Tests for the default budgets of each entry point."""

    def test_single_code_default_budget_is_two_minutes(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")] * 1000)

        with pytest.raises(CloudApiError):
            make_executor(clock).retry_on_code(RETRYABLE, op)

        assert clock.now == pytest.approx(120)

    def test_multi_code_default_budget_is_one_minute(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError("Throttling", "x")] * 1000)

        with pytest.raises(CloudApiError):
            make_executor(clock).retry_on_codes(codes.THROTTLING_CODES, op)

        assert clock.now == pytest.approx(60)

    def test_budgets_come_from_config(self, clock: FakeClock) -> None:
        config = RetryConfig(single_code_timeout_seconds=3, multi_code_timeout_seconds=2)
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")] * 1000)

        with pytest.raises(CloudApiError):
            make_executor(clock, config).retry_on_code(RETRYABLE, op)

        assert clock.now == pytest.approx(3)

    def test_codes_accepts_generator(self, clock: FakeClock) -> None:
        op = FlakyOperation([CloudApiError("Throttling", "x"), CloudApiError("Throttling", "x")])

        result = make_executor(clock).retry_on_codes((c for c in ["Throttling"]), op)

        # The codes are materialized once, so every attempt sees them
        assert result == "ok"
        assert op.calls == 3

    def test_single_string_codes_rejected(self, clock: FakeClock) -> None:
        op = FlakyOperation([])

        with pytest.raises(TypeError, match="retry_on_code"):
            make_executor(clock).retry_on_codes(codes.THROTTLING, op)

        with pytest.raises(TypeError):
            retry_on_codes(codes.THROTTLING, op)

        assert op.calls == 0

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_non_positive_timeout_rejected(self, clock: FakeClock, timeout: float) -> None:
        with pytest.raises(ValueError, match="timeout must be positive"):
            make_executor(clock).run(lambda exc: True, lambda: None, timeout=timeout)


class TestBackoff:
    """Tests for the delay sequence between attempts."""

    def test_delays_start_sub_second_and_never_decrease(self, clock: FakeClock) -> None:
        executor = RetryExecutor(clock=clock.monotonic, sleep=clock.sleep, rng=lambda: 0.99)
        op = FlakyOperation([CloudApiError(RETRYABLE, "x")] * 8)

        executor.retry_on_code(RETRYABLE, op)

        assert len(clock.sleeps) == 8
        assert clock.sleeps[0] < 1
        assert clock.sleeps == sorted(clock.sleeps)
        assert max(clock.sleeps) <= 10
        assert min(clock.sleeps) >= 0.05

    def test_delay_floor(self, clock: FakeClock) -> None:
        config = RetryConfig(base_delay_seconds=0.001, min_delay_seconds=0.001, jitter=False)
        executor = make_executor(clock, config)

        assert executor._next_delay(0.0, 1) == pytest.approx(0.001)

        default = make_executor(clock)
        assert default._next_delay(0.0, 1) >= 0.05

    def test_jitter_cannot_make_delay_decrease(self, clock: FakeClock) -> None:
        values = iter([0.99, 0.0, 0.99, 0.0])
        config = RetryConfig(exponential_base=1.01)
        executor = RetryExecutor(
            config, clock=clock.monotonic, sleep=clock.sleep, rng=lambda: next(values)
        )

        delays = []
        previous = 0.0
        for attempt in range(1, 5):
            previous = executor._next_delay(previous, attempt)
            delays.append(previous)

        assert delays == sorted(delays)
        # Second draw has no jitter and would otherwise be shorter than the first
        assert delays[1] == delays[0]

    def test_delay_is_capped(self, clock: FakeClock) -> None:
        executor = make_executor(clock)
        assert executor._next_delay(0.0, 50) == pytest.approx(10.0)


# =============================================================================
# Module-level helpers
# =============================================================================


class TestModuleHelpers:
    """Tests for retry_on_code(), retry_on_codes() and retry_when() with real time."""

    FAST = RetryConfig(base_delay_seconds=0.01, min_delay_seconds=0.01, max_delay_seconds=0.02)

    def test_retry_on_code_recovers(self) -> None:
        op = FlakyOperation([CloudApiError(RETRYABLE, "x"), CloudApiError(RETRYABLE, "x")])

        started = time.monotonic()
        assert retry_on_code(RETRYABLE, op, config=self.FAST) == "ok"

        assert op.calls == 3
        assert time.monotonic() - started < 120

    def test_retry_on_codes_recovers(self) -> None:
        op = FlakyOperation([CloudApiError("Throttling", "x")])

        assert retry_on_codes(["Throttling"], op, config=self.FAST) == "ok"
        assert op.calls == 2

    def test_retry_on_codes_final_attempt_with_short_timeout(self) -> None:
        op = FlakyOperation([CloudApiError("Throttling", "x")] * 1000)

        with pytest.raises(CloudApiError):
            retry_on_codes(["Throttling"], op, timeout=0.05, config=self.FAST)

        assert op.calls >= 2

    def test_retry_when_uses_message_signature(self) -> None:
        op = FlakyOperation([
            CloudApiError(RETRYABLE, "The role cannot be assumed by Lambda."),
            CloudApiError(RETRYABLE, "Invalid subnet"),
        ])

        with pytest.raises(CloudApiError, match="Invalid subnet"):
            retry_when(
                lambda exc: matches_code_and_message(exc, RETRYABLE, "cannot be assumed"),
                op,
                timeout=5,
                config=self.FAST,
            )

        assert op.calls == 2
