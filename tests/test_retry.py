"""
Tests for retry logic and deadline-bounded waits.
"""

import pytest
from smartform.retry import RetryError, exponential_backoff, wait_for


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.1)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1

    def test_retry_then_succeed(self):
        """Function that fails then succeeds should retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01)
        def fails_twice():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectionError("Temporary failure")
            return "success"

        assert fails_twice() == "success"
        assert call_count[0] == 3

    def test_all_retries_exhausted(self):
        """Should raise RetryError after all attempts fail."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError):
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries

    def test_only_catches_specified_exceptions(self):
        """Should only retry on specified exception types."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, exceptions=(ConnectionError,))
        def raises_value_error():
            call_count[0] += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()

        assert call_count[0] == 1

    def test_exponential_delay_with_cap(self):
        """Delay should grow exponentially and respect max_delay."""
        delays = []

        @exponential_backoff(
            max_retries=4,
            base_delay=0.01,
            max_delay=0.03,
            exponential_base=2.0,
            on_retry=lambda attempt, exc, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == [0.01, 0.02, 0.03, 0.03]


class TestWaitFor:
    """Test the cooperative deadline wait."""

    class Clock:
        def __init__(self):
            self.now = 0.0

        def __call__(self):
            return self.now

        def sleep(self, seconds):
            self.now += seconds

    def test_returns_first_truthy_result(self):
        clock = self.Clock()
        results = iter([None, [], ["q1"]])
        assert wait_for(lambda: next(results), 5, 0.5, clock, clock.sleep) == ["q1"]
        assert clock.now == 1.0

    def test_deadline_returns_none(self):
        clock = self.Clock()
        assert wait_for(lambda: False, 2, 0.5, clock, clock.sleep) is None
        assert clock.now == 2.0

    def test_zero_timeout_checks_once(self):
        calls = []

        def condition():
            calls.append(1)
            return False

        assert wait_for(condition, 0, sleep=lambda s: pytest.fail("should not sleep")) is None
        assert len(calls) == 1

    def test_immediate_success_does_not_sleep(self):
        assert wait_for(lambda: "ready", 10, sleep=lambda s: pytest.fail("should not sleep")) == "ready"
