"""Tests for read retries, rate limiting and the circuit breaker."""

import pytest

from paydesk.errors import BadRequestError, TransportError
from paydesk.utils import resilience
from paydesk.utils.resilience import (
    CircuitBreaker,
    CircuitBreakerOpen,
    RateLimiter,
    with_retry,
)


class Flaky:
    """Fails a fixed number of times, then succeeds."""

    def __init__(self, failures, error=TransportError):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error("gateway timeout")
        return "ok"


class FakeClock:
    """Stands in for the time module; sleeping advances the clock."""

    def __init__(self):
        self.now = 1000.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(resilience, "time", fake)
    return fake


class TestWithRetry:
    """Tests for the retry decorator."""

    def test_succeeds_after_failures(self, no_sleep):
        """Test that transport failures are retried with exponential backoff."""
        flaky = Flaky(2)
        assert with_retry(max_attempts=3)(flaky)() == "ok"
        assert flaky.calls == 3
        assert no_sleep == [1.0, 2.0]

    def test_last_error_raised_when_exhausted(self, no_sleep):
        """Test that the original typed error surfaces after the last attempt."""
        flaky = Flaky(5)
        with pytest.raises(TransportError, match="gateway timeout"):
            with_retry(max_attempts=2)(flaky)()
        assert flaky.calls == 2
        assert no_sleep == [1.0]

    def test_api_errors_not_retried(self, no_sleep):
        """Test that a 400 is not worth another attempt."""
        flaky = Flaky(1, error=BadRequestError)
        with pytest.raises(BadRequestError):
            with_retry(max_attempts=3)(flaky)()
        assert flaky.calls == 1
        assert no_sleep == []

    def test_single_attempt(self, no_sleep):
        """Test that one attempt means no retry at all."""
        flaky = Flaky(1)
        with pytest.raises(TransportError):
            with_retry(max_attempts=1)(flaky)()
        assert flaky.calls == 1

    def test_wraps_plain_functions(self, no_sleep):
        """Test that the wrapper keeps the wrapped function's name."""
        def fetch_balance():
            return "ok"

        wrapped = with_retry()(fetch_balance)
        assert wrapped.__name__ == "fetch_balance"
        assert wrapped() == "ok"


class TestCircuitBreaker:
    """Tests for the circuit breaker."""

    def test_opens_after_threshold(self, clock):
        """Test that the breaker fails fast after repeated transport failures."""
        breaker = CircuitBreaker(failure_threshold=2)
        for _ in range(2):
            with pytest.raises(TransportError):
                breaker.call(Flaky(1))

        never = Flaky(0)
        with pytest.raises(CircuitBreakerOpen, match="Circuit breaker is open"):
            breaker.call(never)
        assert never.calls == 0

    def test_ignores_api_errors(self, clock):
        """Test that client errors do not count towards opening."""
        breaker = CircuitBreaker(failure_threshold=1)
        with pytest.raises(BadRequestError):
            breaker.call(Flaky(1, error=BadRequestError))
        assert breaker.call(Flaky(0)) == "ok"

    def test_success_resets_failure_count(self, clock):
        """Test that only consecutive failures open the breaker."""
        breaker = CircuitBreaker(failure_threshold=2)
        with pytest.raises(TransportError):
            breaker.call(Flaky(1))
        assert breaker.call(Flaky(0)) == "ok"
        with pytest.raises(TransportError):
            breaker.call(Flaky(1))
        assert breaker.call(Flaky(0)) == "ok"

    def test_trial_call_after_recovery_timeout(self, clock):
        """Test that a successful call after the timeout closes the breaker."""
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=30)
        with pytest.raises(TransportError):
            breaker.call(Flaky(1))
        with pytest.raises(CircuitBreakerOpen):
            breaker.call(Flaky(0))

        clock.now += 30
        assert breaker.call(Flaky(0)) == "ok"
        assert breaker.call(Flaky(0)) == "ok"

    def test_failed_trial_reopens(self, clock):
        """Test that a failing trial call opens the breaker again."""
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=30)
        for _ in range(3):
            with pytest.raises(TransportError):
                breaker.call(Flaky(1))

        clock.now += 30
        with pytest.raises(TransportError):
            breaker.call(Flaky(1))
        with pytest.raises(CircuitBreakerOpen):
            breaker.call(Flaky(0))


class TestRateLimiter:
    """Tests for the sliding-window rate limiter."""

    def test_within_limit_does_not_wait(self, clock):
        """Test that calls under the limit go straight through."""
        limiter = RateLimiter(requests_per_minute=3)
        for _ in range(3):
            limiter.acquire()
        assert clock.sleeps == []

    def test_waits_for_window_to_free_up(self, clock):
        """Test that a call over the limit waits until the oldest slot expires."""
        limiter = RateLimiter(requests_per_minute=2)
        limiter.acquire()
        clock.now += 10
        limiter.acquire()

        limiter.acquire()

        assert sum(clock.sleeps) == pytest.approx(50.0)
        assert all(seconds <= 0.5 for seconds in clock.sleeps)
