"""Guards around gateway calls: read retries, request pacing, circuit breaker.

Only transport-level trouble counts here. A ``TransportError`` covers both
an unreachable gateway and the 502/503/504 statuses in
``paydesk.errors.RETRYABLE_STATUSES``; any other API error is the caller's
problem and passes straight through.
"""

import time
import functools
from collections import deque
from typing import Callable, TypeVar, ParamSpec
from threading import Lock

from paydesk.errors import TransportError
from paydesk.utils.logging import get_logger


P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger("paydesk.resilience")


class CircuitBreakerOpen(Exception):
    """Raised while the gateway is considered down."""
    pass


def _describe(func: Callable) -> str:
    return getattr(func, "__qualname__", repr(func))


def with_retry(
    max_attempts: int = 3,
    backoff_base: float = 2.0,
    exceptions: tuple = (TransportError,),
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Retry a gateway read with exponential backoff.

    Waits ``backoff_base ** n`` seconds after the n-th failure (1s, 2s, 4s
    with the default base). When every attempt fails the last error is
    raised unchanged, so callers see the same typed exception as without
    retries.

    Args:
        max_attempts: Total attempts, including the first
        backoff_base: Base of the backoff in seconds
        exceptions: Errors worth another attempt
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = _describe(func)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(1, max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    delay = backoff_base ** (attempt - 1)
                    logger.warning(
                        f"Gateway call {name} failed ({e}); attempt {attempt + 1}/{max_attempts} "
                        f"in {delay:.1f}s"
                    )
                    time.sleep(delay)
            # Final attempt: its error, if any, reaches the caller as is
            return func(*args, **kwargs)

        return wrapper
    return decorator


class RateLimiter:
    """Blocks callers so at most ``requests_per_minute`` calls start per minute."""

    window = 60.0

    def __init__(self, requests_per_minute: int = 60):
        self.requests_per_minute = requests_per_minute
        self._started: deque = deque()
        self._lock = Lock()

    def acquire(self):
        """Wait until the sliding window has room, then claim a slot."""
        while True:
            with self._lock:
                now = time.monotonic()
                while self._started and now - self._started[0] >= self.window:
                    self._started.popleft()
                if len(self._started) < self.requests_per_minute:
                    self._started.append(now)
                    return
                wait = self._started[0] + self.window - now
            logger.debug(f"Rate limit reached, waiting {wait:.1f}s")
            time.sleep(min(wait, 0.5))


class CircuitBreaker:
    """Stops calling the gateway after repeated transport failures.

    After ``failure_threshold`` consecutive failures the breaker opens and
    every call fails fast with ``CircuitBreakerOpen``. Once
    ``recovery_timeout`` seconds pass, one trial call is let through: success
    closes the breaker, failure opens it again. Exceptions outside
    ``failure_exceptions`` (a 400 for a bad form, say) neither count nor reset.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        failure_exceptions: tuple = (TransportError,),
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_exceptions = failure_exceptions

        self._failures = 0
        self._opened_at: float | None = None
        self._lock = Lock()

    def _allow(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return True
            return time.monotonic() - self._opened_at >= self.recovery_timeout

    def call(self, func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
        """Run ``func`` unless the breaker is open."""
        if not self._allow():
            raise CircuitBreakerOpen("Circuit breaker is open")

        try:
            result = func(*args, **kwargs)
        except self.failure_exceptions:
            with self._lock:
                self._failures += 1
                if self._opened_at is not None or self._failures >= self.failure_threshold:
                    self._opened_at = time.monotonic()
                    logger.warning(f"Circuit opened after {self._failures} gateway failures")
            raise

        with self._lock:
            if self._opened_at is not None:
                logger.info("Gateway recovered, circuit closed")
            self._failures = 0
            self._opened_at = None
        return result
