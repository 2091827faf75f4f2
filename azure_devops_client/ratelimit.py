"""Self-imposed token bucket rate limiting, shared per connection identity.

Azure DevOps sends no rate limit headers, so requests are spaced out locally.
Limiters live in a registry keyed by the connection identifier; every client
built with the same identifier draws tokens from the same bucket.
"""

import logging
import math
import threading
import time

from .errors import DeadlineExceeded, WaitCancelled

logger = logging.getLogger(__name__)

DEFAULT_BURST = 100


class RateLimiter:
    """Token bucket limiter.

    Tokens refill at `rate` per second up to `burst`. A rate of `math.inf`
    disables limiting entirely.
    """

    def __init__(self, rate: float = math.inf, burst: int = DEFAULT_BURST):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")
        self.rate = rate
        self.burst = burst
        self._tokens = float(burst)
        self._last = time.monotonic()
        self._lock = threading.Lock()
        self.waits = 0  # count of waits that actually slept

    def _advance(self, now: float) -> None:
        elapsed = max(0.0, now - self._last)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last = now

    def _reserve(self, timeout: float | None) -> float:
        """Take one token and return how long the caller must sleep for it."""
        with self._lock:
            now = time.monotonic()
            self._advance(now)
            delay = 0.0 if self._tokens >= 1 else (1 - self._tokens) / self.rate
            if timeout is not None and delay > timeout:
                raise DeadlineExceeded(
                    f"rate limit wait of {delay:.3f}s would exceed the {timeout:.3f}s deadline"
                )
            self._tokens -= 1
            if delay > 0:
                self.waits += 1
            return delay

    def _cancel_reservation(self) -> None:
        with self._lock:
            self._tokens = min(float(self.burst), self._tokens + 1)

    def wait(self, cancel: threading.Event | None = None, timeout: float | None = None) -> None:
        """Block until a token is available.

        Raises WaitCancelled if `cancel` is set before or during the wait, and
        DeadlineExceeded if the wait could not finish within `timeout` seconds.
        Returns without consuming anything when either is raised.
        """
        if cancel is not None and cancel.is_set():
            raise WaitCancelled("cancelled before acquiring a rate limit token")
        if timeout is not None and timeout <= 0:
            raise DeadlineExceeded("deadline already passed")
        if math.isinf(self.rate):
            return

        delay = self._reserve(timeout)
        if delay <= 0:
            return

        logger.debug("Rate limited, waiting %.3fs for a token", delay)
        if cancel is None:
            time.sleep(delay)
            return
        if cancel.wait(delay):
            self._cancel_reservation()
            raise WaitCancelled("cancelled while waiting for a rate limit token")


class RateLimiterRegistry:
    """Limiters keyed by connection identifier.

    Unknown identifiers get a fresh limiter built from the registry defaults.
    """

    def __init__(self, default_rate: float = math.inf, default_burst: int = DEFAULT_BURST):
        self.default_rate = default_rate
        self.default_burst = default_burst
        self._limiters: dict[str, RateLimiter] = {}
        self._lock = threading.Lock()

    def get(self, urn: str) -> RateLimiter:
        """Get or create the limiter for `urn`."""
        return self.get_or_set(urn, None)

    def get_or_set(self, urn: str, fallback: RateLimiter | None) -> RateLimiter:
        """Return the limiter for `urn`, registering `fallback` if there is none yet."""
        with self._lock:
            limiter = self._limiters.get(urn)
            if limiter is None:
                limiter = fallback or RateLimiter(self.default_rate, self.default_burst)
                self._limiters[urn] = limiter
                logger.debug(
                    "Registered rate limiter for %s (rate=%s, burst=%s)",
                    urn, limiter.rate, limiter.burst,
                )
            return limiter

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)

    def __contains__(self, urn: str) -> bool:
        with self._lock:
            return urn in self._limiters
