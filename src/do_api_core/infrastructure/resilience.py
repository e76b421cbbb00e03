"""Resilience utilities for infrastructure.

Usage example:
    from do_api_core.infrastructure.resilience import RateLimiter, RetryPolicy

    rate_limiter = RateLimiter(max_wait_seconds=120)
    retry_policy = RetryPolicy(max_retries=3, backoff_factor=0.5)
"""

from __future__ import annotations

import random
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import override

from ..domain.ratelimit import RateLimitState, RatelimitPolicy, parse_ratelimit_headers
from ..exceptions import RateLimited, RequestCancelled
from ..observability import get_logger
from ..protocols import Clock
from ..protocols import RateLimiter as RateLimiterProtocol
from ..protocols import RetryPolicy as RetryPolicyProtocol
from .clock import SystemClock, wait_for_event

logger = get_logger("do_api_core.ratelimit")


@dataclass
class RateLimiter(RateLimiterProtocol):
    """Self-throttling limiter driven by the provider's rate-limit headers.

    The provider is the source of truth: every response carrying the three
    `RateLimit-*` headers overwrites the local state verbatim. Between
    responses each authorised send decrements `remaining`, so concurrent
    callers can never both take the last slot of a window.

    The lock guards only decide-and-decrement and never a sleep. While the
    window is exhausted one caller sleeps on the clock until the reset and
    the rest wait for it to finish. `record()` wakes every waiter, so a
    fresher window reported mid-wait is acted on at once.
    """

    policy: RatelimitPolicy = RatelimitPolicy.RESPECT_BLOCKING
    max_wait_seconds: float = 3600.0
    clock: Clock = field(default_factory=SystemClock)
    state: RateLimitState = field(default_factory=RateLimitState)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _wake: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _sleeping: bool = field(default=False, init=False, repr=False)

    @override
    def acquire(self, cancel: threading.Event | None = None) -> None:
        """Block until one request may be sent, then count it against the window.

        Raises:
            RateLimited: If the policy is non-blocking and the window is exhausted,
                or if the wait would exceed `max_wait_seconds`.
            RequestCancelled: If `cancel` is set before or while waiting.
        """
        while True:
            with self._lock:
                if cancel is not None and cancel.is_set():
                    raise RequestCancelled()
                now = self.clock.time()
                until = self._blocked_until(now)
                if until is None:
                    self._reset_if_expired(now)
                    self._consume()
                    return
                wake = self._wake
                sleeper = not self._sleeping
                if sleeper:
                    self._sleeping = True
                    logger.info(
                        "Rate limit exhausted; waiting %.1fs for the window to reset", until - now
                    )
            if not sleeper:
                wait_for_event(wake, cancel)
                continue
            try:
                self.clock.wait(wake, until - now, cancel)
            finally:
                with self._lock:
                    self._sleeping = False
                    self._notify()

    @override
    def record(self, headers: Mapping[str, str]) -> None:
        """Overwrite state from response headers; leave it untouched if they are missing."""
        observed = parse_ratelimit_headers(headers)
        if observed is None:
            logger.debug("Response carried no usable rate-limit headers; state unchanged")
            return
        with self._lock:
            self.state = observed
            self._notify()

    @override
    def snapshot(self) -> RateLimitState:
        with self._lock:
            return self.state

    def _blocked_until(self, now: float) -> float | None:
        until = self.state.exhausted_until(now)
        if until is None or self.policy is RatelimitPolicy.IGNORE:
            return None
        if self.policy is RatelimitPolicy.RESPECT_NONBLOCKING:
            raise RateLimited("rate limit exhausted", until=until, cached=True)
        wait = until - now
        if wait > self.max_wait_seconds:
            raise RateLimited(
                f"rate limit resets in {wait:.1f}s, "
                f"beyond the {self.max_wait_seconds:.1f}s wait budget",
                until=until,
                cached=True,
            )
        return until

    def _notify(self) -> None:
        # Waiters hold the old event; swap in a fresh one for the next round.
        self._wake.set()
        self._wake = threading.Event()

    def _reset_if_expired(self, now: float) -> None:
        reset_at = self.state.reset_at
        if reset_at is None or now < reset_at:
            return
        # The next response will report the real figure.
        logger.info("Resetting rate limiter; current time is past %.0f", reset_at)
        self.state = RateLimitState(limit=self.state.limit, remaining=self.state.limit)

    def _consume(self) -> None:
        remaining = self.state.remaining
        if remaining is not None and remaining > 0:
            self.state = RateLimitState(
                limit=self.state.limit,
                remaining=remaining - 1,
                reset_at=self.state.reset_at,
            )


@dataclass
class RetryPolicy(RetryPolicyProtocol):
    """Retry policy for transient failures."""

    max_retries: int = 3
    backoff_factor: float = 0.5
    max_backoff_seconds: float = 60.0
    min_backoff_seconds: float = 1.0
    jitter_seconds: float = 0.1

    @override
    def compute_backoff(self, attempt: int) -> float:
        """Compute an exponential backoff delay, capped, plus jitter."""
        base = min(self.max_backoff_seconds, self.backoff_factor * (2**attempt))
        if self.jitter_seconds > 0:
            base += random.uniform(0.0, self.jitter_seconds)
        return float(base)

    @override
    def rate_limit_delay(self, reset_at: float | None, now: float) -> float:
        """Wait until the advertised reset, never less than the backoff floor."""
        if reset_at is None:
            return self.min_backoff_seconds
        return max(reset_at - now, self.min_backoff_seconds)
