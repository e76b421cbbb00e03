"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that the executor and page walker
depend on, enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .domain.messages import RequestDescriptor, ResponseEnvelope
from .domain.ratelimit import RateLimitState, RatelimitPolicy


@runtime_checkable
class Transport(Protocol):
    """Abstract HTTP transport primitive."""

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> ResponseEnvelope:
        """Send one request and return whatever response came back.

        Raises:
            TransportError: If no response was received.
        """
        ...


@runtime_checkable
class Clock(Protocol):
    """Wall clock and sleeping, injectable so waits can be tested without sleeping."""

    def time(self) -> float:
        """Return the current time in epoch seconds."""
        ...

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> None:
        """Sleep for `seconds`.

        Raises:
            RequestCancelled: If `cancel` is set before or during the sleep.
        """
        ...

    def wait(
        self, wake: threading.Event, seconds: float, cancel: threading.Event | None = None
    ) -> bool:
        """Sleep for up to `seconds`, returning True early once `wake` is set.

        Raises:
            RequestCancelled: If `cancel` is set before or during the wait.
        """
        ...


@runtime_checkable
class RateLimiter(Protocol):
    """Abstract rate limiter for outbound requests."""

    policy: RatelimitPolicy
    max_wait_seconds: float

    def acquire(self, cancel: threading.Event | None = None) -> None:
        """Block until one request may be sent."""
        ...

    def record(self, headers: Mapping[str, str]) -> None:
        """Update state from a completed response's headers."""
        ...

    def snapshot(self) -> RateLimitState:
        """Return the current state."""
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Abstract retry policy for transient failures."""

    max_retries: int

    def compute_backoff(self, attempt: int) -> float:
        """Return a delay for the next retry attempt."""
        ...

    def rate_limit_delay(self, reset_at: float | None, now: float) -> float:
        """Return a delay for retrying after a 429."""
        ...


@runtime_checkable
class Executor(Protocol):
    """Anything that can turn a descriptor into a successful response."""

    def execute(
        self, descriptor: RequestDescriptor, cancel: threading.Event | None = None
    ) -> ResponseEnvelope:
        """Send `descriptor`, returning the response or raising an ApiError."""
        ...
