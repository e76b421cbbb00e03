"""Concrete infrastructure implementations."""

from .clock import SystemClock
from .resilience import RateLimiter, RetryPolicy
from .transport import RequestsTransport

__all__ = [
    "RateLimiter",
    "RequestsTransport",
    "RetryPolicy",
    "SystemClock",
]
