"""Exports for test fakes."""

from .clock import FakeClock
from .resilience import FakeRateLimiter
from .transport import ScriptedTransport, SentRequest

__all__ = [
    "FakeClock",
    "FakeRateLimiter",
    "ScriptedTransport",
    "SentRequest",
]
