"""Rate-limit state as advertised by the provider."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from requests.structures import CaseInsensitiveDict

LIMIT_HEADER = "RateLimit-Limit"
REMAINING_HEADER = "RateLimit-Remaining"
RESET_HEADER = "RateLimit-Reset"


class RatelimitPolicy(StrEnum):
    """How a limiter reacts when the quota is exhausted."""

    RESPECT_BLOCKING = "respect_blocking"
    RESPECT_NONBLOCKING = "respect_nonblocking"
    IGNORE = "ignore"


@dataclass(frozen=True)
class RateLimitState:
    """Last known quota window. All fields are None until a response has been seen."""

    limit: int | None = None
    remaining: int | None = None
    reset_at: float | None = None

    @property
    def is_known(self) -> bool:
        return self.remaining is not None

    def exhausted_until(self, now: float) -> float | None:
        """Return `reset_at` if no request may be sent before it, else None."""
        if self.remaining is None or self.remaining > 0:
            return None
        if self.reset_at is None or now >= self.reset_at:
            return None
        return self.reset_at


def parse_reset_header(headers: Mapping[str, str]) -> float | None:
    """Return `RateLimit-Reset` as epoch seconds, or None when absent or malformed."""
    value = CaseInsensitiveDict(headers).get(RESET_HEADER)
    if value is None:
        return None
    try:
        return float(int(value.strip()))
    except ValueError:
        return None


def parse_ratelimit_headers(headers: Mapping[str, str]) -> RateLimitState | None:
    """Build a state from the three rate-limit headers.

    Returns None unless all three are present and integer-valued.
    """
    lookup = CaseInsensitiveDict(headers)
    raw = (lookup.get(LIMIT_HEADER), lookup.get(REMAINING_HEADER), lookup.get(RESET_HEADER))
    if any(value is None for value in raw):
        return None
    try:
        limit, remaining, reset = (int(str(value).strip()) for value in raw)
    except ValueError:
        return None
    return RateLimitState(limit=limit, remaining=max(0, remaining), reset_at=float(reset))
