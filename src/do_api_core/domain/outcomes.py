"""Classification results produced by the error decoder."""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import ApiError
from .messages import ResponseEnvelope


@dataclass(frozen=True)
class Success:
    envelope: ResponseEnvelope


@dataclass(frozen=True)
class Retryable:
    """A transient failure. `delay_seconds` is how long to wait before resending."""

    error: ApiError
    delay_seconds: float


@dataclass(frozen=True)
class Fatal:
    error: ApiError


Outcome = Success | Retryable | Fatal
