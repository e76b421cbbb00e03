"""Classify completed responses and transport failures into outcomes.

| status              | outcome                                   |
|---------------------|-------------------------------------------|
| 2xx                 | Success                                   |
| 401, 403            | Fatal(AuthError)                          |
| 404                 | Fatal(NotFound)                           |
| other 4xx           | Fatal(ValidationError)                    |
| 429                 | Retryable(RateLimited), wait for reset    |
| 5xx                 | Retryable(ServerError) if idempotent      |
| no response         | Retryable(TransportError) if idempotent   |

A 5xx or a lost response may follow a mutation the server already applied,
so both are Fatal unless the caller marked the request idempotent. A 429
was rejected before any work was done and is always retryable.
"""

from __future__ import annotations

from ..exceptions import (
    AuthError,
    NotFound,
    RateLimited,
    ServerError,
    TransportError,
    ValidationError,
)
from ..io_validation import IncomingDataError, parse_error_body
from ..protocols import Clock, RetryPolicy
from .messages import RequestDescriptor, ResponseEnvelope
from .outcomes import Fatal, Outcome, Retryable, Success
from .ratelimit import parse_reset_header


def decode_error_body(body: bytes) -> tuple[str | None, str]:
    """Return `(id, message)` from an error body.

    An undecodable body is not an error in itself: it yields `(None, "")` and
    the caller keeps the raw bytes.
    """
    try:
        payload = parse_error_body(body)
    except IncomingDataError:
        return None, ""
    return payload.get("id"), payload.get("message") or ""


class ErrorDecoder:
    """Maps a response onto Success, Retryable or Fatal."""

    def __init__(self, *, retry_policy: RetryPolicy, clock: Clock) -> None:
        self.retry_policy = retry_policy
        self.clock = clock

    def classify(
        self,
        envelope: ResponseEnvelope,
        *,
        descriptor: RequestDescriptor | None = None,
        attempt: int = 0,
    ) -> Outcome:
        if envelope.is_success:
            return Success(envelope)

        status = envelope.status
        error_id, message = decode_error_body(envelope.body)

        if status in (401, 403):
            return Fatal(
                AuthError(message, status=status, raw_body=envelope.body, error_id=error_id)
            )
        if status == 404:
            return Fatal(
                NotFound(message, status=status, raw_body=envelope.body, error_id=error_id)
            )
        if status == 429:
            reset_at = parse_reset_header(envelope.headers)
            delay = self.retry_policy.rate_limit_delay(reset_at, self.clock.time())
            error = RateLimited(
                message,
                until=reset_at,
                cached=False,
                status=status,
                raw_body=envelope.body,
                error_id=error_id,
            )
            return Retryable(error, delay)
        if 400 <= status < 500:
            return Fatal(
                ValidationError(message, status=status, raw_body=envelope.body, error_id=error_id)
            )
        if 500 <= status < 600:
            server_error = ServerError(
                message, status=status, raw_body=envelope.body, error_id=error_id
            )
            if descriptor is None or not descriptor.idempotent:
                return Fatal(server_error)
            return Retryable(server_error, self.retry_policy.compute_backoff(attempt))

        # Redirects are not followed and 1xx never reaches us; anything else is unexpected.
        unexpected = ServerError(
            message or f"unexpected status {status}",
            status=status,
            raw_body=envelope.body,
            error_id=error_id,
        )
        return Fatal(unexpected)

    def classify_transport_failure(
        self,
        error: TransportError,
        *,
        descriptor: RequestDescriptor,
        attempt: int = 0,
    ) -> Outcome:
        if descriptor.idempotent:
            return Retryable(error, self.retry_policy.compute_backoff(attempt))
        return Fatal(error)

