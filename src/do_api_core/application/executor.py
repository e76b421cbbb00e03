"""Authenticated, rate-limited request execution with bounded retries.

Usage example:
    from do_api_core.application.executor import RequestExecutor
    from do_api_core.domain.messages import RequestDescriptor
    from do_api_core.infrastructure import RequestsTransport

    executor = RequestExecutor(transport=RequestsTransport(), token=token)
    envelope = executor.execute(RequestDescriptor.get("account"))
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import override
from urllib.parse import urlencode

from .. import __version__
from ..domain.error_decoder import ErrorDecoder
from ..domain.messages import RequestDescriptor, ResponseEnvelope
from ..domain.outcomes import Fatal, Outcome, Retryable, Success
from ..domain.ratelimit import RatelimitPolicy
from ..exceptions import RateLimited, RequestCancelled, TransportError
from ..infrastructure.clock import SystemClock
from ..infrastructure.resilience import RateLimiter as RateLimiterImpl
from ..infrastructure.resilience import RetryPolicy as RetryPolicyImpl
from ..observability import get_logger
from ..protocols import Clock, Executor, RateLimiter, RetryPolicy, Transport

DEFAULT_API_ROOT = "https://api.digitalocean.com/v2/"

logger = get_logger("do_api_core.executor")


class RequestExecutor(Executor):
    """Sends requests through the rate limiter, classifying and retrying failures.

    Each attempt:
    - acquires the rate limiter (waiting if the window is exhausted)
    - sends via the transport with bearer auth attached
    - records the response's rate-limit headers
    - classifies the response with the error decoder

    Retryable outcomes sleep for the suggested delay and try again, at most
    `retry_policy.max_retries` extra times. Fatal outcomes raise immediately.
    Only the descriptor's `idempotent` flag decides whether a request that
    may have reached the server is safe to resend.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        token: str,
        api_root: str = DEFAULT_API_ROOT,
        rate_limiter: RateLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.transport = transport
        self.api_root = api_root
        self.clock = clock or SystemClock()
        self.rate_limiter = rate_limiter or RateLimiterImpl(clock=self.clock)
        self.retry_policy = retry_policy or RetryPolicyImpl()
        self.decoder = ErrorDecoder(retry_policy=self.retry_policy, clock=self.clock)
        self.timeout_seconds = timeout_seconds
        self._token = token

    def set_token(self, token: str) -> None:
        """Use `token` for every request sent from now on."""
        self._token = token

    def url_for(self, descriptor: RequestDescriptor) -> str:
        url = f"{self.api_root.rstrip('/')}/{descriptor.path.lstrip('/')}"
        if descriptor.query:
            url = f"{url}?{urlencode(descriptor.query)}"
        return url

    def headers_for(self, descriptor: RequestDescriptor) -> Mapping[str, str]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
            "User-Agent": f"do-api-core/{__version__}",
        }
        if descriptor.body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    @override
    def execute(
        self, descriptor: RequestDescriptor, cancel: threading.Event | None = None
    ) -> ResponseEnvelope:
        """Send `descriptor` and return the successful response.

        Raises:
            AuthError, NotFound, ValidationError: Immediately, never retried.
            RateLimited: If the rate limit could not be waited out.
            ServerError: If 5xx responses persist past the retry budget.
            TransportError: If no response arrived and the request is not
                idempotent, or the retry budget is spent.
            RequestCancelled: If `cancel` is set before sending or while waiting.
        """
        url = self.url_for(descriptor)
        attempt = 0
        while True:
            if cancel is not None and cancel.is_set():
                raise RequestCancelled()
            self.rate_limiter.acquire(cancel)
            outcome = self._attempt(descriptor, url, attempt)

            if isinstance(outcome, Success):
                return outcome.envelope
            if isinstance(outcome, Fatal):
                raise outcome.error

            error = outcome.error
            if isinstance(error, RateLimited):
                if self.rate_limiter.policy is not RatelimitPolicy.RESPECT_BLOCKING:
                    raise error
                if outcome.delay_seconds > self.rate_limiter.max_wait_seconds:
                    logger.warning(
                        "Rate limit on %s %s resets in %.1fs, beyond the %.1fs wait budget",
                        descriptor.method,
                        descriptor.path,
                        outcome.delay_seconds,
                        self.rate_limiter.max_wait_seconds,
                    )
                    raise error
            if attempt >= self.retry_policy.max_retries:
                logger.warning(
                    "Giving up on %s %s after %d attempts: %s",
                    descriptor.method,
                    descriptor.path,
                    attempt + 1,
                    error,
                )
                raise error
            self._log_retry(descriptor, outcome, attempt)
            self.clock.sleep(outcome.delay_seconds, cancel)
            attempt += 1

    def _attempt(self, descriptor: RequestDescriptor, url: str, attempt: int) -> Outcome:
        try:
            envelope = self.transport.send(
                descriptor.method,
                url,
                headers=self.headers_for(descriptor),
                body=descriptor.body,
                timeout_seconds=self.timeout_seconds,
            )
        except TransportError as exc:
            return self.decoder.classify_transport_failure(
                exc, descriptor=descriptor, attempt=attempt
            )
        self.rate_limiter.record(envelope.headers)
        return self.decoder.classify(envelope, descriptor=descriptor, attempt=attempt)

    def _log_retry(self, descriptor: RequestDescriptor, outcome: Retryable, attempt: int) -> None:
        logger.warning(
            "Retrying %s %s in %.1fs (attempt %d of %d): %s",
            descriptor.method,
            descriptor.path,
            outcome.delay_seconds,
            attempt + 2,
            self.retry_policy.max_retries + 1,
            outcome.error,
        )
