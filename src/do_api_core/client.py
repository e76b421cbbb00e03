"""DigitalOcean API client facade.

Usage example:
    from do_api_core.client import DigitalOcean
    from do_api_core.domain.messages import RequestDescriptor

    client = DigitalOcean(token)
    for domain in client.items(RequestDescriptor.get("domains"), "domains", DomainIO):
        print(domain["name"])
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

from .application.executor import DEFAULT_API_ROOT, RequestExecutor
from .application.pagination import PageWalker
from .domain.messages import RequestDescriptor, ResponseEnvelope
from .exceptions import DecodeError
from .infrastructure.clock import SystemClock
from .infrastructure.resilience import RateLimiter, RetryPolicy
from .infrastructure.transport import RequestsTransport
from .io_validation import IncomingDataError, validate_as, validate_json_as
from .protocols import Clock, Transport


class DigitalOcean:
    """An authenticated client for the DigitalOcean API.

    Each instance owns its own rate limiter, so independently configured
    clients never share quota state. Share one instance between threads to
    make them share a quota.
    """

    def __init__(
        self,
        token: str,
        *,
        api_root: str = DEFAULT_API_ROOT,
        transport: Transport | None = None,
        rate_limiter: RateLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        timeout_seconds: float = 30.0,
        per_page: int | None = None,
    ) -> None:
        clock = clock or SystemClock()
        self.ratelimit = rate_limiter or RateLimiter(clock=clock)
        self.executor = RequestExecutor(
            transport=transport or RequestsTransport(),
            token=token,
            api_root=api_root,
            rate_limiter=self.ratelimit,
            retry_policy=retry_policy or RetryPolicy(),
            clock=clock,
            timeout_seconds=timeout_seconds,
        )
        self.walker = PageWalker(self.executor, per_page=per_page)

    def set_key(self, token: str) -> None:
        """Replace the API token. All new requests use the new token."""
        self.executor.set_token(token)

    def execute(
        self, descriptor: RequestDescriptor, cancel: threading.Event | None = None
    ) -> ResponseEnvelope:
        return self.executor.execute(descriptor, cancel)

    def pages(
        self, descriptor: RequestDescriptor, cancel: threading.Event | None = None
    ) -> Iterator[ResponseEnvelope]:
        return self.walker.pages(descriptor, cancel)

    def decode[SchemaT](self, envelope: ResponseEnvelope, schema: type[SchemaT]) -> SchemaT:
        """Validate a successful response body against `schema`.

        Raises:
            DecodeError: If the body is not valid JSON of the expected shape.
        """
        try:
            return validate_json_as(schema, envelope.body)
        except IncomingDataError as exc:
            raise DecodeError(
                f"response body does not match {schema}",
                status=envelope.status,
                raw_body=envelope.body,
            ) from exc

    def fetch[SchemaT](
        self,
        descriptor: RequestDescriptor,
        schema: type[SchemaT],
        cancel: threading.Event | None = None,
    ) -> SchemaT:
        """Execute `descriptor` and decode its body into `schema`."""
        return self.decode(self.execute(descriptor, cancel), schema)

    def items[SchemaT](
        self,
        descriptor: RequestDescriptor,
        key: str,
        schema: type[SchemaT],
        cancel: threading.Event | None = None,
    ) -> Iterator[SchemaT]:
        """Walk every page and yield each element of the `key` collection as `schema`."""
        for item in self.walker.items(descriptor, key, cancel):
            try:
                yield validate_as(schema, item)
            except IncomingDataError as exc:
                raise DecodeError(f"{key!r} element does not match {schema}") from exc
