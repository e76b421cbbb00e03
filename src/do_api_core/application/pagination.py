"""Lazy traversal of paginated list endpoints."""

from __future__ import annotations

import threading
from collections.abc import Iterator

from ..domain.messages import QueryPairs, RequestDescriptor, ResponseEnvelope
from ..domain.pagination import extract_cursor, targets_path
from ..exceptions import DecodeError
from ..io_validation import IncomingDataError, validate_json_as
from ..observability import get_logger
from ..protocols import Executor

logger = get_logger("do_api_core.pagination")


class PageWalker:
    """Follows `links.pages.next` from page to page through an executor.

    Walks are forward-only and not restartable: each page fetch consumes rate
    limit, so a new walk must be started with a fresh call to `pages()`.
    A failed fetch ends the walk by raising at the point of failure; pages
    already yielded stay valid.

    Each next link is followed by carrying its query over to the original
    descriptor, so method and path never change mid-walk.
    """

    def __init__(self, executor: Executor, *, per_page: int | None = None) -> None:
        self.executor = executor
        self.per_page = per_page

    def pages(
        self, descriptor: RequestDescriptor, cancel: threading.Event | None = None
    ) -> Iterator[ResponseEnvelope]:
        """Yield each page of `descriptor`'s result set, in provider order.

        Raises:
            ApiError: Whatever the executor raises for a page, once that page is reached.
            DecodeError: If a page is not a JSON object, or the next link points
                at another path or back at a page already fetched.
        """
        current = self._first_page(descriptor)
        fetched: set[QueryPairs] = {current.query}
        page_number = 1
        while True:
            envelope = self.executor.execute(current, cancel)
            cursor = extract_cursor(envelope)
            yield envelope
            if cursor is None:
                logger.debug("Reached last page of %s after %d pages", descriptor.path, page_number)
                return
            if not targets_path(cursor, descriptor.path):
                raise DecodeError(
                    f"next link {cursor.next_url} leaves {descriptor.path}",
                    status=envelope.status,
                    raw_body=envelope.body,
                )
            current = current.with_query(cursor.query)
            if current.query in fetched:
                raise DecodeError(
                    f"pagination cycle: next link {cursor.next_url} repeats an earlier page",
                    status=envelope.status,
                    raw_body=envelope.body,
                )
            fetched.add(current.query)
            page_number += 1

    def items(
        self, descriptor: RequestDescriptor, key: str, cancel: threading.Event | None = None
    ) -> Iterator[object]:
        """Yield every element of the `key` collection across all pages.

        Raises:
            DecodeError: If a page lacks a `key` list.
        """
        for envelope in self.pages(descriptor, cancel):
            try:
                payload = validate_json_as(dict[str, object], envelope.body)
            except IncomingDataError as exc:
                raise DecodeError(
                    "list response body is not a JSON object",
                    status=envelope.status,
                    raw_body=envelope.body,
                ) from exc
            collection = payload.get(key)
            if not isinstance(collection, list):
                raise DecodeError(
                    f"list response has no {key!r} array",
                    status=envelope.status,
                    raw_body=envelope.body,
                )
            yield from collection

    def _first_page(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        if self.per_page is None or any(key == "per_page" for key, _ in descriptor.query):
            return descriptor
        return descriptor.with_query([("per_page", self.per_page)])
