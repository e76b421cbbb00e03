"""Pagination metadata extraction for list endpoints."""

from __future__ import annotations

from urllib.parse import urlsplit

from ..exceptions import DecodeError
from ..io_validation import IncomingDataError, parse_next_link
from .messages import PageCursor, ResponseEnvelope


def extract_cursor(envelope: ResponseEnvelope) -> PageCursor | None:
    """Return the cursor for the page after `envelope`, or None on the last page.

    Raises:
        DecodeError: If the page body is not a JSON object.
    """
    try:
        next_link = parse_next_link(envelope.body)
    except IncomingDataError as exc:
        raise DecodeError(
            "list response body is not a JSON object",
            status=envelope.status,
            raw_body=envelope.body,
        ) from exc
    if next_link is None:
        return None
    return PageCursor.from_url(next_link)


def targets_path(cursor: PageCursor, path: str) -> bool:
    """Return whether `cursor` links to `path` under any API root.

    A link with no path at all is relative to the current page.
    """
    target = urlsplit(cursor.next_url).path.rstrip("/")
    if not target:
        return True
    wanted = "/" + path.strip("/")
    return target.endswith(wanted)
