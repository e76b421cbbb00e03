"""Pydantic-based validation helpers for inbound API payloads."""

from __future__ import annotations

from typing import TypedDict

from pydantic import TypeAdapter, ValidationError


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


class ErrorBodyInput(TypedDict, total=False):
    id: str | None
    message: str | None


class PageLinksInput(TypedDict, total=False):
    first: str | None
    prev: str | None
    next: str | None
    last: str | None


class LinksInput(TypedDict, total=False):
    pages: PageLinksInput | None


class ListBodyInput(TypedDict, total=False):
    links: LinksInput | None


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def parse_error_body(body: bytes) -> ErrorBodyInput:
    """Parse a `{"id": ..., "message": ...}` error body.

    Raises:
        IncomingDataError: If the body is not a JSON object of that shape.
    """
    return validate_json_as(ErrorBodyInput, body)


def parse_next_link(body: bytes) -> str | None:
    """Return `links.pages.next` from a list response body, or None on the last page.

    Raises:
        IncomingDataError: If the body is not a JSON object.
    """
    payload = validate_json_as(ListBodyInput, body)
    links = payload.get("links") or {}
    pages = links.get("pages") or {}
    next_link = pages.get("next")
    if not next_link:
        return None
    return next_link
