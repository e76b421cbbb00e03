"""Builders for canned API responses."""

from __future__ import annotations

import json

from do_api_core.domain.messages import ResponseEnvelope

API_ROOT = "https://api.example.test/v2/"


def ratelimit_headers(*, limit: int, remaining: int, reset: float) -> dict[str, str]:
    return {
        "RateLimit-Limit": str(limit),
        "RateLimit-Remaining": str(remaining),
        "RateLimit-Reset": str(int(reset)),
    }


def json_response(
    status: int, payload: object, headers: dict[str, str] | None = None
) -> ResponseEnvelope:
    return ResponseEnvelope(
        status=status,
        headers={"Content-Type": "application/json", **(headers or {})},
        body=json.dumps(payload).encode("utf-8"),
    )


def error_response(
    status: int, error_id: str, message: str, headers: dict[str, str] | None = None
) -> ResponseEnvelope:
    return json_response(status, {"id": error_id, "message": message}, headers)


def page_response(
    key: str,
    items: list[object],
    next_page: int | None,
    per_page: int = 2,
    path: str = "domains",
) -> ResponseEnvelope:
    pages: dict[str, str] = {}
    if next_page is not None:
        pages["next"] = f"{API_ROOT}{path}?page={next_page}&per_page={per_page}"
    return json_response(200, {key: items, "links": {"pages": pages}, "meta": {"total": 0}})
