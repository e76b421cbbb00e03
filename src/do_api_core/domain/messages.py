"""Request and response value types shared by every API call.

Usage example:
    from do_api_core.domain.messages import RequestDescriptor

    list_domains = RequestDescriptor.get("domains", [("per_page", 50)])
    create_domain = RequestDescriptor.post("domains", json={"name": "example.com"})
"""

from __future__ import annotations

import json as jsonlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Self
from urllib.parse import parse_qsl, urlsplit

from requests.structures import CaseInsensitiveDict

QueryPairs = tuple[tuple[str, str], ...]


def _query_pairs(pairs: Iterable[tuple[str, object]]) -> QueryPairs:
    return tuple((str(key), str(value)) for key, value in pairs)


def _encode_json(payload: object) -> bytes:
    return jsonlib.dumps(payload, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one API request.

    The executor never inspects `method` to decide whether a retry is safe;
    only `idempotent` is trusted. The helper constructors pick a sensible
    default per method which callers may override.
    """

    method: str
    path: str
    query: QueryPairs = ()
    body: bytes | None = None
    idempotent: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "query", _query_pairs(self.query))

    @classmethod
    def get(
        cls, path: str, query: Iterable[tuple[str, object]] = (), *, idempotent: bool = True
    ) -> Self:
        return cls("GET", path, _query_pairs(query), None, idempotent)

    @classmethod
    def head(
        cls, path: str, query: Iterable[tuple[str, object]] = (), *, idempotent: bool = True
    ) -> Self:
        return cls("HEAD", path, _query_pairs(query), None, idempotent)

    @classmethod
    def delete(
        cls, path: str, query: Iterable[tuple[str, object]] = (), *, idempotent: bool = True
    ) -> Self:
        return cls("DELETE", path, _query_pairs(query), None, idempotent)

    @classmethod
    def put(cls, path: str, *, json: object = None, idempotent: bool = True) -> Self:
        body = None if json is None else _encode_json(json)
        return cls("PUT", path, (), body, idempotent)

    @classmethod
    def post(cls, path: str, *, json: object = None, idempotent: bool = False) -> Self:
        body = None if json is None else _encode_json(json)
        return cls("POST", path, (), body, idempotent)

    @classmethod
    def patch(cls, path: str, *, json: object = None, idempotent: bool = False) -> Self:
        body = None if json is None else _encode_json(json)
        return cls("PATCH", path, (), body, idempotent)

    def with_query(self, pairs: Iterable[tuple[str, object]]) -> Self:
        """Return a copy whose query has `pairs` applied.

        Existing keys keep their position and take the new value; keys not
        already present are appended in the order given.
        """
        updates = dict(_query_pairs(pairs))
        merged: list[tuple[str, str]] = []
        seen: set[str] = set()
        for key, value in self.query:
            if key in updates:
                if key in seen:
                    continue
                merged.append((key, updates[key]))
                seen.add(key)
            else:
                merged.append((key, value))
        for key, value in updates.items():
            if key not in seen:
                merged.append((key, value))
        return replace(self, query=tuple(merged))


@dataclass(frozen=True)
class ResponseEnvelope:
    """A completed HTTP exchange: status, headers and raw body.

    Header lookup is case-insensitive.
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    def json(self) -> object:
        """Decode the body as JSON. Raises ValueError when it is not JSON."""
        return jsonlib.loads(self.body)


@dataclass(frozen=True)
class PageCursor:
    """Points at the next page of a list endpoint."""

    next_url: str
    query: QueryPairs

    @classmethod
    def from_url(cls, url: str) -> Self:
        pairs = parse_qsl(urlsplit(url).query, keep_blank_values=True)
        return cls(next_url=url, query=tuple(pairs))
