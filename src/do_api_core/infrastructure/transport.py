"""HTTP transport implementations for infrastructure.

Usage example:
    import requests

    from do_api_core.infrastructure.transport import RequestsTransport

    transport = RequestsTransport(session=requests.Session())
    envelope = transport.send(
        "GET",
        "https://api.digitalocean.com/v2/account",
        headers={"Authorization": "Bearer ..."},
        body=None,
        timeout_seconds=30.0,
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import override

import requests

from ..domain.messages import ResponseEnvelope
from ..exceptions import TransportError
from ..protocols import Transport


class RequestsTransport(Transport):
    """Requests-backed transport. Any response, whatever its status, is returned."""

    def __init__(self, *, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    @override
    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> ResponseEnvelope:
        try:
            response = self._session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=timeout_seconds,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        return ResponseEnvelope(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content or b"",
        )

    def close(self) -> None:
        self._session.close()
