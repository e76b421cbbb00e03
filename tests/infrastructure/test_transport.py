"""Tests for the requests-backed transport."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from do_api_core.exceptions import TransportError
from do_api_core.infrastructure import RequestsTransport


def _response(status: int, headers: dict[str, str], content: bytes) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.headers = CaseInsensitiveDict(headers)
    response.content = content
    return response


class TestRequestsTransport:
    """Tests for RequestsTransport.send."""

    def test_passes_request_through_to_session(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.request.return_value = _response(200, {}, b"{}")
        transport = RequestsTransport(session=session)

        transport.send(
            "POST",
            "https://api.example.test/v2/domains",
            headers={"Authorization": "Bearer t"},
            body=b'{"name":"example.com"}',
            timeout_seconds=12.5,
        )

        session.request.assert_called_once_with(
            "POST",
            "https://api.example.test/v2/domains",
            headers={"Authorization": "Bearer t"},
            data=b'{"name":"example.com"}',
            timeout=12.5,
            allow_redirects=False,
        )

    def test_returns_envelope_for_any_status(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.request.return_value = _response(
            503, {"RateLimit-Remaining": "10"}, b'{"id":"unavailable"}'
        )
        transport = RequestsTransport(session=session)

        envelope = transport.send(
            "GET", "https://api.example.test/v2/account", headers={}, body=None, timeout_seconds=1
        )

        assert envelope.status == 503
        assert envelope.header("ratelimit-remaining") == "10"
        assert envelope.body == b'{"id":"unavailable"}'

    @pytest.mark.parametrize(
        "exc",
        [
            requests.ConnectionError("connection reset"),
            requests.Timeout("read timed out"),
            requests.exceptions.ChunkedEncodingError("truncated"),
        ],
    )
    def test_request_exceptions_become_transport_errors(
        self, exc: requests.RequestException
    ) -> None:
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = exc
        transport = RequestsTransport(session=session)

        with pytest.raises(TransportError) as exc_info:
            transport.send(
                "GET",
                "https://api.example.test/v2/account",
                headers={},
                body=None,
                timeout_seconds=1,
            )

        assert exc_info.value.status is None
        assert exc_info.value.__cause__ is exc

    def test_close_closes_session(self) -> None:
        session = MagicMock(spec=requests.Session)
        RequestsTransport(session=session).close()
        session.close.assert_called_once_with()
