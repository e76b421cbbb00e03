"""The autouse network block stops every real connection attempt."""

import socket

import pytest
import requests

from do_api_core.domain.messages import RequestDescriptor
from do_api_core.exceptions import TransportError
from do_api_core.infrastructure import RequestsTransport
from tests.support.errors import NetworkIsolationError

_REFUSAL = "Tests must not make network connections"


def test_raw_socket_connect_is_refused() -> None:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        with pytest.raises(NetworkIsolationError, match=_REFUSAL):
            sock.connect(("127.0.0.1", 443))
    finally:
        sock.close()


def test_name_lookup_is_refused() -> None:
    with pytest.raises(NetworkIsolationError, match=_REFUSAL):
        socket.getaddrinfo("api.digitalocean.com", 443)


def test_plain_requests_call_is_refused() -> None:
    with pytest.raises(NetworkIsolationError, match=_REFUSAL):
        requests.get("https://api.digitalocean.com/v2/account", timeout=1)


def test_real_transport_cannot_reach_the_api() -> None:
    descriptor = RequestDescriptor.get("account")
    transport = RequestsTransport()
    try:
        with pytest.raises((NetworkIsolationError, TransportError)):
            transport.send(
                descriptor.method,
                "https://api.digitalocean.com/v2/account",
                headers={},
                body=None,
                timeout_seconds=1,
            )
    finally:
        transport.close()
