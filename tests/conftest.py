"""Pytest fixtures for testing.

Tests never touch the network: DNS lookups and socket connects both fail
with NetworkIsolationError. HTTP behaviour is exercised through
ScriptedTransport or a MagicMock requests session instead.
"""

from __future__ import annotations

import socket

import pytest

from tests.fakes import FakeClock, ScriptedTransport
from tests.support.errors import NetworkIsolationError


def _refuse_connect(self, address, *args, **kwargs):
    raise NetworkIsolationError(f"connect to {address!r}")


def _refuse_lookup(host, port, *args, **kwargs):
    raise NetworkIsolationError(f"DNS lookup of {host}:{port}")


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch):
    """Refuse every outbound connection and name lookup.

    Tests that genuinely need the DigitalOcean API belong behind
    `@pytest.mark.e2e`, which is deselected by default (run with `pytest -m e2e`).
    """
    monkeypatch.setattr(socket.socket, "connect", _refuse_connect)
    monkeypatch.setattr(socket, "getaddrinfo", _refuse_lookup)
    yield


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock that advances only when slept on."""
    return FakeClock()


@pytest.fixture
def scripted_transport() -> ScriptedTransport:
    """Provide an empty scripted transport; tests append responses."""
    return ScriptedTransport()
