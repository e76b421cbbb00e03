"""Tests for client composition root wiring."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from do_api_core import composition
from do_api_core.config import ClientConfig
from do_api_core.domain.messages import RequestDescriptor
from do_api_core.domain.ratelimit import RatelimitPolicy
from do_api_core.infrastructure import RateLimiter, RequestsTransport, RetryPolicy
from do_api_core.observability.logging import PACKAGE_LOGGER_NAME
from tests.fakes import FakeClock, ScriptedTransport
from tests.support.responses import json_response


def test_build_client_wires_config_into_limiter_and_retry_policy(
    scripted_transport: ScriptedTransport, fake_clock: FakeClock
) -> None:
    config = ClientConfig(
        api_root="https://api.example.test/v2/",
        timeout_seconds=7.0,
        max_retries=6,
        backoff_factor=0.25,
        backoff_max_seconds=12.0,
        backoff_min_seconds=0.5,
        backoff_jitter_seconds=0.0,
        max_ratelimit_wait_seconds=45.0,
        ratelimit_policy=RatelimitPolicy.RESPECT_NONBLOCKING,
        per_page=50,
    )

    client = composition.build_client(
        config=config, token="tok", transport=scripted_transport, clock=fake_clock
    )

    limiter = client.ratelimit
    assert isinstance(limiter, RateLimiter)
    assert limiter.policy is RatelimitPolicy.RESPECT_NONBLOCKING
    assert limiter.max_wait_seconds == 45.0
    assert limiter.clock is fake_clock

    retry_policy = client.executor.retry_policy
    assert isinstance(retry_policy, RetryPolicy)
    assert retry_policy.max_retries == 6
    assert retry_policy.backoff_factor == 0.25
    assert retry_policy.max_backoff_seconds == 12.0
    assert retry_policy.min_backoff_seconds == 0.5
    assert retry_policy.jitter_seconds == 0.0

    assert client.executor.api_root == "https://api.example.test/v2/"
    assert client.executor.timeout_seconds == 7.0
    assert client.walker.per_page == 50


def test_build_client_sends_with_the_given_token(
    scripted_transport: ScriptedTransport, fake_clock: FakeClock
) -> None:
    scripted_transport.queue(json_response(200, {"account": {}}))
    client = composition.build_client(
        config=ClientConfig(api_root="https://api.example.test/v2/"),
        token="tok",
        transport=scripted_transport,
        clock=fake_clock,
    )

    client.execute(RequestDescriptor.get("account"))

    (call,) = scripted_transport.calls
    assert call.url == "https://api.example.test/v2/account"
    assert call.headers["Authorization"] == "Bearer tok"


def test_build_client_defaults_to_requests_transport() -> None:
    client = composition.build_client(config=ClientConfig(), token="tok")

    assert isinstance(client.executor.transport, RequestsTransport)


def test_clients_do_not_share_rate_limit_state(fake_clock: FakeClock) -> None:
    first = composition.build_client(
        config=ClientConfig(), token="a", transport=ScriptedTransport(), clock=fake_clock
    )
    second = composition.build_client(
        config=ClientConfig(), token="b", transport=ScriptedTransport(), clock=fake_clock
    )

    assert first.ratelimit is not second.ratelimit


def test_load_config_applies_file_over_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DO_MAX_RETRIES", "8")
    monkeypatch.setenv("DO_TIMEOUT_SECONDS", "20")
    config_path = tmp_path / "client.toml"
    config_path.write_text("schema_version = 1\n\n[client]\nmax_retries = 1\n", encoding="utf-8")

    config = composition.load_config(
        config_path=config_path, dotenv_path=str(tmp_path / ".env")
    )

    assert config.max_retries == 1
    assert config.timeout_seconds == 20.0


def test_load_config_without_file_uses_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DO_RATELIMIT_POLICY", "ignore")

    config = composition.load_config(dotenv_path=str(tmp_path / ".env"))

    assert config.ratelimit_policy is RatelimitPolicy.IGNORE


def test_build_client_applies_log_level(fake_clock: FakeClock) -> None:
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    original = package_logger.level
    try:
        composition.build_client(
            config=ClientConfig(log_level="DEBUG"),
            token="tok",
            transport=ScriptedTransport(),
            clock=fake_clock,
        )
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.setLevel(original)
