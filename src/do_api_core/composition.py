"""Composition root for wiring a client from configuration."""

from __future__ import annotations

from pathlib import Path

from .client import DigitalOcean
from .config import ClientConfig
from .config_file import load_client_config_file
from .infrastructure import RateLimiter, RequestsTransport, RetryPolicy, SystemClock
from .observability import set_log_level
from .protocols import Clock, Transport


def load_config(
    *, config_path: Path | None = None, dotenv_path: str | None = None
) -> ClientConfig:
    """Resolve configuration: defaults, then environment, then the config file if given."""
    config = ClientConfig.from_env(dotenv_path)
    if config_path is not None:
        config = config.with_file_overrides(load_client_config_file(path=config_path))
    return config


def build_client(
    *,
    config: ClientConfig,
    token: str,
    transport: Transport | None = None,
    clock: Clock | None = None,
) -> DigitalOcean:
    """Build a client with its own rate limiter and retry policy.

    Also applies `config.log_level` to the `do_api_core` loggers.

    Args:
        config: Client tuning.
        token: An already-resolved API token.
        transport: Optional transport override (defaults to a requests session).
        clock: Optional clock override (defaults to wall-clock time).
    """
    set_log_level(config.log_level)
    clock = clock or SystemClock()
    rate_limiter = RateLimiter(
        policy=config.ratelimit_policy,
        max_wait_seconds=config.max_ratelimit_wait_seconds,
        clock=clock,
    )
    retry_policy = RetryPolicy(
        max_retries=config.max_retries,
        backoff_factor=config.backoff_factor,
        max_backoff_seconds=config.backoff_max_seconds,
        min_backoff_seconds=config.backoff_min_seconds,
        jitter_seconds=config.backoff_jitter_seconds,
    )
    return DigitalOcean(
        token,
        api_root=config.api_root,
        transport=transport or RequestsTransport(),
        rate_limiter=rate_limiter,
        retry_policy=retry_policy,
        clock=clock,
        timeout_seconds=config.timeout_seconds,
        per_page=config.per_page,
    )
