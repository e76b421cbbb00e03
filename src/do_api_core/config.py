"""Centralised, injectable configuration for the API client.

The bearer token is deliberately absent: callers resolve credentials
themselves and pass the token to `build_client`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .application.executor import DEFAULT_API_ROOT
from .config_file import ClientConfigFile
from .domain.ratelimit import RatelimitPolicy
from .exceptions import PositiveNumberEnvVarError, RatelimitPolicyError
from .observability import parse_log_level


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client tuning.

    Load from environment with `ClientConfig.from_env()` or construct directly for testing.
    """

    api_root: str = DEFAULT_API_ROOT
    timeout_seconds: float = 30.0

    # Retries
    max_retries: int = 3
    backoff_factor: float = 0.5
    backoff_max_seconds: float = 60.0
    backoff_min_seconds: float = 1.0
    backoff_jitter_seconds: float = 0.1

    # Rate limiting
    max_ratelimit_wait_seconds: float = 3600.0
    ratelimit_policy: RatelimitPolicy = RatelimitPolicy.RESPECT_BLOCKING

    # Pagination
    per_page: int | None = None

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            ClientConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            api_root=os.getenv("DO_API_ROOT", DEFAULT_API_ROOT).strip() or DEFAULT_API_ROOT,
            timeout_seconds=_parse_number(
                os.getenv("DO_TIMEOUT_SECONDS", "30"), env_name="DO_TIMEOUT_SECONDS"
            ),
            max_retries=_parse_non_negative_int(
                os.getenv("DO_MAX_RETRIES", "3"), env_name="DO_MAX_RETRIES"
            ),
            backoff_factor=_parse_number(
                os.getenv("DO_BACKOFF_FACTOR", "0.5"), env_name="DO_BACKOFF_FACTOR"
            ),
            backoff_max_seconds=_parse_number(
                os.getenv("DO_BACKOFF_MAX_SECONDS", "60"), env_name="DO_BACKOFF_MAX_SECONDS"
            ),
            backoff_min_seconds=_parse_number(
                os.getenv("DO_BACKOFF_MIN_SECONDS", "1"), env_name="DO_BACKOFF_MIN_SECONDS"
            ),
            backoff_jitter_seconds=_parse_number(
                os.getenv("DO_BACKOFF_JITTER_SECONDS", "0.1"),
                env_name="DO_BACKOFF_JITTER_SECONDS",
            ),
            max_ratelimit_wait_seconds=_parse_number(
                os.getenv("DO_MAX_RATELIMIT_WAIT_SECONDS", "3600"),
                env_name="DO_MAX_RATELIMIT_WAIT_SECONDS",
            ),
            ratelimit_policy=parse_ratelimit_policy(
                os.getenv("DO_RATELIMIT_POLICY", "respect_blocking")
            ),
            per_page=_parse_optional_positive_int(
                os.getenv("DO_PER_PAGE", ""), env_name="DO_PER_PAGE"
            ),
            log_level=_parse_log_level_name(os.getenv("DO_LOG_LEVEL", "INFO")),
        )

    def with_file_overrides(self, file_config: ClientConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            api_root=self.api_root if file_config.api_root is None else file_config.api_root,
            timeout_seconds=self.timeout_seconds
            if file_config.timeout_seconds is None
            else file_config.timeout_seconds,
            max_retries=self.max_retries
            if file_config.max_retries is None
            else file_config.max_retries,
            backoff_factor=self.backoff_factor
            if file_config.backoff_factor is None
            else file_config.backoff_factor,
            backoff_max_seconds=self.backoff_max_seconds
            if file_config.backoff_max_seconds is None
            else file_config.backoff_max_seconds,
            backoff_min_seconds=self.backoff_min_seconds
            if file_config.backoff_min_seconds is None
            else file_config.backoff_min_seconds,
            backoff_jitter_seconds=self.backoff_jitter_seconds
            if file_config.backoff_jitter_seconds is None
            else file_config.backoff_jitter_seconds,
            max_ratelimit_wait_seconds=self.max_ratelimit_wait_seconds
            if file_config.max_ratelimit_wait_seconds is None
            else file_config.max_ratelimit_wait_seconds,
            ratelimit_policy=self.ratelimit_policy
            if file_config.ratelimit_policy is None
            else parse_ratelimit_policy(file_config.ratelimit_policy),
            per_page=self.per_page if file_config.per_page is None else file_config.per_page,
            log_level=self.log_level if file_config.log_level is None else file_config.log_level,
        )


def parse_ratelimit_policy(value: str) -> RatelimitPolicy:
    """Parse a policy name such as `respect_blocking` (case and dashes are ignored)."""
    text = value.strip().lower().replace("-", "_")
    try:
        return RatelimitPolicy(text)
    except ValueError as exc:
        raise RatelimitPolicyError(value) from exc


def _parse_number(value: str, *, env_name: str) -> float:
    """Parse a non-negative number from an environment variable."""
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed < 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_optional_positive_int(value: str, *, env_name: str) -> int | None:
    """Parse an optional positive integer from an environment variable."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    """Parse a non-negative integer from an environment variable."""
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed < 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_log_level_name(value: str) -> str:
    """Validate a log level name and return it upper-cased."""
    parse_log_level(value)
    return value.strip().upper()
