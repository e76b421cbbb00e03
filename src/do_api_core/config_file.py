"""Typed parsing and validation for client config files.

Example file:

    schema_version = 1

    [client]
    api_root = "https://api.digitalocean.com/v2/"
    max_retries = 5
    ratelimit_policy = "respect_nonblocking"
    log_level = "debug"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1
_POLICIES = {"respect_blocking", "respect_nonblocking", "ignore"}


@dataclass(frozen=True)
class ClientConfigFile:
    """Validated client config values loaded from a TOML file."""

    api_root: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    backoff_factor: float | None = None
    backoff_max_seconds: float | None = None
    backoff_min_seconds: float | None = None
    backoff_jitter_seconds: float | None = None
    max_ratelimit_wait_seconds: float | None = None
    ratelimit_policy: str | None = None
    per_page: int | None = None
    log_level: str | None = None


class _ClientSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    api_root: str | None = None
    timeout_seconds: float | None = None
    max_retries: int | None = None
    backoff_factor: float | None = None
    backoff_max_seconds: float | None = None
    backoff_min_seconds: float | None = None
    backoff_jitter_seconds: float | None = None
    max_ratelimit_wait_seconds: float | None = None
    ratelimit_policy: str | None = None
    per_page: int | None = None
    log_level: str | None = None

    @field_validator("api_root")
    @classmethod
    def _validate_api_root(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text.startswith(("https://", "http://")):
            raise ValueError
        return text

    @field_validator("ratelimit_policy")
    @classmethod
    def _validate_policy(cls, value: str | None) -> str | None:
        if value is None:
            return None
        policy = value.strip().lower().replace("-", "_")
        if policy not in _POLICIES:
            raise ValueError
        return policy

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError
        return level

    @field_validator(
        "timeout_seconds",
        "backoff_factor",
        "backoff_max_seconds",
        "backoff_min_seconds",
        "backoff_jitter_seconds",
        "max_ratelimit_wait_seconds",
    )
    @classmethod
    def _validate_non_negative(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value

    @field_validator("max_retries")
    @classmethod
    def _validate_retries(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value

    @field_validator("per_page")
    @classmethod
    def _validate_per_page(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    client: _ClientSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_client_config_file(*, path: Path) -> ClientConfigFile:
    """Load and validate a client TOML config file."""
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    raw_payload = path.read_text(encoding="utf-8")
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.client
    return ClientConfigFile(
        api_root=section.api_root,
        timeout_seconds=section.timeout_seconds,
        max_retries=section.max_retries,
        backoff_factor=section.backoff_factor,
        backoff_max_seconds=section.backoff_max_seconds,
        backoff_min_seconds=section.backoff_min_seconds,
        backoff_jitter_seconds=section.backoff_jitter_seconds,
        max_ratelimit_wait_seconds=section.max_ratelimit_wait_seconds,
        ratelimit_policy=section.ratelimit_policy,
        per_page=section.per_page,
        log_level=section.log_level,
    )
