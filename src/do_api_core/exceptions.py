"""Custom exceptions for the DigitalOcean API core.

Every non-success path out of the request executor is one of the `ApiError`
subclasses below. Configuration problems use the separate `ConfigError` tree.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a failed API call."""

    AUTH = "auth"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    TRANSPORT = "transport"
    DECODE = "decode"


class ApiError(Exception):
    """Base exception for all classified API failures.

    Attributes:
        kind: What went wrong, independent of the HTTP status.
        status: HTTP status code, or None when no response was received.
        message: The provider's error message (empty when the body was undecodable).
        raw_body: The response body exactly as received.
        error_id: The provider's error identifier, when the body carried one.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str = "",
        *,
        status: int | None = None,
        raw_body: bytes = b"",
        error_id: str | None = None,
    ) -> None:
        self.status = status
        self.message = message
        self.raw_body = raw_body
        self.error_id = error_id
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = self.kind.value
        if self.status is not None:
            text += f" (status {self.status})"
        if self.error_id:
            text += f" [{self.error_id}]"
        if self.message:
            text += f": {self.message}"
        return text


class AuthError(ApiError):
    """Raised on 401/403. The token is bad, expired or lacks scope; never retried."""

    kind = ErrorKind.AUTH


class NotFound(ApiError):
    """Raised on 404."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(ApiError):
    """Raised on 422 and other 4xx rejections. `raw_body` carries field-level detail."""

    kind = ErrorKind.VALIDATION


class RateLimited(ApiError):
    """Raised when the rate limit could not be waited out.

    Attributes:
        until: Epoch seconds at which the limit is expected to lift, if known.
        cached: True when no request was sent because the last observed
            rate-limit state already predicted a rejection.
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str = "",
        *,
        until: float | None = None,
        cached: bool = False,
        status: int | None = None,
        raw_body: bytes = b"",
        error_id: str | None = None,
    ) -> None:
        self.until = until
        self.cached = cached
        super().__init__(message, status=status, raw_body=raw_body, error_id=error_id)


class ServerError(ApiError):
    """Raised on 5xx once the retry budget is spent."""

    kind = ErrorKind.SERVER


class TransportError(ApiError):
    """Raised when no response was received (connection failure, timeout)."""

    kind = ErrorKind.TRANSPORT


class DecodeError(ApiError):
    """Raised when a successful response body cannot be decoded."""

    kind = ErrorKind.DECODE


class RequestCancelled(Exception):
    """Raised when the caller cancels a request while it is waiting."""

    def __init__(self, reason: str = "request cancelled while waiting") -> None:
        super().__init__(reason)


class ConfigError(ValueError):
    """Base exception for configuration problems."""


class PositiveNumberEnvVarError(ConfigError):
    """Raised when an environment variable must be a non-negative number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative number.")


class RatelimitPolicyError(ConfigError):
    """Raised when a rate-limit policy name is not recognised."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Unknown rate-limit policy {value!r}. "
            "Expected one of: respect_blocking, respect_nonblocking, ignore."
        )


class ConfigFileNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(ConfigError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(ConfigError):
    """Raised when a config file does not match the expected schema."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")


class LogLevelError(ConfigError):
    """Raised when a log level name is not a standard logging level."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Unknown log level {value!r}. Expected one of: DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
