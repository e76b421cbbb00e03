"""Tests for shared observability logging."""

import logging
import time
from collections.abc import Iterator

import pytest

from do_api_core.exceptions import LogLevelError
from do_api_core.observability.logging import (
    PACKAGE_LOGGER_NAME,
    get_logger,
    parse_log_level,
    set_log_level,
)


@pytest.fixture
def restore_package_level() -> Iterator[None]:
    package_logger = get_logger(PACKAGE_LOGGER_NAME)
    original = package_logger.level
    yield
    package_logger.setLevel(original)


def test_get_logger_formats_utc_timestamps(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fixed = time.struct_time((2020, 1, 2, 3, 4, 5, 3, 2, 0))

    def fake_gmtime(_: float | None = None) -> time.struct_time:
        return fixed

    monkeypatch.setattr(time, "gmtime", fake_gmtime)

    # A name outside the package gets a fresh handler bound to the captured stderr.
    logger = get_logger("tests.observability.utc")
    logger.info("Retrying GET domains")

    captured = capsys.readouterr()
    assert (
        "2020-01-02T03:04:05+0000 INFO tests.observability.utc: Retrying GET domains"
        in captured.err
    )


def test_get_logger_is_singleton_per_name() -> None:
    name = "tests.observability.singleton"
    logger = get_logger(name)
    logger_again = get_logger(name)

    assert logger is logger_again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_package_loggers_share_the_package_handler() -> None:
    child = get_logger("do_api_core.test.logging")
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    assert child.handlers == []
    assert child.propagate is True
    assert len(package_logger.handlers) == 1
    assert package_logger.propagate is False


@pytest.mark.usefixtures("restore_package_level")
def test_set_log_level_applies_to_every_package_logger() -> None:
    child = get_logger("do_api_core.test.logging.level")

    set_log_level("debug")
    assert child.isEnabledFor(logging.DEBUG)

    set_log_level(logging.WARNING)
    assert not child.isEnabledFor(logging.INFO)


def test_parse_log_level_rejects_unknown_names() -> None:
    assert parse_log_level(" Warning ") == logging.WARNING
    with pytest.raises(LogLevelError):
        parse_log_level("chatty")
