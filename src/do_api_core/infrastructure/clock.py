"""Wall-clock implementation used outside of tests."""

from __future__ import annotations

import threading
import time
from typing import override

from ..exceptions import RequestCancelled
from ..protocols import Clock

_CANCEL_POLL_SECONDS = 0.05


def wait_for_event(
    event: threading.Event,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> bool:
    """Block until `event` is set or `timeout` elapses; return whether it was set.

    A set `cancel` event is noticed within `_CANCEL_POLL_SECONDS`.

    Raises:
        RequestCancelled: If `cancel` is set before `event`.
    """
    if cancel is None:
        return event.wait(None if timeout is None else max(0.0, timeout))
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        if cancel.is_set():
            raise RequestCancelled()
        step = _CANCEL_POLL_SECONDS
        if deadline is not None:
            left = deadline - time.monotonic()
            if left <= 0:
                return event.is_set()
            step = min(step, left)
        if event.wait(step):
            return True


class SystemClock(Clock):
    """Real time. Sleeping with a cancel event wakes early when the event is set."""

    @override
    def time(self) -> float:
        return time.time()

    @override
    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> None:
        if cancel is None:
            if seconds > 0:
                time.sleep(seconds)
            return
        if cancel.is_set() or cancel.wait(max(0.0, seconds)):
            raise RequestCancelled()

    @override
    def wait(
        self, wake: threading.Event, seconds: float, cancel: threading.Event | None = None
    ) -> bool:
        return wait_for_event(wake, cancel, seconds)
