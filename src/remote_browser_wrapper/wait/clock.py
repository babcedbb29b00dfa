"""Time sources and sleep primitives used by the retry engine."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source."""

    def now(self) -> timedelta:
        """Return the current monotonic time as an offset from an arbitrary origin."""

    def later_by(self, duration: timedelta) -> timedelta:
        """Return the point in time ``duration`` from now."""

    def is_now_before(self, deadline: timedelta) -> bool:
        """Return whether the current time is strictly before ``deadline``."""


class Sleeper(Protocol):
    """Blocking sleep primitive. Interrupted sleeps raise ``InterruptedError``."""

    def sleep(self, duration: timedelta) -> None:
        """Block the calling thread for ``duration``."""


class SystemClock:
    """Clock backed by :func:`time.monotonic`."""

    def now(self) -> timedelta:
        return timedelta(seconds=time.monotonic())

    def later_by(self, duration: timedelta) -> timedelta:
        return self.now() + duration

    def is_now_before(self, deadline: timedelta) -> bool:
        return self.now() < deadline


class SystemSleeper:
    """Sleeper backed by :func:`time.sleep`."""

    def sleep(self, duration: timedelta) -> None:
        time.sleep(duration.total_seconds())


class InterruptibleSleeper:
    """Sleeper that another thread can wake up with :meth:`interrupt`.

    An interrupted sleep raises ``InterruptedError``; the interrupt flag is
    consumed by the sleep that observes it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def sleep(self, duration: timedelta) -> None:
        if self._event.wait(duration.total_seconds()):
            self._event.clear()
            raise InterruptedError("Sleep was interrupted")

    def interrupt(self) -> None:
        self._event.set()


class ManualClock:
    """Deterministic clock that is also a sleeper.

    Sleeping advances the clock by the requested duration instead of
    blocking, so tests can reason about elapsed time exactly.
    """

    def __init__(self, start: timedelta = timedelta(0)) -> None:
        self._now = start
        self.sleeps: list[timedelta] = []

    def now(self) -> timedelta:
        return self._now

    def later_by(self, duration: timedelta) -> timedelta:
        return self._now + duration

    def is_now_before(self, deadline: timedelta) -> bool:
        return self._now < deadline

    def sleep(self, duration: timedelta) -> None:
        self.sleeps.append(duration)
        self._now += duration

    @property
    def elapsed(self) -> timedelta:
        return sum(self.sleeps, timedelta(0))
