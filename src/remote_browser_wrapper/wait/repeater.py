"""Polling retry engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from ..errors import ConfigurationError, WaitInterruptedError, WaitTimeoutError
from .actions import RepeatableAction
from .clock import Clock, Sleeper, SystemClock, SystemSleeper

if TYPE_CHECKING:
    from ..config import WaitConfig

LOGGER = logging.getLogger(__name__)

C = TypeVar("C")
V = TypeVar("V")

DEFAULT_TIMEOUT = timedelta(milliseconds=500)
DEFAULT_INTERVAL = timedelta(milliseconds=500)


@dataclass(frozen=True)
class RetryPolicy:
    """How long and how often an action is retried."""

    timeout: timedelta = DEFAULT_TIMEOUT
    interval: timedelta = DEFAULT_INTERVAL
    clock: Clock = field(default_factory=SystemClock)
    sleeper: Sleeper = field(default_factory=SystemSleeper)

    def __post_init__(self) -> None:
        if self.interval <= timedelta(0):
            raise ConfigurationError(f"Retry interval must be positive, got {self.interval}")
        if self.timeout < timedelta(0):
            raise ConfigurationError(f"Retry timeout must not be negative, got {self.timeout}")

    @classmethod
    def from_config(
        cls,
        config: "WaitConfig",
        *,
        clock: Optional[Clock] = None,
        sleeper: Optional[Sleeper] = None,
    ) -> "RetryPolicy":
        return cls(
            timeout=timedelta(seconds=config.timeout),
            interval=timedelta(seconds=config.interval),
            clock=clock or SystemClock(),
            sleeper=sleeper or SystemSleeper(),
        )

    def with_timeout(self, timeout: timedelta) -> "RetryPolicy":
        return replace(self, timeout=timeout)

    def with_interval(self, interval: timedelta) -> "RetryPolicy":
        return replace(self, interval=interval)


def try_to(context: C, action: RepeatableAction[C, V], policy: RetryPolicy, message: Optional[str] = None) -> V:
    """Evaluate ``action`` against ``context`` until it yields a usable result.

    Exceptions the action does not ignore propagate immediately. The deadline
    is checked after every attempt, so a zero timeout still makes exactly one
    attempt. When the deadline passes a :class:`WaitTimeoutError` is raised
    with the last ignored exception as its cause.
    """

    clock = policy.clock
    deadline = clock.later_by(policy.timeout)
    last_error: Optional[BaseException] = None
    attempts = 0
    while True:
        attempts += 1
        try:
            result = action.apply(context)
        except Exception as exc:
            if not action.ignore_exception(exc):
                raise
            LOGGER.debug("Attempt %d of %s failed: %s", attempts, action, exc)
            last_error = exc
        else:
            if not action.ignore_result(result):
                return result
            LOGGER.debug("Attempt %d of %s returned ignored result %r", attempts, action, result)

        if not clock.is_now_before(deadline):
            text = (
                f"Timed out after {policy.timeout.total_seconds():g} seconds "
                f"trying to perform action {action}"
            )
            if message:
                text = f"{text}: {message}"
            LOGGER.debug("%s (%d attempts)", text, attempts)
            raise WaitTimeoutError(text) from last_error

        try:
            policy.sleeper.sleep(policy.interval)
        except InterruptedError as exc:
            raise WaitInterruptedError(f"Interrupted while retrying {action}") from exc


class ActionRepeater(Generic[C]):
    """Fluent front-end for :func:`try_to` bound to a single context."""

    def __init__(self, context: C, policy: Optional[RetryPolicy] = None) -> None:
        self._context = context
        self._policy = policy or RetryPolicy()
        self._message: Optional[str] = None

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def with_timeout(self, timeout: timedelta) -> "ActionRepeater[C]":
        self._policy = self._policy.with_timeout(timeout)
        return self

    def polling_every(self, interval: timedelta) -> "ActionRepeater[C]":
        self._policy = self._policy.with_interval(interval)
        return self

    def with_message(self, message: str) -> "ActionRepeater[C]":
        self._message = message
        return self

    def try_to(self, action: RepeatableAction[C, V]) -> V:
        return try_to(self._context, action, self._policy, self._message)
