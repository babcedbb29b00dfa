"""Client-side implicit wait: lookups and interactions retried by the wrapper."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, ClassVar, Optional

from ..errors import WaitTimeoutError
from ..models import Locator
from ..wrapper.base import DecoratorSpec, Role, unwrap
from ..wrapper.session import ElementWrapper, SessionWrapper, TargetLocatorWrapper
from .actions import (
    RepeatableAction,
    check_is_enabled,
    check_is_selected,
    perform_clear,
    perform_click,
    perform_find_element,
    perform_find_elements,
    perform_get_coordinates,
    perform_send_keys,
    perform_submit,
    perform_switch_to_alert,
    perform_switch_to_frame,
)
from .clock import Clock, Sleeper, SystemClock, SystemSleeper
from .repeater import RetryPolicy, try_to

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = timedelta(seconds=10)
DEFAULT_INTERVAL = timedelta(milliseconds=500)


class ImplicitWaitElementWrapper(ElementWrapper):
    def find_element(self, locator: Locator) -> Any:
        return self.root.wrap(Role.ELEMENT, self.root.retry(self.wrapped, perform_find_element(locator)))

    def find_elements(self, locator: Locator) -> list[Any]:
        return self.root.wrap_all(Role.ELEMENT, self.root.retry_all(self.wrapped, perform_find_elements(locator)))

    def click(self) -> None:
        self.root.retry(self.wrapped, perform_click())

    def submit(self) -> None:
        self.root.retry(self.wrapped, perform_submit())

    def send_keys(self, *keys: str) -> None:
        self.root.retry(self.wrapped, perform_send_keys(*keys))

    def clear(self) -> None:
        self.root.retry(self.wrapped, perform_clear())

    def is_selected(self) -> bool:
        return self.root.retry(self.wrapped, check_is_selected())

    def is_enabled(self) -> bool:
        return self.root.retry(self.wrapped, check_is_enabled())

    def coordinates(self) -> Any:
        return self.root.wrap(Role.COORDINATES, self.root.retry(self.wrapped, perform_get_coordinates()))


class ImplicitWaitTargetLocatorWrapper(TargetLocatorWrapper):
    def frame(self, reference: Any) -> Any:
        self.root.retry(self.wrapped, perform_switch_to_frame(unwrap(reference)))
        return self.root.proxy

    def alert(self) -> Any:
        return self.root.wrap(Role.ALERT, self.root.retry(self.wrapped, perform_switch_to_alert()))


class ImplicitWaitWrapper(SessionWrapper):
    """Replaces the backend's implicit wait with client-side polling.

    The backend's own implicit wait is switched off on construction. Element
    lookups and interactions are then retried until they succeed or the
    timeout expires, in which case the last ignored failure is raised.
    ``find_elements`` returns an empty list instead of failing.
    """

    default_spec: ClassVar[DecoratorSpec] = SessionWrapper.default_spec.replace(
        element=ImplicitWaitElementWrapper,
        target_locator=ImplicitWaitTargetLocatorWrapper,
    )

    def __init__(
        self,
        original: Any,
        *,
        timeout: timedelta = DEFAULT_TIMEOUT,
        interval: timedelta = DEFAULT_INTERVAL,
        clock: Optional[Clock] = None,
        sleeper: Optional[Sleeper] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        super().__init__(original)
        self._policy = policy or RetryPolicy(
            timeout=timeout,
            interval=interval,
            clock=clock or SystemClock(),
            sleeper=sleeper or SystemSleeper(),
        )
        original.manage().timeouts().implicitly_wait(0)
        LOGGER.debug(
            "Client-side implicit wait enabled: timeout=%s interval=%s",
            self._policy.timeout,
            self._policy.interval,
        )

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def retry(self, context: Any, action: RepeatableAction) -> Any:
        """Run ``action`` with the wrapper's policy, surfacing the last real failure on timeout."""

        try:
            return try_to(context, action, self._policy)
        except WaitTimeoutError as exc:
            cause = exc.__cause__
            if cause is None:
                raise
        raise cause

    def retry_all(self, context: Any, action: RepeatableAction) -> list[Any]:
        try:
            return try_to(context, action, self._policy)
        except WaitTimeoutError:
            return []

    def find_element(self, locator: Locator) -> Any:
        return self.wrap(Role.ELEMENT, self.retry(self.wrapped, perform_find_element(locator)))

    def find_elements(self, locator: Locator) -> list[Any]:
        return self.wrap_all(Role.ELEMENT, self.retry_all(self.wrapped, perform_find_elements(locator)))
