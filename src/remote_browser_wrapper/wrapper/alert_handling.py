"""Recovery from unexpected modal dialogs."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Protocol

from rich.console import Console

from ..errors import ErrorKind, NoAlertPresentError, UnhandledAlertError, error_kind
from .base import AbstractWrapper
from .session import SessionWrapper

LOGGER = logging.getLogger(__name__)


class UnhandledAlertHandler(Protocol):
    """Callback notified when a call was blocked by a modal dialog."""

    def handle_unhandled_alert(self, session: Any, error: Exception) -> None:
        """Deal with the dialog, typically by accepting or dismissing it."""


class AcceptingAlertHandler:
    """Accepts the blocking dialog."""

    def handle_unhandled_alert(self, session: Any, error: Exception) -> None:
        try:
            session.switch_to().alert().accept()
        except NoAlertPresentError:
            LOGGER.debug("Alert disappeared before it could be accepted")


class DismissingAlertHandler:
    """Dismisses the blocking dialog."""

    def handle_unhandled_alert(self, session: Any, error: Exception) -> None:
        try:
            session.switch_to().alert().dismiss()
        except NoAlertPresentError:
            LOGGER.debug("Alert disappeared before it could be dismissed")


class ConsoleAlertHandler:
    """Prints the text of unexpected dialogs using Rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()

    def handle_unhandled_alert(self, session: Any, error: Exception) -> None:
        text = getattr(error, "alert_text", None) or str(error)
        self._console.print(f"[UNHANDLED ALERT] {text}", style="yellow", markup=False)


class CompositeAlertHandler:
    """Fan-out handler that notifies several handlers in order."""

    def __init__(self, handlers: Iterable[UnhandledAlertHandler]) -> None:
        self._handlers = list(handlers)

    def handle_unhandled_alert(self, session: Any, error: Exception) -> None:
        for handler in self._handlers:
            handler.handle_unhandled_alert(session, error)


class UnhandledAlertHandlingWrapper(SessionWrapper):
    """Notifies registered handlers about blocking dialogs and retries the call once."""

    def __init__(self, original: Any, *, handlers: Iterable[UnhandledAlertHandler] = ()) -> None:
        super().__init__(original)
        self._handlers: list[UnhandledAlertHandler] = list(handlers)

    def register_alert_handler(self, handler: UnhandledAlertHandler) -> None:
        self._handlers.append(handler)

    def delete_all_alert_handlers(self) -> None:
        self._handlers.clear()

    @property
    def handlers(self) -> list[UnhandledAlertHandler]:
        return list(self._handlers)

    def on_error(self, target: AbstractWrapper, member: str, exc: Exception, args: tuple, kwargs: dict) -> Any:
        if error_kind(exc) is not ErrorKind.UNHANDLED_MODAL:
            raise exc
        LOGGER.info(
            "Call %s was blocked by a dialog%s",
            member,
            f": {exc.alert_text}" if isinstance(exc, UnhandledAlertError) and exc.alert_text else "",
        )
        for handler in list(self._handlers):
            handler.handle_unhandled_alert(self.wrapped, exc)
        return target.call(member, args, kwargs)
