"""Error taxonomy shared by the wrappers, the retry engine and the lifecycle manager."""

from __future__ import annotations

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Tag used by retry actions and recovery wrappers to classify failures."""

    NOT_FOUND = "not_found"
    NOT_INTERACTABLE = "not_interactable"
    STALE_REFERENCE = "stale_reference"
    UNHANDLED_MODAL = "unhandled_modal"
    TIMEOUT = "timeout"
    INTERRUPTED = "interrupted"
    SESSION = "session"
    UNSUPPORTED = "unsupported"


class AutomationError(RuntimeError):
    """Base class for failures reported by an automation backend."""

    kind: ErrorKind = ErrorKind.SESSION


class NoSuchElementError(AutomationError):
    """Raised when a locator matches nothing."""

    kind = ErrorKind.NOT_FOUND


class NoSuchFrameError(AutomationError):
    kind = ErrorKind.NOT_FOUND


class NoSuchWindowError(AutomationError):
    kind = ErrorKind.NOT_FOUND


class NoAlertPresentError(AutomationError):
    kind = ErrorKind.NOT_FOUND


class ElementNotInteractableError(AutomationError):
    """Raised when an element exists but cannot accept the interaction yet."""

    kind = ErrorKind.NOT_INTERACTABLE


class StaleElementReferenceError(AutomationError):
    """Raised when an element reference no longer points at a live node."""

    kind = ErrorKind.STALE_REFERENCE


class UnhandledAlertError(AutomationError):
    """Raised when a modal dialog blocks the requested operation."""

    kind = ErrorKind.UNHANDLED_MODAL

    def __init__(self, message: str, alert_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.alert_text = alert_text


class WaitTimeoutError(AutomationError):
    """Raised when a retried action does not succeed before its deadline.

    The last ignored failure, if any, is chained as ``__cause__``.
    """

    kind = ErrorKind.TIMEOUT


class WaitInterruptedError(AutomationError):
    """Raised when the sleep between two attempts was interrupted."""

    kind = ErrorKind.INTERRUPTED


class SessionNotAvailableError(AutomationError):
    kind = ErrorKind.SESSION


class UnsupportedOperationError(AutomationError):
    kind = ErrorKind.UNSUPPORTED


class ConfigurationError(RuntimeError):
    """Raised for wiring mistakes: bad wrappers, unknown providers, illegal mode switches."""


class OwnershipError(RuntimeError):
    """Raised when a session is dismissed by someone who does not own it."""


def error_kind(exc: BaseException) -> Optional[ErrorKind]:
    """Return the kind of ``exc`` or ``None`` for non-automation errors."""

    if isinstance(exc, AutomationError):
        return exc.kind
    return None
