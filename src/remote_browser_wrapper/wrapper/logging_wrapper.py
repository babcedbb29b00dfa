"""Wrapper that traces every routed call."""

from __future__ import annotations

import logging
from typing import Any

from .base import AbstractWrapper, unwrap
from .session import SessionWrapper

LOGGER = logging.getLogger(__name__)
BROWSER_LOGGER = logging.getLogger(f"{__name__}.browser")


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return str(unwrap(value))


def format_call(member: str, args: tuple, kwargs: dict) -> str:
    """Render ``member(args)`` with strings quoted."""

    parts = [_format_value(arg) for arg in args]
    parts.extend(f"{key}={_format_value(value)}" for key, value in kwargs.items())
    return f"{member}({', '.join(parts)})"


class LoggingWrapper(SessionWrapper):
    """Logs ``->`` before, ``<-`` after and ``><`` on failure of every routed call.

    With ``dump_browser_logs`` enabled the session's ``browser`` log is drained
    after each call and written to the ``...logging_wrapper.browser`` logger at
    DEBUG level.
    """

    def __init__(self, original: Any, *, dump_browser_logs: bool = False) -> None:
        super().__init__(original)
        self._dump_browser_logs = dump_browser_logs
        LOGGER.info("Init tracer for session %s", type(original).__name__)

    @property
    def dump_browser_logs(self) -> bool:
        return self._dump_browser_logs

    def set_dump_browser_logs(self, enabled: bool) -> None:
        self._dump_browser_logs = enabled

    def before_call(self, target: AbstractWrapper, member: str, args: tuple, kwargs: dict) -> None:
        LOGGER.info("-> %s on %s", format_call(member, args, kwargs), target.wrapped)

    def after_call(self, target: AbstractWrapper, member: str, result: Any, args: tuple, kwargs: dict) -> None:
        LOGGER.info(
            "<- %s = %s on %s",
            format_call(member, args, kwargs),
            _format_value(result),
            target.wrapped,
        )
        if self._dump_browser_logs:
            self._write_browser_logs()

    def on_error(self, target: AbstractWrapper, member: str, exc: Exception, args: tuple, kwargs: dict) -> Any:
        LOGGER.info(">< %s on %s", format_call(member, args, kwargs), target.wrapped, exc_info=exc)
        if self._dump_browser_logs:
            self._write_browser_logs()
        raise exc

    def _write_browser_logs(self) -> None:
        try:
            entries = self.wrapped.manage().get_log("browser")
        except Exception:  # pragma: no cover - optional diagnostic
            LOGGER.debug("Unable to read browser logs", exc_info=True)
            return
        for entry in entries:
            BROWSER_LOGGER.debug("[%s] %s %s", entry.timestamp.isoformat(), entry.level, entry.message)
