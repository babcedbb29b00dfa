"""Wrapper that dispatches routed calls to listener objects."""

from __future__ import annotations

from typing import Any

from .base import AbstractWrapper, unwrap
from .session import SessionWrapper


class SessionListener:
    """Base class for listeners.

    Define ``before_<member>(target, *args)`` and
    ``after_<member>(target, result, *args)`` for the members of interest,
    e.g. ``before_click`` or ``after_find_element``. ``target`` is the original
    object being called and ``result`` the undecorated return value.
    """


class EventFiringWrapper(SessionWrapper):
    def __init__(self, original: Any) -> None:
        super().__init__(original)
        self._listeners: list[Any] = []

    def add_listener(self, listener: Any) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Any) -> None:
        self._listeners.remove(listener)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def before_call(self, target: AbstractWrapper, member: str, args: tuple, kwargs: dict) -> None:
        for listener in list(self._listeners):
            callback = getattr(listener, f"before_{member}", None)
            if callback is not None:
                callback(target.wrapped, *unwrap(args), **kwargs)

    def after_call(self, target: AbstractWrapper, member: str, result: Any, args: tuple, kwargs: dict) -> None:
        for listener in list(self._listeners):
            callback = getattr(listener, f"after_{member}", None)
            if callback is not None:
                callback(target.wrapped, unwrap(result), *unwrap(args), **kwargs)
