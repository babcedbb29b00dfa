"""Repeatable units of work and the catalog of standard waits."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from ..errors import AutomationError, ErrorKind
from ..models import Locator

C = TypeVar("C")
V = TypeVar("V")


class RepeatableAction(ABC, Generic[C, V]):
    """A stateless action over a context plus its retry predicates.

    By default an exception is ignorable when it is an
    :class:`~remote_browser_wrapper.errors.AutomationError` whose kind is
    listed in :attr:`ignored_kinds`, and no result is ignored.
    """

    ignored_kinds: frozenset[ErrorKind] = frozenset()

    @abstractmethod
    def apply(self, context: C) -> V:
        """Run one attempt against ``context``."""

    def ignore_exception(self, exc: BaseException) -> bool:
        return isinstance(exc, AutomationError) and exc.kind in self.ignored_kinds

    def ignore_result(self, result: V) -> bool:
        return False

    @property
    def description(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return self.description


class FunctionAction(RepeatableAction[C, V]):
    """Adapter turning a plain callable into a repeatable action."""

    def __init__(
        self,
        fn: Callable[[C], V],
        *,
        ignoring: Iterable[ErrorKind] = (),
        ignore_result: Optional[Callable[[V], bool]] = None,
        description: Optional[str] = None,
    ) -> None:
        self._fn = fn
        self.ignored_kinds = frozenset(ignoring)
        self._ignore_result = ignore_result
        self._description = description or getattr(fn, "__name__", repr(fn))

    def apply(self, context: C) -> V:
        return self._fn(context)

    def ignore_result(self, result: V) -> bool:
        if self._ignore_result is None:
            return False
        return self._ignore_result(result)

    @property
    def description(self) -> str:
        return self._description


def action(
    fn: Callable[[C], V],
    *,
    ignoring: Iterable[ErrorKind] = (),
    ignore_result: Optional[Callable[[V], bool]] = None,
    description: Optional[str] = None,
) -> FunctionAction[C, V]:
    """Build a :class:`FunctionAction` from ``fn``."""

    return FunctionAction(fn, ignoring=ignoring, ignore_result=ignore_result, description=description)


_NOT_FOUND = (ErrorKind.NOT_FOUND,)
_NOT_INTERACTABLE = (ErrorKind.NOT_INTERACTABLE,)


def perform_find_element(locator: Locator) -> FunctionAction[Any, Any]:
    return action(
        lambda ctx: ctx.find_element(locator),
        ignoring=_NOT_FOUND,
        description=f"find_element({locator})",
    )


def perform_find_elements(locator: Locator) -> FunctionAction[Any, list]:
    """Find elements, retrying while nothing matches."""

    return action(
        lambda ctx: ctx.find_elements(locator),
        ignoring=_NOT_FOUND,
        ignore_result=lambda found: len(found) == 0,
        description=f"find_elements({locator})",
    )


def perform_click() -> FunctionAction[Any, None]:
    return action(lambda el: el.click(), ignoring=_NOT_INTERACTABLE, description="click()")


def perform_submit() -> FunctionAction[Any, None]:
    return action(lambda el: el.submit(), ignoring=_NOT_INTERACTABLE, description="submit()")


def perform_send_keys(*keys: str) -> FunctionAction[Any, None]:
    return action(
        lambda el: el.send_keys(*keys),
        ignoring=_NOT_INTERACTABLE,
        description=f"send_keys({', '.join(map(repr, keys))})",
    )


def perform_clear() -> FunctionAction[Any, None]:
    return action(lambda el: el.clear(), ignoring=_NOT_INTERACTABLE, description="clear()")


def check_is_selected() -> FunctionAction[Any, bool]:
    return action(lambda el: el.is_selected(), ignoring=_NOT_INTERACTABLE, description="is_selected()")


def check_is_enabled() -> FunctionAction[Any, bool]:
    return action(lambda el: el.is_enabled(), ignoring=_NOT_INTERACTABLE, description="is_enabled()")


def perform_get_coordinates() -> FunctionAction[Any, Any]:
    return action(lambda el: el.coordinates(), ignoring=_NOT_INTERACTABLE, description="coordinates()")


def perform_switch_to_alert() -> FunctionAction[Any, Any]:
    """Switch to the alert, retrying while none is open. Context is a target locator."""

    return action(lambda locator: locator.alert(), ignoring=_NOT_FOUND, description="alert()")


def perform_switch_to_frame(reference: Any) -> FunctionAction[Any, Any]:
    """Switch to a frame by index, name or element. Context is a target locator."""

    return action(
        lambda locator: locator.frame(reference),
        ignoring=_NOT_FOUND,
        description=f"frame({reference!r})",
    )


def until_present(locator: Locator) -> FunctionAction[Any, Any]:
    """Wait until ``locator`` matches an element and return it."""

    return perform_find_element(locator)


def until_visible(locator: Locator) -> FunctionAction[Any, Any]:
    """Wait until ``locator`` matches a displayed element and return it.

    Results are ``None`` while the element is hidden, and ``None`` is ignored.
    """

    def _visible(ctx: Any) -> Any:
        element = ctx.find_element(locator)
        return element if element.is_displayed() else None

    return action(
        _visible,
        ignoring=(ErrorKind.NOT_FOUND, ErrorKind.STALE_REFERENCE),
        ignore_result=lambda found: found is None,
        description=f"visibility of {locator}",
    )


def until_enabled(locator: Locator) -> FunctionAction[Any, Any]:
    """Wait until ``locator`` matches an enabled element and return it."""

    def _enabled(ctx: Any) -> Any:
        element = ctx.find_element(locator)
        return element if element.is_enabled() else None

    return action(
        _enabled,
        ignoring=(ErrorKind.NOT_FOUND, ErrorKind.STALE_REFERENCE),
        ignore_result=lambda found: found is None,
        description=f"enabled state of {locator}",
    )
