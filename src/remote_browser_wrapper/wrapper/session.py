"""Root session wrapper and the pass-through wrappers of every sub-object role."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Iterable, Optional

from ..browser.base import (
    Alert,
    Coordinates,
    Element,
    HasInputDevices,
    JavascriptExecutor,
    Keyboard,
    Locatable,
    Mouse,
    Navigation,
    Options,
    Session,
    TakesScreenshot,
    TargetLocator,
    Timeouts,
    Window,
)
from ..errors import ConfigurationError
from ..models import Locator
from .base import AbstractWrapper, DecoratorSpec, Hook, HookChain, Role, construct_wrapper, unwrap

LOGGER = logging.getLogger(__name__)


class ElementWrapper(AbstractWrapper):
    role = Role.ELEMENT
    capability = Element
    optional_capabilities = (Locatable,)

    def find_element(self, locator: Locator) -> Any:
        return self.root.wrap(Role.ELEMENT, self.wrapped.find_element(locator))

    def find_elements(self, locator: Locator) -> list[Any]:
        return self.root.wrap_all(Role.ELEMENT, self.wrapped.find_elements(locator))

    def coordinates(self) -> Any:
        return self.root.wrap(Role.COORDINATES, self.wrapped.coordinates())


class TargetLocatorWrapper(AbstractWrapper):
    """Switches focus on the original and hands back the decorated session."""

    role = Role.TARGET_LOCATOR
    capability = TargetLocator

    def frame(self, reference: Any) -> Any:
        self.wrapped.frame(unwrap(reference))
        return self.root.proxy

    def parent_frame(self) -> Any:
        self.wrapped.parent_frame()
        return self.root.proxy

    def window(self, name: str) -> Any:
        self.wrapped.window(name)
        return self.root.proxy

    def default_content(self) -> Any:
        self.wrapped.default_content()
        return self.root.proxy

    def active_element(self) -> Any:
        return self.root.wrap(Role.ELEMENT, self.wrapped.active_element())

    def alert(self) -> Any:
        return self.root.wrap(Role.ALERT, self.wrapped.alert())


class AlertWrapper(AbstractWrapper):
    role = Role.ALERT
    capability = Alert


class NavigationWrapper(AbstractWrapper):
    role = Role.NAVIGATION
    capability = Navigation


class OptionsWrapper(AbstractWrapper):
    role = Role.OPTIONS
    capability = Options

    def timeouts(self) -> Any:
        return self.root.wrap(Role.TIMEOUTS, self.wrapped.timeouts())

    def window(self) -> Any:
        return self.root.wrap(Role.WINDOW, self.wrapped.window())


class TimeoutsWrapper(AbstractWrapper):
    """Timeouts setters return the decorated timeouts object for chaining."""

    role = Role.TIMEOUTS
    capability = Timeouts

    def implicitly_wait(self, seconds: float) -> Any:
        self.wrapped.implicitly_wait(seconds)
        return self.proxy

    def set_script_timeout(self, seconds: float) -> Any:
        self.wrapped.set_script_timeout(seconds)
        return self.proxy

    def page_load_timeout(self, seconds: float) -> Any:
        self.wrapped.page_load_timeout(seconds)
        return self.proxy


class WindowWrapper(AbstractWrapper):
    role = Role.WINDOW
    capability = Window


class CoordinatesWrapper(AbstractWrapper):
    role = Role.COORDINATES
    capability = Coordinates


class KeyboardWrapper(AbstractWrapper):
    role = Role.KEYBOARD
    capability = Keyboard


class MouseWrapper(AbstractWrapper):
    """Mouse calls receive raw coordinates."""

    role = Role.MOUSE
    capability = Mouse

    def click(self, where: Optional[Any]) -> None:
        self.wrapped.click(unwrap(where))

    def double_click(self, where: Optional[Any]) -> None:
        self.wrapped.double_click(unwrap(where))

    def context_click(self, where: Optional[Any]) -> None:
        self.wrapped.context_click(unwrap(where))

    def mouse_down(self, where: Optional[Any]) -> None:
        self.wrapped.mouse_down(unwrap(where))

    def mouse_up(self, where: Optional[Any]) -> None:
        self.wrapped.mouse_up(unwrap(where))

    def mouse_move(
        self,
        where: Optional[Any],
        x_offset: Optional[int] = None,
        y_offset: Optional[int] = None,
    ) -> None:
        self.wrapped.mouse_move(unwrap(where), x_offset, y_offset)


class SessionWrapper(AbstractWrapper, Hook):
    """Root of a decoration tree.

    The root owns the :class:`DecoratorSpec` used to wrap every sub-object and
    the :class:`HookChain` every wrapper of the tree reports to. The root is
    the first hook of its own chain, so subclasses customise behaviour by
    overriding :meth:`before_call`, :meth:`after_call` and :meth:`on_error`.
    """

    role = Role.SESSION
    capability = Session
    optional_capabilities = (JavascriptExecutor, HasInputDevices, TakesScreenshot)
    default_spec: ClassVar[DecoratorSpec] = DecoratorSpec(
        {
            Role.ELEMENT: ElementWrapper,
            Role.TARGET_LOCATOR: TargetLocatorWrapper,
            Role.ALERT: AlertWrapper,
            Role.NAVIGATION: NavigationWrapper,
            Role.OPTIONS: OptionsWrapper,
            Role.TIMEOUTS: TimeoutsWrapper,
            Role.WINDOW: WindowWrapper,
            Role.COORDINATES: CoordinatesWrapper,
            Role.KEYBOARD: KeyboardWrapper,
            Role.MOUSE: MouseWrapper,
        }
    )

    def __init__(self, original: Any) -> None:
        super().__init__(self, original)
        self._spec = type(self).default_spec
        self._hooks = HookChain([self])

    @property
    def session(self) -> Any:
        """The decorated session."""

        return self.proxy

    @property
    def spec(self) -> DecoratorSpec:
        return self._spec

    def use_spec(self, overrides: Optional[DecoratorSpec]) -> None:
        """Replace role wrappers with the entries of ``overrides``."""

        self._spec = self._spec.merge(overrides)

    @property
    def hooks(self) -> HookChain:
        return self._hooks

    def add_hook(self, hook: Hook) -> None:
        self._hooks.add(hook)

    def remove_hook(self, hook: Hook) -> None:
        self._hooks.remove(hook)

    def wrap(self, role: Role, original: Any) -> Any:
        """Decorate ``original`` with the wrapper registered for ``role``."""

        if original is None:
            return None
        if role is Role.SESSION:
            return self.proxy
        wrapper_cls = self._spec.get(role)
        if wrapper_cls is None:
            return original
        return construct_wrapper(wrapper_cls, self, original).proxy

    def wrap_all(self, role: Role, originals: Iterable[Any]) -> list[Any]:
        return [self.wrap(role, original) for original in originals]

    def wrap_result(self, result: Any) -> Any:
        """Decorate elements found in a script result."""

        if isinstance(result, Element):
            return self.wrap(Role.ELEMENT, result)
        if isinstance(result, list):
            return [self.wrap_result(item) for item in result]
        if isinstance(result, dict):
            return {key: self.wrap_result(value) for key, value in result.items()}
        return result

    def find_element(self, locator: Locator) -> Any:
        return self.wrap(Role.ELEMENT, self.wrapped.find_element(locator))

    def find_elements(self, locator: Locator) -> list[Any]:
        return self.wrap_all(Role.ELEMENT, self.wrapped.find_elements(locator))

    def switch_to(self) -> Any:
        return self.wrap(Role.TARGET_LOCATOR, self.wrapped.switch_to())

    def navigate(self) -> Any:
        return self.wrap(Role.NAVIGATION, self.wrapped.navigate())

    def manage(self) -> Any:
        return self.wrap(Role.OPTIONS, self.wrapped.manage())

    def keyboard(self) -> Any:
        return self.wrap(Role.KEYBOARD, self.wrapped.keyboard())

    def mouse(self) -> Any:
        return self.wrap(Role.MOUSE, self.wrapped.mouse())

    def execute_script(self, script: str, *args: Any) -> Any:
        return self.wrap_result(self.wrapped.execute_script(script, *unwrap(args)))

    def execute_async_script(self, script: str, *args: Any) -> Any:
        return self.wrap_result(self.wrapped.execute_async_script(script, *unwrap(args)))


def decorate(original: Any, spec: Optional[DecoratorSpec] = None, **options: Any) -> Any:
    """Decorate ``original`` and return the decorated session.

    The root wrapper class is the one registered for ``Role.SESSION`` in
    ``spec`` (``SessionWrapper`` by default); ``options`` are passed to its
    constructor.
    """

    root_cls = spec.get(Role.SESSION, SessionWrapper) if spec is not None else SessionWrapper
    root = construct_wrapper(root_cls, original, **options)
    if not isinstance(root, SessionWrapper):
        raise ConfigurationError(f"Root wrapper {type(root).__name__} must derive from SessionWrapper")
    root.use_spec(spec)
    LOGGER.debug("Decorated %r with %s", original, root_cls.__name__)
    return root.proxy
