"""Interception core: capability-preserving proxies routed through a hook chain.

A wrapper holds an original object and produces a proxy for it. Members of
the capabilities the wrapper implements are routed through the shared
:class:`HookChain` of the root wrapper; every other attribute is forwarded to
the original unchanged.
"""

from __future__ import annotations

import enum
import inspect
import logging
import threading
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Mapping, Optional

from ..browser.base import capabilities_of, capability_members
from ..errors import ConfigurationError

if TYPE_CHECKING:
    from .session import SessionWrapper

LOGGER = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Position of a wrapped object in the decoration tree."""

    SESSION = "session"
    ELEMENT = "element"
    TARGET_LOCATOR = "target_locator"
    ALERT = "alert"
    NAVIGATION = "navigation"
    OPTIONS = "options"
    TIMEOUTS = "timeouts"
    WINDOW = "window"
    COORDINATES = "coordinates"
    KEYBOARD = "keyboard"
    MOUSE = "mouse"


@dataclass(frozen=True, eq=False)
class DecoratorSpec:
    """Mapping from role to the wrapper class used for objects in that role."""

    roles: Mapping[Role, type] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", MappingProxyType({Role(k): v for k, v in self.roles.items()}))

    def get(self, role: Role, default: Optional[type] = None) -> Optional[type]:
        return self.roles.get(role, default)

    def merge(self, overrides: Optional["DecoratorSpec"]) -> "DecoratorSpec":
        """Return a spec where entries of ``overrides`` replace ours."""

        if overrides is None:
            return self
        return DecoratorSpec({**self.roles, **overrides.roles})

    def replace(self, **roles: type) -> "DecoratorSpec":
        """Return a copy with roles given by name, e.g. ``replace(element=MyElementWrapper)``."""

        return self.merge(DecoratorSpec({Role(name): cls for name, cls in roles.items()}))


class Hook:
    """Callbacks invoked around every routed member call.

    ``target`` is the wrapper of the object being called; ``target.role`` and
    ``target.wrapped`` tell which part of the decoration tree is involved.
    """

    def before_call(self, target: "AbstractWrapper", member: str, args: tuple, kwargs: dict) -> None:
        return

    def after_call(
        self,
        target: "AbstractWrapper",
        member: str,
        result: Any,
        args: tuple,
        kwargs: dict,
    ) -> None:
        return

    def on_error(
        self,
        target: "AbstractWrapper",
        member: str,
        exc: Exception,
        args: tuple,
        kwargs: dict,
    ) -> Any:
        """Return a replacement result or raise. The default re-raises ``exc``."""

        raise exc


class HookChain:
    """Ordered hooks shared by every wrapper of one decoration tree."""

    def __init__(self, hooks: Iterable[Hook] = ()) -> None:
        self._hooks: list[Hook] = list(hooks)

    def add(self, hook: Hook) -> None:
        self._hooks.append(hook)

    def remove(self, hook: Hook) -> None:
        self._hooks.remove(hook)

    def __iter__(self):
        return iter(list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)

    def before_call(self, target: "AbstractWrapper", member: str, args: tuple, kwargs: dict) -> None:
        for hook in list(self._hooks):
            hook.before_call(target, member, args, kwargs)

    def after_call(self, target: "AbstractWrapper", member: str, result: Any, args: tuple, kwargs: dict) -> None:
        for hook in list(self._hooks):
            hook.after_call(target, member, result, args, kwargs)

    def on_error(self, target: "AbstractWrapper", member: str, exc: Exception, args: tuple, kwargs: dict) -> Any:
        """Offer ``exc`` to each hook in turn.

        The first hook that returns resolves the call with its value. A hook
        that raises passes its exception on to the next hook; if every hook
        raises, the last exception propagates.
        """

        error = exc
        for hook in list(self._hooks):
            try:
                return hook.on_error(target, member, error, args, kwargs)
            except Exception as raised:
                error = raised
        raise error


class WrapperProxy:
    """Base of every generated proxy class."""

    __slots__ = ("_wrapper",)
    __capabilities__: ClassVar[frozenset[type]] = frozenset()

    def __init__(self, wrapper: "AbstractWrapper") -> None:
        object.__setattr__(self, "_wrapper", wrapper)

    def __getattr__(self, name: str) -> Any:
        return getattr(object.__getattribute__(self, "_wrapper").wrapped, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(object.__getattribute__(self, "_wrapper").wrapped, name, value)

    @property
    def __wrapped__(self) -> Any:
        return object.__getattribute__(self, "_wrapper").wrapped

    def __eq__(self, other: object) -> bool:
        return unwrap(self) == unwrap(other)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(unwrap(self))

    def __repr__(self) -> str:
        return f"Wrapper for {object.__getattribute__(self, '_wrapper').wrapped!r}"


def _routed_method(name: str):
    def method(self: WrapperProxy, *args: Any, **kwargs: Any) -> Any:
        return object.__getattribute__(self, "_wrapper").invoke(name, args, kwargs)

    method.__name__ = name
    method.__qualname__ = f"WrapperProxy.{name}"
    return method


def _routed_property(name: str) -> property:
    def getter(self: WrapperProxy) -> Any:
        return object.__getattribute__(self, "_wrapper").invoke(name, (), {})

    getter.__name__ = name
    return property(getter)


@lru_cache(maxsize=None)
def _members_of(capabilities: frozenset[type]) -> Mapping[str, bool]:
    members: dict[str, bool] = {}
    for cap in sorted(capabilities, key=lambda c: (c.__module__, c.__qualname__)):
        members.update(capability_members(cap))
    return MappingProxyType(members)


_PROXY_CLASSES: dict[tuple[type, type], type] = {}
_PROXY_LOCK = threading.Lock()


def _proxy_class(wrapper: "AbstractWrapper") -> type:
    key = (type(wrapper), type(wrapper.wrapped))
    with _PROXY_LOCK:
        cached = _PROXY_CLASSES.get(key)
        if cached is not None:
            return cached
        capabilities = wrapper.capabilities()
        routed = _members_of(wrapper.implemented_capabilities())
        namespace: dict[str, Any] = {
            "__slots__": (),
            "__capabilities__": capabilities,
            "__module__": __name__,
        }
        for name, is_property in routed.items():
            namespace[name] = _routed_property(name) if is_property else _routed_method(name)
        proxy_cls = type(f"{type(wrapper).__name__}Proxy", (WrapperProxy,), namespace)
        for cap in capabilities:
            cap.register(proxy_cls)
        _PROXY_CLASSES[key] = proxy_cls
        LOGGER.debug(
            "Built proxy class %s for %s with capabilities %s",
            proxy_cls.__name__,
            key[1].__name__,
            sorted(cap.__name__ for cap in capabilities),
        )
        return proxy_cls


class AbstractWrapper:
    """Base of every wrapper in a decoration tree.

    Subclasses declare the capability of their role in :attr:`capability` and
    may list :attr:`optional_capabilities` that are implemented only when the
    original supports them. A subclass implements a routed member simply by
    defining a method (or property) with the member's name; routed members it
    does not define are delegated to the original.
    """

    role: ClassVar[Role]
    capability: ClassVar[Optional[type]] = None
    optional_capabilities: ClassVar[tuple[type, ...]] = ()

    def __init__(self, root: "SessionWrapper", original: Any) -> None:
        self._root = root
        self._wrapped = original
        self._proxy: Optional[WrapperProxy] = None

    @property
    def root(self) -> "SessionWrapper":
        return self._root

    @property
    def wrapped(self) -> Any:
        """The original object, bypassing every hook."""

        return self._wrapped

    def set_wrapped(self, original: Any) -> None:
        """Swap the original object; existing proxies follow the swap."""

        self._wrapped = original

    @property
    def proxy(self) -> Any:
        if self._proxy is None:
            self._proxy = _proxy_class(self)(self)
        return self._proxy

    def implemented_capabilities(self) -> frozenset[type]:
        """Capabilities whose members are routed through the hooks."""

        supported = capabilities_of(self._wrapped)
        implemented = {cap for cap in self.optional_capabilities if cap in supported}
        if self.capability is not None:
            implemented.update(capabilities_of(self.capability))
        return frozenset(implemented)

    def capabilities(self) -> frozenset[type]:
        """Every capability the proxy advertises."""

        return capabilities_of(self._wrapped) | self.implemented_capabilities()

    def routed_members(self) -> Mapping[str, bool]:
        return _members_of(self.implemented_capabilities())

    def invoke(self, member: str, args: tuple, kwargs: dict) -> Any:
        """Run ``member`` through the root's hook chain."""

        hooks = self._root.hooks
        hooks.before_call(self, member, args, kwargs)
        try:
            result = self.call(member, args, kwargs)
        except Exception as exc:
            return hooks.on_error(self, member, exc, args, kwargs)
        hooks.after_call(self, member, result, args, kwargs)
        return result

    def call(self, member: str, args: tuple = (), kwargs: Optional[dict] = None) -> Any:
        """Run ``member`` on this wrapper (or the original) without any hooks."""

        kwargs = kwargs or {}
        if getattr(type(self), member, None) is not None:
            value = getattr(self, member)
            is_property = isinstance(inspect.getattr_static(type(self), member), property)
        else:
            value = getattr(self._wrapped, member)
            is_property = self.routed_members().get(member, False)
        if is_property:
            return value
        return value(*args, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._wrapped!r})"


def construct_wrapper(wrapper_cls: Any, *args: Any, **kwargs: Any) -> AbstractWrapper:
    """Instantiate ``wrapper_cls`` or raise :class:`ConfigurationError` when it cannot take ``args``."""

    if not (isinstance(wrapper_cls, type) and issubclass(wrapper_cls, AbstractWrapper)):
        raise ConfigurationError(f"{wrapper_cls!r} is not a wrapper class")
    try:
        inspect.signature(wrapper_cls).bind(*args, **kwargs)
    except TypeError as exc:
        raise ConfigurationError(
            f"Wrapper class {wrapper_cls.__name__} does not provide an appropriate constructor"
        ) from exc
    return wrapper_cls(*args, **kwargs)


def is_wrapped(obj: Any) -> bool:
    return isinstance(obj, WrapperProxy)


def wrapper_of(obj: Any) -> AbstractWrapper:
    """Return the wrapper behind a proxy."""

    if not isinstance(obj, WrapperProxy):
        raise TypeError(f"{obj!r} is not a wrapper proxy")
    return object.__getattribute__(obj, "_wrapper")


def unwrap(obj: Any) -> Any:
    """Strip every proxy layer from ``obj`` (and from items of lists and tuples)."""

    if isinstance(obj, list):
        return [unwrap(item) for item in obj]
    if isinstance(obj, tuple):
        return tuple(unwrap(item) for item in obj)
    while isinstance(obj, WrapperProxy):
        obj = object.__getattribute__(obj, "_wrapper").wrapped
    return obj
