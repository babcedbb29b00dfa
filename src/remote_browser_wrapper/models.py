"""Value types shared across the wrapper library."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class LocatorStrategy(str, enum.Enum):
    """Supported ways of locating elements."""

    CSS = "css"
    XPATH = "xpath"
    ID = "id"
    NAME = "name"
    TAG_NAME = "tag_name"
    LINK_TEXT = "link_text"
    TEXT = "text"


@dataclass(frozen=True)
class Locator:
    """A strategy plus a value, e.g. ``Locator.css("#login")``."""

    strategy: LocatorStrategy
    value: str

    @classmethod
    def css(cls, selector: str) -> "Locator":
        return cls(LocatorStrategy.CSS, selector)

    @classmethod
    def xpath(cls, expression: str) -> "Locator":
        return cls(LocatorStrategy.XPATH, expression)

    @classmethod
    def id(cls, element_id: str) -> "Locator":
        return cls(LocatorStrategy.ID, element_id)

    @classmethod
    def name(cls, name: str) -> "Locator":
        return cls(LocatorStrategy.NAME, name)

    @classmethod
    def tag_name(cls, tag: str) -> "Locator":
        return cls(LocatorStrategy.TAG_NAME, tag)

    @classmethod
    def link_text(cls, text: str) -> "Locator":
        return cls(LocatorStrategy.LINK_TEXT, text)

    @classmethod
    def text(cls, text: str) -> "Locator":
        return cls(LocatorStrategy.TEXT, text)

    def __str__(self) -> str:
        return f"By.{self.strategy.value}: {self.value}"


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Dimension:
    width: int
    height: int


class Cookie(BaseModel):
    """Browser cookie as exchanged with a session's options."""

    name: str
    value: str
    domain: Optional[str] = None
    path: str = "/"
    expires: Optional[float] = Field(default=None, description="Expiry as a unix timestamp.")
    secure: bool = False
    http_only: bool = False


class LogEntry(BaseModel):
    """One line of a backend-provided log (browser console, driver, ...)."""

    level: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _freeze(value: Any) -> Any:
    """Return a read-only deep copy of a JSON-like option value."""

    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _hashable(value: Any) -> Any:
    # Built from the same values equality compares, so 1 and 1.0 hash alike.
    if isinstance(value, Mapping):
        return frozenset((key, _hashable(item)) for key, item in value.items())
    if isinstance(value, tuple):
        return tuple(_hashable(item) for item in value)
    return value


class CapabilityDescriptor(BaseModel):
    """Immutable description of the desired automation target.

    Two descriptors are equal when browser name and options are equal, which
    makes them usable as part of a session lookup key. Options are copied on
    construction and exposed read-only: nested mappings become mapping
    proxies and lists become tuples.
    """

    model_config = ConfigDict(frozen=True)

    browser_name: str = Field(default="chromium")
    options: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("options", mode="after")
    @classmethod
    def _freeze_options(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("options")
    def _dump_options(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return _thaw(value)

    def __hash__(self) -> int:
        return hash((self.browser_name, _hashable(self.options)))

    def with_option(self, name: str, value: Any) -> "CapabilityDescriptor":
        """Return a copy with ``name`` set to ``value``."""

        return type(self)(browser_name=self.browser_name, options={**self.options, name: value})

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)


@dataclass(frozen=True)
class SessionKey:
    """Lookup key of a managed session: capabilities plus the remote endpoint.

    ``endpoint`` is ``None`` for a locally launched browser.
    """

    capabilities: CapabilityDescriptor
    endpoint: Optional[str] = None
