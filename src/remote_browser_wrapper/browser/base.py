"""Capability interfaces of an automation session and its sub-objects.

Every interface marked with :func:`capability` is a unit that wrappers can
preserve, override or narrow. Backends implement whichever capabilities they
support; concrete backend classes are not capabilities themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, TypeVar, Union

from ..models import Cookie, Dimension, Locator, LogEntry, Point

T = TypeVar("T", bound=type)

_CAPABILITY_FLAG = "__capability__"


def capability(cls: T) -> T:
    """Mark ``cls`` as a capability interface."""

    setattr(cls, _CAPABILITY_FLAG, True)
    return cls


def is_capability(cls: type) -> bool:
    return bool(cls.__dict__.get(_CAPABILITY_FLAG, False))


def capabilities_of(obj: Any) -> frozenset[type]:
    """Return every capability implemented by ``obj`` (an instance or a class).

    Wrapper proxies advertise their capabilities through ``__capabilities__``
    because they acquire them by virtual registration.
    """

    cls = obj if isinstance(obj, type) else type(obj)
    declared = cls.__dict__.get("__capabilities__")
    if declared is not None:
        return frozenset(declared)
    return frozenset(klass for klass in cls.__mro__ if is_capability(klass))


def capability_members(cap: type) -> dict[str, bool]:
    """Map each member declared by ``cap`` (and its capability bases) to whether it is a property."""

    members: dict[str, bool] = {}
    for klass in reversed(cap.__mro__):
        if not is_capability(klass):
            continue
        for name, value in vars(klass).items():
            if getattr(value, "__isabstractmethod__", False):
                members[name] = isinstance(value, property)
    return members


@capability
class SearchContext(ABC):
    """Something elements can be located in."""

    @abstractmethod
    def find_element(self, locator: Locator) -> "Element":
        """Return the first element matching ``locator`` or raise ``NoSuchElementError``."""

    @abstractmethod
    def find_elements(self, locator: Locator) -> list["Element"]:
        """Return every element matching ``locator``; an empty list when nothing matches."""


@capability
class Session(SearchContext):
    """Root automation handle."""

    @abstractmethod
    def get(self, url: str) -> None:
        """Load ``url`` in the current window."""

    @property
    @abstractmethod
    def current_url(self) -> str:
        """URL of the current page."""

    @property
    @abstractmethod
    def title(self) -> str:
        """Title of the current page."""

    @property
    @abstractmethod
    def page_source(self) -> str:
        """Markup of the current page."""

    @property
    @abstractmethod
    def window_handles(self) -> list[str]:
        """Handles of every open window."""

    @property
    @abstractmethod
    def current_window_handle(self) -> str:
        """Handle of the focused window."""

    @abstractmethod
    def close(self) -> None:
        """Close the current window."""

    @abstractmethod
    def quit(self) -> None:
        """Close every window and release the session."""

    @abstractmethod
    def switch_to(self) -> "TargetLocator":
        """Return the locator used to switch frames, windows and alerts."""

    @abstractmethod
    def navigate(self) -> "Navigation":
        """Return the history navigation interface."""

    @abstractmethod
    def manage(self) -> "Options":
        """Return the session options interface."""


@capability
class JavascriptExecutor(ABC):
    @abstractmethod
    def execute_script(self, script: str, *args: Any) -> Any:
        """Run ``script`` in the current frame and return its result."""

    @abstractmethod
    def execute_async_script(self, script: str, *args: Any) -> Any:
        """Run ``script`` and wait for it to invoke its completion callback."""


@capability
class HasInputDevices(ABC):
    @abstractmethod
    def keyboard(self) -> "Keyboard":
        """Return the keyboard device."""

    @abstractmethod
    def mouse(self) -> "Mouse":
        """Return the mouse device."""


@capability
class TakesScreenshot(ABC):
    @abstractmethod
    def screenshot(self) -> bytes:
        """Return a PNG capture of the viewport."""


@capability
class Element(SearchContext):
    """A node of the current document."""

    @abstractmethod
    def click(self) -> None:
        """Click the element."""

    @abstractmethod
    def submit(self) -> None:
        """Submit the form the element belongs to."""

    @abstractmethod
    def send_keys(self, *keys: str) -> None:
        """Type ``keys`` into the element."""

    @abstractmethod
    def clear(self) -> None:
        """Clear the element's value."""

    @property
    @abstractmethod
    def tag_name(self) -> str:
        """Lower-case tag name."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Visible text."""

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        """Return the attribute (or property) ``name``."""

    @abstractmethod
    def is_selected(self) -> bool:
        """Return whether a checkbox, radio or option is selected."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Return whether the element is enabled."""

    @abstractmethod
    def is_displayed(self) -> bool:
        """Return whether the element is visible."""

    @abstractmethod
    def location(self) -> Point:
        """Top-left corner relative to the page."""

    @abstractmethod
    def size(self) -> Dimension:
        """Rendered size."""

    @abstractmethod
    def get_css_value(self, name: str) -> str:
        """Computed value of the CSS property ``name``."""


@capability
class Locatable(ABC):
    @abstractmethod
    def coordinates(self) -> "Coordinates":
        """Return the coordinates used by input devices to target the element."""


@capability
class TargetLocator(ABC):
    """Switches the session's focus."""

    @abstractmethod
    def frame(self, reference: Union[int, str, Element]) -> Session:
        """Focus a frame by index, name/id or element."""

    @abstractmethod
    def parent_frame(self) -> Session:
        """Focus the parent of the current frame."""

    @abstractmethod
    def window(self, name: str) -> Session:
        """Focus the window with handle or name ``name``."""

    @abstractmethod
    def default_content(self) -> Session:
        """Focus the top-level document."""

    @abstractmethod
    def active_element(self) -> Element:
        """Return the focused element."""

    @abstractmethod
    def alert(self) -> "Alert":
        """Return the open alert or raise ``NoAlertPresentError``."""


@capability
class Navigation(ABC):
    @abstractmethod
    def to(self, url: str) -> None:
        """Load ``url``."""

    @abstractmethod
    def back(self) -> None:
        """Go one step back in history."""

    @abstractmethod
    def forward(self) -> None:
        """Go one step forward in history."""

    @abstractmethod
    def refresh(self) -> None:
        """Reload the current page."""


@capability
class Alert(ABC):
    @abstractmethod
    def accept(self) -> None:
        """Accept the dialog."""

    @abstractmethod
    def dismiss(self) -> None:
        """Dismiss the dialog."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Message displayed by the dialog."""

    @abstractmethod
    def send_keys(self, text: str) -> None:
        """Type into a prompt dialog."""


@capability
class Options(ABC):
    """Session-level settings."""

    @abstractmethod
    def add_cookie(self, cookie: Cookie) -> None:
        """Add ``cookie`` for the current domain."""

    @abstractmethod
    def delete_cookie_named(self, name: str) -> None:
        """Delete the cookie called ``name``."""

    @abstractmethod
    def delete_cookie(self, cookie: Cookie) -> None:
        """Delete ``cookie``."""

    @abstractmethod
    def delete_all_cookies(self) -> None:
        """Delete every cookie of the current domain."""

    @abstractmethod
    def get_cookies(self) -> list[Cookie]:
        """Return the cookies visible to the current page."""

    @abstractmethod
    def get_cookie_named(self, name: str) -> Optional[Cookie]:
        """Return the cookie called ``name`` or ``None``."""

    @abstractmethod
    def timeouts(self) -> "Timeouts":
        """Return the timeouts interface."""

    @abstractmethod
    def window(self) -> "Window":
        """Return the current window interface."""

    @abstractmethod
    def get_log(self, log_type: str) -> list[LogEntry]:
        """Return and drain the log ``log_type`` (e.g. ``"browser"``)."""


@capability
class Timeouts(ABC):
    @abstractmethod
    def implicitly_wait(self, seconds: float) -> "Timeouts":
        """Set how long element lookups wait on the backend."""

    @abstractmethod
    def set_script_timeout(self, seconds: float) -> "Timeouts":
        """Set how long asynchronous scripts may run."""

    @abstractmethod
    def page_load_timeout(self, seconds: float) -> "Timeouts":
        """Set how long page loads may take."""


@capability
class Window(ABC):
    @abstractmethod
    def get_size(self) -> Dimension:
        """Return the window size."""

    @abstractmethod
    def set_size(self, size: Dimension) -> None:
        """Resize the window."""

    @abstractmethod
    def get_position(self) -> Point:
        """Return the window position."""

    @abstractmethod
    def set_position(self, position: Point) -> None:
        """Move the window."""

    @abstractmethod
    def maximize(self) -> None:
        """Maximize the window."""

    @abstractmethod
    def fullscreen(self) -> None:
        """Make the window fullscreen."""


@capability
class Coordinates(ABC):
    @abstractmethod
    def on_screen(self) -> Point:
        """Location relative to the screen."""

    @abstractmethod
    def in_view_port(self) -> Point:
        """Location relative to the viewport, scrolling the element into view."""

    @abstractmethod
    def on_page(self) -> Point:
        """Location relative to the page."""

    @abstractmethod
    def auxiliary(self) -> Any:
        """Backend-specific handle of the located object."""


@capability
class Keyboard(ABC):
    @abstractmethod
    def send_keys(self, *keys: str) -> None:
        """Type ``keys`` into the focused element."""

    @abstractmethod
    def press_key(self, key: str) -> None:
        """Press and hold ``key``."""

    @abstractmethod
    def release_key(self, key: str) -> None:
        """Release ``key``."""


@capability
class Mouse(ABC):
    @abstractmethod
    def click(self, where: Optional[Coordinates]) -> None:
        """Click at ``where`` or at the current position."""

    @abstractmethod
    def double_click(self, where: Optional[Coordinates]) -> None:
        """Double-click at ``where`` or at the current position."""

    @abstractmethod
    def context_click(self, where: Optional[Coordinates]) -> None:
        """Right-click at ``where`` or at the current position."""

    @abstractmethod
    def mouse_down(self, where: Optional[Coordinates]) -> None:
        """Press the left button."""

    @abstractmethod
    def mouse_up(self, where: Optional[Coordinates]) -> None:
        """Release the left button."""

    @abstractmethod
    def mouse_move(
        self,
        where: Optional[Coordinates],
        x_offset: Optional[int] = None,
        y_offset: Optional[int] = None,
    ) -> None:
        """Move to ``where``, optionally offset from its top-left corner."""

