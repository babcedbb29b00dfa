"""Playwright-powered implementation of the session capabilities."""

from __future__ import annotations

import functools
import itertools
import json
import logging
from collections import deque
from typing import Any, Callable, Optional, TypeVar, Union

from playwright.sync_api import Error, TimeoutError as PlaywrightTimeoutError, sync_playwright

from ..errors import (
    AutomationError,
    ElementNotInteractableError,
    NoAlertPresentError,
    NoSuchElementError,
    NoSuchFrameError,
    NoSuchWindowError,
    SessionNotAvailableError,
    StaleElementReferenceError,
    UnhandledAlertError,
    UnsupportedOperationError,
)
from ..models import Cookie, Dimension, Locator, LocatorStrategy, LogEntry, Point
from .base import (
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

LOGGER = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

BROWSER_TYPES = {"chromium": None, "firefox": None, "webkit": None, "chrome": "chrome", "msedge": "msedge"}
DEFAULT_ACTION_TIMEOUT_MS = 2000

_STALE_MARKERS = ("not attached", "detached", "element handle is disposed", "node is detached")
_NOT_INTERACTABLE_MARKERS = (
    "not visible",
    "not enabled",
    "not editable",
    "outside of the viewport",
    "intercepts pointer events",
    "not an <input>",
)
_CLOSED_MARKERS = ("has been closed", "target closed", "browser has disconnected")


def translate_playwright_error(exc: Error) -> AutomationError:
    """Map a Playwright error onto the matching :class:`AutomationError`."""

    message = getattr(exc, "message", None) or str(exc)
    lowered = message.lower()
    if any(marker in lowered for marker in _STALE_MARKERS):
        return StaleElementReferenceError(message)
    if isinstance(exc, PlaywrightTimeoutError) or any(marker in lowered for marker in _NOT_INTERACTABLE_MARKERS):
        return ElementNotInteractableError(message)
    if any(marker in lowered for marker in _CLOSED_MARKERS):
        return SessionNotAvailableError(message)
    return AutomationError(message)


def _translated(method: F) -> F:
    """Raise pending dialogs before the call and translate Playwright errors raised by it."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        self._session.raise_if_dialog_open()
        try:
            return method(self, *args, **kwargs)
        except Error as exc:  # pragma: no cover - Playwright exception path
            raise translate_playwright_error(exc) from exc

    return wrapper  # type: ignore[return-value]


def to_selector(locator: Locator) -> str:
    """Render ``locator`` as a Playwright selector."""

    value = locator.value
    if locator.strategy is LocatorStrategy.CSS:
        return f"css={value}"
    if locator.strategy is LocatorStrategy.XPATH:
        return f"xpath={value}"
    if locator.strategy is LocatorStrategy.ID:
        return f"css=[id={json.dumps(value)}]"
    if locator.strategy is LocatorStrategy.NAME:
        return f"css=[name={json.dumps(value)}]"
    if locator.strategy is LocatorStrategy.TAG_NAME:
        return f"css={value}"
    if locator.strategy is LocatorStrategy.LINK_TEXT:
        return f"css=a:text-is({json.dumps(value)})"
    if locator.strategy is LocatorStrategy.TEXT:
        return f"text={json.dumps(value)}"
    raise UnsupportedOperationError(f"Unsupported locator strategy: {locator.strategy}")


_ELEMENT_RECT_SCRIPT = """
el => {
  const r = el.getBoundingClientRect();
  return {x: r.left, y: r.top, width: r.width, height: r.height,
          scrollX: window.scrollX, scrollY: window.scrollY,
          screenX: window.screenX, screenY: window.screenY};
}
"""


class PlaywrightElement(Element, Locatable):
    """Element backed by a Playwright element handle."""

    def __init__(self, session: "PlaywrightSession", handle: Any) -> None:
        self._session = session
        self._handle = handle

    @property
    def handle(self) -> Any:
        return self._handle

    @_translated
    def find_element(self, locator: Locator) -> "PlaywrightElement":
        return self._session._find_one(self._handle, locator)

    @_translated
    def find_elements(self, locator: Locator) -> list[Element]:
        return self._session._find_all(self._handle, locator)

    @_translated
    def click(self) -> None:
        self._handle.click(timeout=self._session.action_timeout_ms)

    @_translated
    def submit(self) -> None:
        self._handle.evaluate(
            "el => { const f = el.form || el.closest('form');"
            " if (!f) throw new Error('Element is not part of a form');"
            " f.requestSubmit ? f.requestSubmit() : f.submit(); }"
        )

    @_translated
    def send_keys(self, *keys: str) -> None:
        self._handle.type("".join(keys), timeout=self._session.action_timeout_ms)

    @_translated
    def clear(self) -> None:
        self._handle.fill("", timeout=self._session.action_timeout_ms)

    @property
    @_translated
    def tag_name(self) -> str:
        return self._handle.evaluate("el => el.tagName.toLowerCase()")

    @property
    @_translated
    def text(self) -> str:
        return self._handle.inner_text()

    @_translated
    def get_attribute(self, name: str) -> Optional[str]:
        value = self._handle.get_attribute(name)
        if value is not None:
            return value
        prop = self._handle.evaluate("(el, name) => el[name] === undefined ? null : el[name]", name)
        return None if prop is None else str(prop)

    @_translated
    def is_selected(self) -> bool:
        return bool(self._handle.evaluate("el => !!(el.checked || el.selected)"))

    @_translated
    def is_enabled(self) -> bool:
        return self._handle.is_enabled()

    @_translated
    def is_displayed(self) -> bool:
        return self._handle.is_visible()

    @_translated
    def location(self) -> Point:
        rect = self._handle.evaluate(_ELEMENT_RECT_SCRIPT)
        return Point(int(rect["x"] + rect["scrollX"]), int(rect["y"] + rect["scrollY"]))

    @_translated
    def size(self) -> Dimension:
        rect = self._handle.evaluate(_ELEMENT_RECT_SCRIPT)
        return Dimension(int(rect["width"]), int(rect["height"]))

    @_translated
    def get_css_value(self, name: str) -> str:
        return self._handle.evaluate("(el, name) => getComputedStyle(el).getPropertyValue(name)", name)

    def coordinates(self) -> "PlaywrightCoordinates":
        return PlaywrightCoordinates(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaywrightElement):
            return NotImplemented
        return self._handle is other._handle

    def __hash__(self) -> int:
        return id(self._handle)

    def __repr__(self) -> str:
        return f"PlaywrightElement({self._handle})"


class PlaywrightCoordinates(Coordinates):
    def __init__(self, element: PlaywrightElement) -> None:
        self._element = element
        self._session = element._session

    @_translated
    def on_screen(self) -> Point:
        rect = self._element.handle.evaluate(_ELEMENT_RECT_SCRIPT)
        return Point(int(rect["x"] + rect["screenX"]), int(rect["y"] + rect["screenY"]))

    @_translated
    def in_view_port(self) -> Point:
        self._element.handle.scroll_into_view_if_needed(timeout=self._session.action_timeout_ms)
        rect = self._element.handle.evaluate(_ELEMENT_RECT_SCRIPT)
        return Point(int(rect["x"]), int(rect["y"]))

    def on_page(self) -> Point:
        return self._element.location()

    def auxiliary(self) -> Any:
        return self._element.handle


class PlaywrightAlert(Alert):
    def __init__(self, session: "PlaywrightSession", dialog: Any) -> None:
        self._session = session
        self._dialog = dialog
        self._prompt_text: Optional[str] = None

    def accept(self) -> None:
        self._session._close_dialog(self._dialog)
        try:
            if self._prompt_text is None:
                self._dialog.accept()
            else:
                self._dialog.accept(self._prompt_text)
        except Error as exc:  # pragma: no cover - Playwright exception path
            raise translate_playwright_error(exc) from exc

    def dismiss(self) -> None:
        self._session._close_dialog(self._dialog)
        try:
            self._dialog.dismiss()
        except Error as exc:  # pragma: no cover - Playwright exception path
            raise translate_playwright_error(exc) from exc

    @property
    def text(self) -> str:
        return self._dialog.message

    def send_keys(self, text: str) -> None:
        if self._dialog.type != "prompt":
            raise ElementNotInteractableError(f"Cannot type into a {self._dialog.type} dialog")
        self._prompt_text = text


class PlaywrightTargetLocator(TargetLocator):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    @_translated
    def frame(self, reference: Union[int, str, Element]) -> Session:
        current = self._session._frame
        target = None
        if isinstance(reference, int):
            children = current.child_frames
            if 0 <= reference < len(children):
                target = children[reference]
        elif isinstance(reference, str):
            handle = current.query_selector(
                f"css=iframe[name={json.dumps(reference)}], iframe[id={json.dumps(reference)}],"
                f" frame[name={json.dumps(reference)}], frame[id={json.dumps(reference)}]"
            )
            target = handle.content_frame() if handle is not None else None
        elif isinstance(reference, PlaywrightElement):
            target = reference.handle.content_frame()
        if target is None:
            raise NoSuchFrameError(f"Unable to locate frame: {reference!r}")
        self._session._frame = target
        return self._session

    @_translated
    def parent_frame(self) -> Session:
        parent = self._session._frame.parent_frame
        if parent is not None:
            self._session._frame = parent
        return self._session

    @_translated
    def window(self, name: str) -> Session:
        self._session._switch_to_window(name)
        return self._session

    @_translated
    def default_content(self) -> Session:
        self._session._frame = self._session._page.main_frame
        return self._session

    @_translated
    def active_element(self) -> Element:
        handle = self._session._frame.evaluate_handle("() => document.activeElement || document.body")
        return PlaywrightElement(self._session, handle.as_element())

    def alert(self) -> Alert:
        dialog = self._session._open_dialog()
        if dialog is None:
            raise NoAlertPresentError("No alert is open")
        return PlaywrightAlert(self._session, dialog)


class PlaywrightNavigation(Navigation):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    @_translated
    def to(self, url: str) -> None:
        self._session.get(url)

    @_translated
    def back(self) -> None:
        self._session._page.go_back()
        self._session._frame = self._session._page.main_frame

    @_translated
    def forward(self) -> None:
        self._session._page.go_forward()
        self._session._frame = self._session._page.main_frame

    @_translated
    def refresh(self) -> None:
        self._session._page.reload()
        self._session._frame = self._session._page.main_frame


def _to_cookie(raw: dict[str, Any]) -> Cookie:
    expires = raw.get("expires")
    return Cookie(
        name=raw["name"],
        value=raw["value"],
        domain=raw.get("domain"),
        path=raw.get("path", "/"),
        expires=None if expires is None or expires < 0 else expires,
        secure=raw.get("secure", False),
        http_only=raw.get("httpOnly", False),
    )


class PlaywrightTimeouts(Timeouts):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    def implicitly_wait(self, seconds: float) -> Timeouts:
        self._session.implicit_wait = seconds
        return self

    def set_script_timeout(self, seconds: float) -> Timeouts:
        self._session.script_timeout = seconds
        return self

    def page_load_timeout(self, seconds: float) -> Timeouts:
        self._session._context.set_default_navigation_timeout(seconds * 1000)
        return self


class PlaywrightWindow(Window):
    """The current page's viewport stands in for the browser window."""

    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    @_translated
    def get_size(self) -> Dimension:
        viewport = self._session._page.viewport_size or {"width": 0, "height": 0}
        return Dimension(viewport["width"], viewport["height"])

    @_translated
    def set_size(self, size: Dimension) -> None:
        self._session._page.set_viewport_size({"width": size.width, "height": size.height})

    @_translated
    def get_position(self) -> Point:
        position = self._session._page.evaluate("() => ({x: window.screenX, y: window.screenY})")
        return Point(position["x"], position["y"])

    @_translated
    def set_position(self, position: Point) -> None:
        self._session._page.evaluate("([x, y]) => window.moveTo(x, y)", [position.x, position.y])

    @_translated
    def maximize(self) -> None:
        screen = self._session._page.evaluate("() => ({width: screen.availWidth, height: screen.availHeight})")
        self._session._page.set_viewport_size(screen)

    @_translated
    def fullscreen(self) -> None:
        screen = self._session._page.evaluate("() => ({width: screen.width, height: screen.height})")
        self._session._page.set_viewport_size(screen)


class PlaywrightOptions(Options):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    @_translated
    def add_cookie(self, cookie: Cookie) -> None:
        payload: dict[str, Any] = {
            "name": cookie.name,
            "value": cookie.value,
            "secure": cookie.secure,
            "httpOnly": cookie.http_only,
        }
        if cookie.domain:
            payload.update(domain=cookie.domain, path=cookie.path)
        else:
            payload["url"] = self._session._page.url
        if cookie.expires is not None:
            payload["expires"] = cookie.expires
        self._session._context.add_cookies([payload])

    @_translated
    def delete_cookie_named(self, name: str) -> None:
        self._session._context.clear_cookies(name=name)

    def delete_cookie(self, cookie: Cookie) -> None:
        self.delete_cookie_named(cookie.name)

    @_translated
    def delete_all_cookies(self) -> None:
        self._session._context.clear_cookies()

    @_translated
    def get_cookies(self) -> list[Cookie]:
        return [_to_cookie(raw) for raw in self._session._context.cookies(self._session._page.url)]

    def get_cookie_named(self, name: str) -> Optional[Cookie]:
        return next((cookie for cookie in self.get_cookies() if cookie.name == name), None)

    def timeouts(self) -> Timeouts:
        return PlaywrightTimeouts(self._session)

    def window(self) -> Window:
        return PlaywrightWindow(self._session)

    def get_log(self, log_type: str) -> list[LogEntry]:
        if log_type != "browser":
            return []
        return self._session._drain_console()


class PlaywrightKeyboard(Keyboard):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    @_translated
    def send_keys(self, *keys: str) -> None:
        self._session._page.keyboard.type("".join(keys))

    @_translated
    def press_key(self, key: str) -> None:
        self._session._page.keyboard.down(key)

    @_translated
    def release_key(self, key: str) -> None:
        self._session._page.keyboard.up(key)


class PlaywrightMouse(Mouse):
    def __init__(self, session: "PlaywrightSession") -> None:
        self._session = session

    def _target(self, where: Optional[Coordinates], x_offset: Optional[int] = None, y_offset: Optional[int] = None):
        if where is None:
            x, y = self._session._mouse_position
            return x + (x_offset or 0), y + (y_offset or 0)
        handle = where.auxiliary()
        handle.scroll_into_view_if_needed(timeout=self._session.action_timeout_ms)
        box = handle.bounding_box()
        if box is None:
            raise ElementNotInteractableError("Element has no visible box to target")
        if x_offset is None and y_offset is None:
            return box["x"] + box["width"] / 2, box["y"] + box["height"] / 2
        return box["x"] + (x_offset or 0), box["y"] + (y_offset or 0)

    def _move(self, x: float, y: float) -> None:
        self._session._page.mouse.move(x, y)
        self._session._mouse_position = (x, y)

    @_translated
    def click(self, where: Optional[Coordinates]) -> None:
        x, y = self._target(where)
        self._move(x, y)
        self._session._page.mouse.click(x, y)

    @_translated
    def double_click(self, where: Optional[Coordinates]) -> None:
        x, y = self._target(where)
        self._move(x, y)
        self._session._page.mouse.dblclick(x, y)

    @_translated
    def context_click(self, where: Optional[Coordinates]) -> None:
        x, y = self._target(where)
        self._move(x, y)
        self._session._page.mouse.click(x, y, button="right")

    @_translated
    def mouse_down(self, where: Optional[Coordinates]) -> None:
        self._move(*self._target(where))
        self._session._page.mouse.down()

    @_translated
    def mouse_up(self, where: Optional[Coordinates]) -> None:
        self._move(*self._target(where))
        self._session._page.mouse.up()

    @_translated
    def mouse_move(
        self,
        where: Optional[Coordinates],
        x_offset: Optional[int] = None,
        y_offset: Optional[int] = None,
    ) -> None:
        self._move(*self._target(where, x_offset, y_offset))


_SYNC_SCRIPT_WRAPPER = "args => (function() { %s }).apply(null, args)"
_ASYNC_SCRIPT_WRAPPER = "args => new Promise(resolve => { (function() { %s }).apply(null, args.concat([resolve])); })"


class PlaywrightSession(Session, JavascriptExecutor, HasInputDevices, TakesScreenshot):
    """Session backed by a Playwright browser context.

    Pages of the context are exposed as windows. Dialogs opened by a page are
    kept open until handled through :meth:`switch_to`; while one is pending,
    every other call fails with :class:`UnhandledAlertError`.
    """

    def __init__(
        self,
        playwright: Any,
        browser: Any,
        context: Any,
        *,
        action_timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._session = self
        self.action_timeout_ms = action_timeout_ms
        self.implicit_wait = 0.0
        self.script_timeout = 30.0
        self._handle_ids = itertools.count(1)
        self._handles: dict[str, Any] = {}
        self._dialogs: deque[Any] = deque()
        self._console: list[LogEntry] = []
        self._mouse_position: tuple[float, float] = (0, 0)
        context.on("page", self._register_page)
        pages = context.pages
        for page in pages:
            self._register_page(page)
        self._page = pages[0] if pages else context.new_page()
        self._frame = self._page.main_frame

    @classmethod
    def launch(
        cls,
        browser_name: str = "chromium",
        *,
        headless: bool = True,
        viewport: Optional[dict[str, int]] = None,
        args: Optional[list[str]] = None,
        action_timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS,
    ) -> "PlaywrightSession":
        if browser_name not in BROWSER_TYPES:
            raise UnsupportedOperationError(f"Unsupported browser: {browser_name}")
        LOGGER.debug("Launching Playwright %s (headless=%s)", browser_name, headless)
        playwright = sync_playwright().start()
        channel = BROWSER_TYPES[browser_name]
        browser_type = getattr(playwright, "chromium" if channel else browser_name)
        launch_kwargs: dict[str, Any] = {"headless": headless, "args": args or []}
        if channel:
            launch_kwargs["channel"] = channel
        try:
            browser = browser_type.launch(**launch_kwargs)
            context = browser.new_context(viewport=viewport) if viewport else browser.new_context()
        except Error as exc:  # pragma: no cover - Playwright exception path
            playwright.stop()
            raise SessionNotAvailableError(str(exc)) from exc
        return cls(playwright, browser, context, action_timeout_ms=action_timeout_ms)

    @classmethod
    def connect(
        cls,
        endpoint: str,
        browser_name: str = "chromium",
        *,
        viewport: Optional[dict[str, int]] = None,
        action_timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS,
    ) -> "PlaywrightSession":
        """Connect to a Playwright server (``ws://``) or a CDP endpoint (``http://``)."""

        LOGGER.debug("Connecting to remote %s browser at %s", browser_name, endpoint)
        playwright = sync_playwright().start()
        browser_type = getattr(playwright, "chromium" if BROWSER_TYPES.get(browser_name) else browser_name)
        try:
            if endpoint.startswith(("ws://", "wss://")):
                browser = browser_type.connect(endpoint)
            else:
                browser = playwright.chromium.connect_over_cdp(endpoint)
            context = browser.new_context(viewport=viewport) if viewport else browser.new_context()
        except Error as exc:  # pragma: no cover - Playwright exception path
            playwright.stop()
            raise SessionNotAvailableError(f"Could not connect to {endpoint}: {exc}") from exc
        return cls(playwright, browser, context, action_timeout_ms=action_timeout_ms)

    def _register_page(self, page: Any) -> None:
        handle = f"page-{next(self._handle_ids)}"
        self._handles[handle] = page
        page.on("dialog", self._dialogs.append)
        page.on(
            "console",
            lambda message: self._console.append(LogEntry(level=message.type, message=message.text)),
        )

    def _drain_console(self) -> list[LogEntry]:
        entries, self._console = self._console, []
        return entries

    def _open_dialog(self) -> Optional[Any]:
        return self._dialogs[0] if self._dialogs else None

    def _close_dialog(self, dialog: Any) -> None:
        if dialog in self._dialogs:
            self._dialogs.remove(dialog)

    def raise_if_dialog_open(self) -> None:
        dialog = self._open_dialog()
        if dialog is not None:
            raise UnhandledAlertError(f"Unexpected {dialog.type} dialog is open", alert_text=dialog.message)

    def _switch_to_window(self, name: str) -> None:
        page = self._handles.get(name)
        if page is None:
            for candidate in self._handles.values():
                if candidate.evaluate("() => window.name") == name:
                    page = candidate
                    break
        if page is None or page.is_closed():
            raise NoSuchWindowError(f"No window named {name!r}")
        self._page = page
        self._frame = page.main_frame
        page.bring_to_front()

    def _find_one(self, root: Any, locator: Locator) -> PlaywrightElement:
        selector = to_selector(locator)
        if self.implicit_wait > 0:
            try:
                handle = root.wait_for_selector(selector, state="attached", timeout=self.implicit_wait * 1000)
            except PlaywrightTimeoutError:
                handle = None
        else:
            handle = root.query_selector(selector)
        if handle is None:
            raise NoSuchElementError(f"Unable to locate element: {locator}")
        return PlaywrightElement(self, handle)

    def _find_all(self, root: Any, locator: Locator) -> list[Element]:
        selector = to_selector(locator)
        handles = root.query_selector_all(selector)
        if not handles and self.implicit_wait > 0:
            try:
                root.wait_for_selector(selector, state="attached", timeout=self.implicit_wait * 1000)
            except PlaywrightTimeoutError:
                return []
            handles = root.query_selector_all(selector)
        return [PlaywrightElement(self, handle) for handle in handles]

    @_translated
    def find_element(self, locator: Locator) -> Element:
        return self._find_one(self._frame, locator)

    @_translated
    def find_elements(self, locator: Locator) -> list[Element]:
        return self._find_all(self._frame, locator)

    @_translated
    def get(self, url: str) -> None:
        LOGGER.debug("Navigating to %s", url)
        self._page.goto(url, wait_until="load")
        self._frame = self._page.main_frame

    @property
    def current_url(self) -> str:
        if self._page.is_closed():
            raise SessionNotAvailableError("The current window has been closed")
        return self._page.url

    @property
    @_translated
    def title(self) -> str:
        return self._page.title()

    @property
    @_translated
    def page_source(self) -> str:
        return self._frame.content()

    @property
    def window_handles(self) -> list[str]:
        return [handle for handle, page in self._handles.items() if not page.is_closed()]

    @property
    def current_window_handle(self) -> str:
        for handle, page in self._handles.items():
            if page is self._page:
                return handle
        raise NoSuchWindowError("The current window has been closed")

    @_translated
    def close(self) -> None:
        closing = self._page
        closing.close()
        remaining = [page for page in self._handles.values() if not page.is_closed()]
        if remaining:
            self._page = remaining[0]
            self._frame = self._page.main_frame

    def quit(self) -> None:
        LOGGER.debug("Stopping Playwright session")
        try:
            self._context.close()
        finally:
            if self._browser is not None:
                self._browser.close()
            if self._playwright is not None:
                self._playwright.stop()
        self._dialogs.clear()

    def switch_to(self) -> TargetLocator:
        return PlaywrightTargetLocator(self)

    def navigate(self) -> Navigation:
        return PlaywrightNavigation(self)

    def manage(self) -> Options:
        return PlaywrightOptions(self)

    def keyboard(self) -> Keyboard:
        return PlaywrightKeyboard(self)

    def mouse(self) -> Mouse:
        return PlaywrightMouse(self)

    def _script_arguments(self, args: tuple) -> list[Any]:
        return [arg.handle if isinstance(arg, PlaywrightElement) else arg for arg in args]

    def _script_result(self, handle: Any) -> Any:
        element = handle.as_element()
        if element is not None:
            return PlaywrightElement(self, element)
        return handle.json_value()

    @_translated
    def execute_script(self, script: str, *args: Any) -> Any:
        handle = self._frame.evaluate_handle(_SYNC_SCRIPT_WRAPPER % script, self._script_arguments(args))
        return self._script_result(handle)

    @_translated
    def execute_async_script(self, script: str, *args: Any) -> Any:
        handle = self._frame.evaluate_handle(_ASYNC_SCRIPT_WRAPPER % script, self._script_arguments(args))
        return self._script_result(handle)

    @_translated
    def screenshot(self) -> bytes:
        return self._page.screenshot()

    def __repr__(self) -> str:
        return f"PlaywrightSession({self._browser!r})"
