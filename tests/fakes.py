"""In-memory browser used by the tests."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Optional

from remote_browser_wrapper.browser.base import (
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
from remote_browser_wrapper.errors import (
    NoAlertPresentError,
    NoSuchElementError,
    NoSuchFrameError,
    SessionNotAvailableError,
    StaleElementReferenceError,
    UnhandledAlertError,
)
from remote_browser_wrapper.models import Cookie, Dimension, Locator, LogEntry, Point


class Scripted:
    """Mixin that raises queued errors on the next calls of a member."""

    def _init_scripted(self) -> None:
        self.failures: dict[str, deque[Exception]] = defaultdict(deque)
        self.calls: list[str] = []

    def fail(self, member: str, *errors: Exception) -> None:
        self.failures[member].extend(errors)

    def _record(self, member: str) -> None:
        self.calls.append(member)
        queue = self.failures.get(member)
        if queue:
            raise queue.popleft()


class FakeElement(Element, Locatable, Scripted):
    def __init__(
        self,
        name: str = "element",
        *,
        text: str = "",
        tag: str = "div",
        displayed: bool = True,
        enabled: bool = True,
        selected: bool = False,
    ) -> None:
        self._init_scripted()
        self.name = name
        self._text = text
        self._tag = tag
        self.displayed = displayed
        self.enabled = enabled
        self.selected = selected
        self.stale = False
        self.children: dict[Locator, list["FakeElement"]] = {}
        self.typed: list[str] = []
        self.clicks = 0

    def _touch(self, member: str) -> None:
        self._record(member)
        if self.stale:
            raise StaleElementReferenceError(f"{self.name} is stale")

    def add_child(self, locator: Locator, child: "FakeElement") -> "FakeElement":
        self.children.setdefault(locator, []).append(child)
        return child

    def find_element(self, locator: Locator) -> Element:
        self._touch("find_element")
        found = self.children.get(locator)
        if not found:
            raise NoSuchElementError(f"Unable to locate element: {locator}")
        return found[0]

    def find_elements(self, locator: Locator) -> list[Element]:
        self._touch("find_elements")
        return list(self.children.get(locator, []))

    def click(self) -> None:
        self._touch("click")
        self.clicks += 1

    def submit(self) -> None:
        self._touch("submit")

    def send_keys(self, *keys: str) -> None:
        self._touch("send_keys")
        self.typed.extend(keys)

    def clear(self) -> None:
        self._touch("clear")
        self.typed.clear()

    @property
    def tag_name(self) -> str:
        self._touch("tag_name")
        return self._tag

    @property
    def text(self) -> str:
        self._touch("text")
        return self._text

    def get_attribute(self, name: str) -> Optional[str]:
        self._touch("get_attribute")
        return None

    def is_selected(self) -> bool:
        self._touch("is_selected")
        return self.selected

    def is_enabled(self) -> bool:
        self._touch("is_enabled")
        return self.enabled

    def is_displayed(self) -> bool:
        self._touch("is_displayed")
        return self.displayed

    def location(self) -> Point:
        self._touch("location")
        return Point(10, 20)

    def size(self) -> Dimension:
        self._touch("size")
        return Dimension(100, 30)

    def get_css_value(self, name: str) -> str:
        self._touch("get_css_value")
        return ""

    def coordinates(self) -> Coordinates:
        self._touch("coordinates")
        return FakeCoordinates(self)

    def __repr__(self) -> str:
        return f"FakeElement({self.name})"


class FakeCoordinates(Coordinates):
    def __init__(self, element: FakeElement) -> None:
        self.element = element

    def on_screen(self) -> Point:
        return Point(110, 120)

    def in_view_port(self) -> Point:
        return Point(10, 20)

    def on_page(self) -> Point:
        return Point(10, 20)

    def auxiliary(self) -> Any:
        return self.element


class FakeAlert(Alert):
    def __init__(self, session: "FakeSession") -> None:
        self._session = session

    def accept(self) -> None:
        self._session.alert_text = None
        self._session.alert_actions.append("accept")

    def dismiss(self) -> None:
        self._session.alert_text = None
        self._session.alert_actions.append("dismiss")

    @property
    def text(self) -> str:
        return self._session.alert_text or ""

    def send_keys(self, text: str) -> None:
        self._session.alert_actions.append(f"keys:{text}")


class FakeTargetLocator(TargetLocator):
    def __init__(self, session: "FakeSession") -> None:
        self._session = session

    def frame(self, reference: Any) -> Session:
        self._session._record("frame")
        if reference not in self._session.frames:
            raise NoSuchFrameError(f"Unable to locate frame: {reference!r}")
        self._session.current_frame = reference
        return self._session

    def parent_frame(self) -> Session:
        self._session.current_frame = None
        return self._session

    def window(self, name: str) -> Session:
        self._session.current_window = name
        return self._session

    def default_content(self) -> Session:
        self._session.current_frame = None
        return self._session

    def active_element(self) -> Element:
        return self._session.active

    def alert(self) -> Alert:
        self._session._record("alert")
        if self._session.alert_text is None:
            raise NoAlertPresentError("No alert is open")
        return FakeAlert(self._session)


class FakeNavigation(Navigation):
    def __init__(self, session: "FakeSession") -> None:
        self._session = session

    def to(self, url: str) -> None:
        self._session.get(url)

    def back(self) -> None:
        self._session.history.append("back")

    def forward(self) -> None:
        self._session.history.append("forward")

    def refresh(self) -> None:
        self._session.history.append("refresh")


class FakeTimeouts(Timeouts):
    def __init__(self) -> None:
        self.implicit_wait: Optional[float] = None
        self.script_timeout: Optional[float] = None
        self.page_load: Optional[float] = None

    def implicitly_wait(self, seconds: float) -> Timeouts:
        self.implicit_wait = seconds
        return self

    def set_script_timeout(self, seconds: float) -> Timeouts:
        self.script_timeout = seconds
        return self

    def page_load_timeout(self, seconds: float) -> Timeouts:
        self.page_load = seconds
        return self


class FakeWindow(Window):
    def __init__(self) -> None:
        self.size = Dimension(1280, 720)
        self.position = Point(0, 0)

    def get_size(self) -> Dimension:
        return self.size

    def set_size(self, size: Dimension) -> None:
        self.size = size

    def get_position(self) -> Point:
        return self.position

    def set_position(self, position: Point) -> None:
        self.position = position

    def maximize(self) -> None:
        self.size = Dimension(1920, 1080)

    def fullscreen(self) -> None:
        self.size = Dimension(1920, 1080)


class FakeOptions(Options):
    def __init__(self, session: "FakeSession") -> None:
        self._session = session

    def add_cookie(self, cookie: Cookie) -> None:
        self._session.cookies[cookie.name] = cookie

    def delete_cookie_named(self, name: str) -> None:
        self._session.cookies.pop(name, None)

    def delete_cookie(self, cookie: Cookie) -> None:
        self.delete_cookie_named(cookie.name)

    def delete_all_cookies(self) -> None:
        self._session.cookies.clear()

    def get_cookies(self) -> list[Cookie]:
        return list(self._session.cookies.values())

    def get_cookie_named(self, name: str) -> Optional[Cookie]:
        return self._session.cookies.get(name)

    def timeouts(self) -> Timeouts:
        return self._session.timeouts

    def window(self) -> Window:
        return self._session.window

    def get_log(self, log_type: str) -> list[LogEntry]:
        if log_type != "browser":
            return []
        entries, self._session.browser_logs = self._session.browser_logs, []
        return entries


class FakeKeyboard(Keyboard):
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def send_keys(self, *keys: str) -> None:
        self.events.append(("type", "".join(keys)))

    def press_key(self, key: str) -> None:
        self.events.append(("down", key))

    def release_key(self, key: str) -> None:
        self.events.append(("up", key))


class FakeMouse(Mouse):
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def click(self, where: Optional[Coordinates]) -> None:
        self.events.append(("click", where))

    def double_click(self, where: Optional[Coordinates]) -> None:
        self.events.append(("double_click", where))

    def context_click(self, where: Optional[Coordinates]) -> None:
        self.events.append(("context_click", where))

    def mouse_down(self, where: Optional[Coordinates]) -> None:
        self.events.append(("down", where))

    def mouse_up(self, where: Optional[Coordinates]) -> None:
        self.events.append(("up", where))

    def mouse_move(
        self,
        where: Optional[Coordinates],
        x_offset: Optional[int] = None,
        y_offset: Optional[int] = None,
    ) -> None:
        self.events.append(("move", where))


class BareSession(Session, Scripted):
    """Session implementing only the mandatory capability."""

    def __init__(self, capabilities: Any = None) -> None:
        self._init_scripted()
        self.capabilities = capabilities
        self.url = "about:blank"
        self.dom: dict[Locator, list[FakeElement]] = {}
        self.frames: set[Any] = set()
        self.current_frame: Any = None
        self.current_window = "main"
        self.alert_text: Optional[str] = None
        self.alert_actions: list[str] = []
        self.history: list[str] = []
        self.cookies: dict[str, Cookie] = {}
        self.browser_logs: list[LogEntry] = []
        self.timeouts = FakeTimeouts()
        self.window = FakeWindow()
        self.active = FakeElement("active")
        self.quit_count = 0

    @property
    def is_quit(self) -> bool:
        return self.quit_count > 0

    def add_element(self, locator: Locator, element: FakeElement) -> FakeElement:
        self.dom.setdefault(locator, []).append(element)
        return element

    def _blocked(self, member: str) -> None:
        self._record(member)
        if self.is_quit:
            raise SessionNotAvailableError("Session has been quit")
        if self.alert_text is not None:
            raise UnhandledAlertError("Unexpected alert is open", alert_text=self.alert_text)

    def find_element(self, locator: Locator) -> Element:
        self._blocked("find_element")
        found = self.dom.get(locator)
        if not found:
            raise NoSuchElementError(f"Unable to locate element: {locator}")
        return found[0]

    def find_elements(self, locator: Locator) -> list[Element]:
        self._blocked("find_elements")
        return list(self.dom.get(locator, []))

    def get(self, url: str) -> None:
        self._blocked("get")
        self.url = url

    @property
    def current_url(self) -> str:
        self._blocked("current_url")
        return self.url

    @property
    def title(self) -> str:
        self._blocked("title")
        return "Fake page"

    @property
    def page_source(self) -> str:
        self._blocked("page_source")
        return "<html></html>"

    @property
    def window_handles(self) -> list[str]:
        return ["main"]

    @property
    def current_window_handle(self) -> str:
        return self.current_window

    def close(self) -> None:
        self._record("close")

    def quit(self) -> None:
        self.calls.append("quit")
        self.quit_count += 1

    def switch_to(self) -> TargetLocator:
        return FakeTargetLocator(self)

    def navigate(self) -> Navigation:
        return FakeNavigation(self)

    def manage(self) -> Options:
        return FakeOptions(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}@{id(self):x}"


class FakeSession(BareSession, JavascriptExecutor, HasInputDevices):
    """Session with script execution and input devices."""

    def __init__(self, capabilities: Any = None) -> None:
        super().__init__(capabilities)
        self.scripts: list[tuple[str, tuple]] = []
        self.script_result: Any = None
        self._keyboard = FakeKeyboard()
        self._mouse = FakeMouse()

    def execute_script(self, script: str, *args: Any) -> Any:
        self._blocked("execute_script")
        self.scripts.append((script, args))
        return self.script_result

    def execute_async_script(self, script: str, *args: Any) -> Any:
        return self.execute_script(script, *args)

    def keyboard(self) -> Keyboard:
        return self._keyboard

    def mouse(self) -> Mouse:
        return self._mouse


class ScreenshotSession(FakeSession, TakesScreenshot):
    def screenshot(self) -> bytes:
        return b"png"
