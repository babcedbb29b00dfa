import threading
from typing import Any, Optional

import pytest

from fakes import FakeSession
from remote_browser_wrapper.errors import ConfigurationError, OwnershipError
from remote_browser_wrapper.lifecycle.manager import LifecycleMode, SessionManager
from remote_browser_wrapper.lifecycle.providers import (
    ImportPathSessionProvider,
    ProviderRegistry,
    RemoteSessionProvider,
    SessionProvider,
)
from remote_browser_wrapper.lifecycle.storage import ThreadLocalSingletonStorage
from remote_browser_wrapper.models import CapabilityDescriptor, SessionKey
from remote_browser_wrapper.wrapper.session import decorate

FAKE = {"browser_name": "fakes:FakeSession"}
FAKE_MOBILE = {"browser_name": "fakes:FakeSession", "options": {"viewport": {"width": 390, "height": 844}}}


class RecordingRemote(RemoteSessionProvider):
    def __init__(self) -> None:
        self.endpoints: list[str] = []

    def create(self, endpoint: str, capabilities: CapabilityDescriptor) -> Any:
        self.endpoints.append(endpoint)
        return FakeSession(capabilities)


def _manager(mode: LifecycleMode, **kwargs: Any) -> SessionManager:
    registry = kwargs.pop("registry", None) or ProviderRegistry([ImportPathSessionProvider()], RecordingRemote())
    return SessionManager(mode, registry=registry, **kwargs)


def _in_thread(fn) -> Any:
    result: dict[str, Any] = {}

    def run() -> None:
        try:
            result["value"] = fn()
        except Exception as exc:  # re-raised in the calling thread
            result["error"] = exc

    thread = threading.Thread(target=run)
    thread.start()
    thread.join(timeout=10)
    if "error" in result:
        raise result["error"]
    return result["value"]


@pytest.mark.parametrize("mode", list(LifecycleMode))
def test_same_capabilities_reuse_the_live_session(mode: LifecycleMode) -> None:
    manager = _manager(mode)

    first = manager.get_session(FAKE)
    second = manager.get_session(CapabilityDescriptor(browser_name="fakes:FakeSession"))

    assert first is second
    assert isinstance(first, FakeSession)
    assert first.capabilities == CapabilityDescriptor.model_validate(FAKE)


@pytest.mark.parametrize("mode", [LifecycleMode.SINGLETON, LifecycleMode.THREADLOCAL_SINGLETON])
def test_singletons_replace_the_session_when_capabilities_change(mode: LifecycleMode) -> None:
    manager = _manager(mode)
    desktop = manager.get_session(FAKE)

    mobile = manager.get_session(FAKE_MOBILE)

    assert mobile is not desktop
    assert desktop.quit_count == 1
    assert not mobile.is_quit


def test_unrestricted_keeps_one_session_per_key() -> None:
    manager = _manager(LifecycleMode.UNRESTRICTED)
    desktop = manager.get_session(FAKE)
    mobile = manager.get_session(FAKE_MOBILE)

    assert mobile is not desktop
    assert not desktop.is_quit
    assert manager.get_session(FAKE) is desktop

    manager.dismiss(desktop)
    assert desktop.quit_count == 1
    assert manager.get_session(FAKE_MOBILE) is mobile
    assert manager.get_session(FAKE) is not desktop


@pytest.mark.parametrize("mode", list(LifecycleMode))
def test_dead_session_is_replaced(mode: LifecycleMode) -> None:
    manager = _manager(mode)
    first = manager.get_session(FAKE)
    first.quit_count = 1

    second = manager.get_session(FAKE)

    assert second is not first
    assert first.quit_count == 2
    assert not second.is_quit


@pytest.mark.parametrize("mode", list(LifecycleMode))
def test_dismiss_quits_and_forgets_the_session(mode: LifecycleMode) -> None:
    manager = _manager(mode)
    session = manager.get_session(FAKE)

    manager.dismiss(session)

    assert session.quit_count == 1
    assert manager.is_empty()
    assert manager.get_session(FAKE) is not session


@pytest.mark.parametrize("mode", list(LifecycleMode))
def test_dismissing_foreign_or_already_dismissed_sessions_fails(mode: LifecycleMode) -> None:
    manager = _manager(mode)
    session = manager.get_session(FAKE)

    with pytest.raises(OwnershipError):
        manager.dismiss(FakeSession())

    manager.dismiss(session)
    with pytest.raises(OwnershipError):
        manager.dismiss(session)
    assert session.quit_count == 1


@pytest.mark.parametrize("mode", list(LifecycleMode))
def test_decorated_sessions_can_be_dismissed(mode: LifecycleMode) -> None:
    manager = _manager(mode)
    session = manager.get_session(FAKE)

    manager.dismiss(decorate(decorate(session)))

    assert session.quit_count == 1
    assert manager.is_empty()


def test_each_thread_gets_its_own_session() -> None:
    manager = _manager(LifecycleMode.THREADLOCAL_SINGLETON)
    mine = manager.get_session(FAKE)

    theirs = _in_thread(lambda: manager.get_session(FAKE))

    assert theirs is not mine
    assert manager.get_session(FAKE) is mine


def test_only_the_owning_thread_may_dismiss() -> None:
    manager = _manager(LifecycleMode.THREADLOCAL_SINGLETON)
    mine = manager.get_session(FAKE)

    with pytest.raises(OwnershipError):
        _in_thread(lambda: manager.dismiss(mine))

    assert not mine.is_quit
    manager.dismiss(mine)
    assert mine.is_quit


def test_dismiss_all_reaches_every_thread() -> None:
    storage = ThreadLocalSingletonStorage(ProviderRegistry([ImportPathSessionProvider()]))
    key = SessionKey(CapabilityDescriptor.model_validate(FAKE))
    mine = storage.get_session(key)
    theirs = _in_thread(lambda: storage.get_session(key))

    assert storage.owner_of(mine) == threading.get_ident()
    assert storage.owner_of(theirs) not in (None, threading.get_ident())

    storage.dismiss_all()

    assert mine.is_quit
    assert theirs.is_quit
    assert storage.is_empty()
    assert storage.owner_of(theirs) is None


class _DismissAllAfterLookup(ThreadLocalSingletonStorage):
    """Runs ``dismiss_all`` from another thread right after the next registry lookup."""

    interleave = False

    def _lookup(self, session: Any) -> Any:
        owned = super()._lookup(session)
        if self.interleave:
            self.interleave = False
            _in_thread(self.dismiss_all)
        return owned


def test_changing_capabilities_survives_a_concurrent_dismiss_all() -> None:
    storage = _DismissAllAfterLookup(ProviderRegistry([ImportPathSessionProvider()]))
    first = storage.get_session(SessionKey(CapabilityDescriptor.model_validate(FAKE)))
    storage.interleave = True

    second = storage.get_session(SessionKey(CapabilityDescriptor.model_validate(FAKE_MOBILE)))

    assert second is not first
    assert first.quit_count == 1
    assert not second.is_quit
    assert storage.owner_of(second) == threading.get_ident()


def test_session_dismissed_elsewhere_is_recreated_for_its_thread() -> None:
    manager = _manager(LifecycleMode.THREADLOCAL_SINGLETON)
    theirs_first: list[Any] = []
    ready = threading.Event()
    proceed = threading.Event()

    def worker() -> Any:
        theirs_first.append(manager.get_session(FAKE))
        ready.set()
        proceed.wait(timeout=10)
        return manager.get_session(FAKE)

    result: dict[str, Any] = {}
    thread = threading.Thread(target=lambda: result.setdefault("second", worker()))
    thread.start()
    ready.wait(timeout=10)
    manager.dismiss_all()
    proceed.set()
    thread.join(timeout=10)

    assert theirs_first[0].is_quit
    assert result["second"] is not theirs_first[0]
    assert not result["second"].is_quit


def test_dismiss_all_quits_everything_and_reports_the_first_failure() -> None:
    class ExplodingSession(FakeSession):
        def quit(self) -> None:
            super().quit()
            raise RuntimeError("browser crashed")

    class Provider(SessionProvider):
        def create(self, capabilities: CapabilityDescriptor) -> Optional[Any]:
            if capabilities.option("explode"):
                return ExplodingSession(capabilities)
            return FakeSession(capabilities)

    manager = _manager(LifecycleMode.UNRESTRICTED, registry=ProviderRegistry([Provider()]))
    exploding = manager.get_session({"options": {"explode": True}})
    healthy = manager.get_session({"options": {"explode": False}})

    with pytest.raises(RuntimeError, match="browser crashed"):
        manager.dismiss_all()

    assert exploding.is_quit
    assert healthy.is_quit
    assert manager.is_empty()


def test_mode_switch_requires_no_live_sessions() -> None:
    manager = _manager(LifecycleMode.SINGLETON)
    session = manager.get_session(FAKE)

    with pytest.raises(ConfigurationError, match="live sessions"):
        manager.set_mode(LifecycleMode.UNRESTRICTED)

    manager.dismiss(session)
    manager.set_mode("unrestricted")
    assert manager.mode is LifecycleMode.UNRESTRICTED


def test_default_endpoint_routes_sessions_to_the_remote_provider() -> None:
    remote = RecordingRemote()
    manager = _manager(
        LifecycleMode.SINGLETON,
        registry=ProviderRegistry([ImportPathSessionProvider()], remote),
        default_endpoint="ws://grid:3000/",
    )

    remote_session = manager.get_session(FAKE)
    local_session = manager.get_session(FAKE, endpoint=None)
    manager.set_default_endpoint("ws://other:3000/")
    other = manager.get_session(FAKE)

    assert remote.endpoints == ["ws://grid:3000/", "ws://other:3000/"]
    assert remote_session.quit_count == 1
    assert local_session.quit_count == 1
    assert not other.is_quit
    assert manager.default_endpoint == "ws://other:3000/"


def test_context_manager_dismisses_everything() -> None:
    with _manager(LifecycleMode.UNRESTRICTED) as manager:
        first = manager.get_session(FAKE)
        second = manager.get_session(FAKE_MOBILE)

    assert first.is_quit
    assert second.is_quit
    assert manager.is_empty()


def test_concurrent_first_requests_in_unrestricted_mode_are_not_serialized() -> None:
    created: list[Any] = []
    barrier = threading.Barrier(2, timeout=10)

    class SlowProvider(SessionProvider):
        def create(self, capabilities: CapabilityDescriptor) -> Optional[Any]:
            barrier.wait()
            session = FakeSession(capabilities)
            created.append(session)
            return session

    manager = _manager(LifecycleMode.UNRESTRICTED, registry=ProviderRegistry([SlowProvider()]))
    threads = [threading.Thread(target=manager.get_session, args=(FAKE,)) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(created) == 2
