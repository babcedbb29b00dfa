from datetime import timedelta

import pytest

from fakes import FakeElement, FakeSession, FakeTargetLocator
from remote_browser_wrapper.errors import (
    ElementNotInteractableError,
    NoSuchElementError,
    StaleElementReferenceError,
    WaitTimeoutError,
)
from remote_browser_wrapper.models import Locator
from remote_browser_wrapper.wait.actions import (
    FunctionAction,
    check_is_enabled,
    perform_click,
    perform_find_element,
    perform_find_elements,
    perform_send_keys,
    perform_switch_to_alert,
    until_enabled,
    until_visible,
)
from remote_browser_wrapper.wait.clock import ManualClock
from remote_browser_wrapper.wait.repeater import RetryPolicy, try_to

BUTTON = Locator.id("submit")


def _policy(clock: ManualClock) -> RetryPolicy:
    return RetryPolicy(timeout=timedelta(seconds=1), interval=timedelta(milliseconds=100), clock=clock, sleeper=clock)


def test_find_element_ignores_only_missing_elements() -> None:
    action = perform_find_element(BUTTON)

    assert action.ignore_exception(NoSuchElementError("missing"))
    assert not action.ignore_exception(StaleElementReferenceError("stale"))
    assert not action.ignore_exception(ValueError("other"))
    assert str(action) == "find_element(By.id: submit)"


def test_find_elements_ignores_empty_results() -> None:
    action = perform_find_elements(BUTTON)

    assert action.ignore_result([])
    assert not action.ignore_result([object()])


def test_interactions_ignore_non_interactable_elements() -> None:
    for action in (perform_click(), perform_send_keys("a", "b"), check_is_enabled()):
        assert action.ignore_exception(ElementNotInteractableError("covered"))
        assert not action.ignore_exception(NoSuchElementError("missing"))
    assert str(perform_send_keys("a", "b")) == "send_keys('a', 'b')"


def test_click_is_retried_until_the_element_accepts_it() -> None:
    clock = ManualClock()
    element = FakeElement("button")
    element.fail("click", ElementNotInteractableError("covered"), ElementNotInteractableError("covered"))

    try_to(element, perform_click(), _policy(clock))

    assert element.clicks == 1
    assert element.calls == ["click", "click", "click"]
    assert clock.elapsed == timedelta(milliseconds=200)


def test_switch_to_alert_waits_for_the_dialog() -> None:
    session = FakeSession()
    locator = FakeTargetLocator(session)

    class OpeningClock(ManualClock):
        def sleep(self, duration: timedelta) -> None:
            super().sleep(duration)
            session.alert_text = "Are you sure?"

    opening = OpeningClock()
    alert = try_to(
        locator,
        perform_switch_to_alert(),
        RetryPolicy(timeout=timedelta(seconds=1), interval=timedelta(milliseconds=100), clock=opening, sleeper=opening),
    )

    assert alert.text == "Are you sure?"
    assert session.calls == ["alert", "alert"]


def test_until_visible_ignores_hidden_and_stale_elements() -> None:
    session = FakeSession()
    hidden = session.add_element(BUTTON, FakeElement("button", displayed=False))

    class RevealingClock(ManualClock):
        def sleep(self, duration: timedelta) -> None:
            super().sleep(duration)
            if len(self.sleeps) == 1:
                hidden.stale = True
            else:
                session.dom[BUTTON] = [FakeElement("button")]

    revealing = RevealingClock()
    found = try_to(
        session,
        until_visible(BUTTON),
        RetryPolicy(timeout=timedelta(seconds=1), interval=timedelta(milliseconds=100), clock=revealing, sleeper=revealing),
    )

    assert found.is_displayed()
    assert found is not hidden
    assert len(revealing.sleeps) == 2


def test_until_enabled_times_out_with_disabled_element() -> None:
    clock = ManualClock()
    session = FakeSession()
    session.add_element(BUTTON, FakeElement("button", enabled=False))

    with pytest.raises(WaitTimeoutError, match="enabled state of By.id: submit"):
        try_to(session, until_enabled(BUTTON), _policy(clock))

    assert clock.now() == timedelta(seconds=1)


def test_function_action_defaults_to_callable_name() -> None:
    def open_menu(context: object) -> str:
        return "menu"

    action = FunctionAction(open_menu)

    assert action.description == "open_menu"
    assert action.apply(None) == "menu"
    assert not action.ignore_result(None)
