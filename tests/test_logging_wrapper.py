import logging

import pytest

from fakes import FakeElement, FakeSession
from remote_browser_wrapper.errors import NoSuchElementError
from remote_browser_wrapper.models import Locator, LogEntry
from remote_browser_wrapper.wrapper.logging_wrapper import LoggingWrapper, format_call

LOGGER_NAME = "remote_browser_wrapper.wrapper.logging_wrapper"
LOGIN = Locator.css("#login")


def _messages(caplog: pytest.LogCaptureFixture, name: str = LOGGER_NAME) -> list[str]:
    return [record.getMessage() for record in caplog.records if record.name == name]


def test_format_call_quotes_strings() -> None:
    assert format_call("send_keys", ("user", 3), {"delay": "fast"}) == 'send_keys("user", 3, delay="fast")'
    assert format_call("click", (), {}) == "click()"


def test_every_routed_call_is_traced(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    session = FakeSession()
    session.add_element(LOGIN, FakeElement("login"))

    decorated = LoggingWrapper(session).session
    decorated.get("https://example.com")
    decorated.find_element(LOGIN).send_keys("user")

    messages = _messages(caplog)
    assert messages[0] == "Init tracer for session FakeSession"
    assert messages[1:] == [
        f'-> get("https://example.com") on {session!r}',
        f'<- get("https://example.com") = None on {session!r}',
        f"-> find_element(By.css: #login) on {session!r}",
        f"<- find_element(By.css: #login) = FakeElement(login) on {session!r}",
        '-> send_keys("user") on FakeElement(login)',
        '<- send_keys("user") = None on FakeElement(login)',
    ]


def test_failures_are_traced_and_rethrown(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    session = FakeSession()
    decorated = LoggingWrapper(session).session

    with pytest.raises(NoSuchElementError):
        decorated.find_element(LOGIN)

    failure = [record for record in caplog.records if record.getMessage().startswith("><")]
    assert len(failure) == 1
    assert failure[0].getMessage() == f">< find_element(By.css: #login) on {session!r}"
    assert failure[0].exc_info is not None
    assert failure[0].exc_info[0] is NoSuchElementError


def test_browser_logs_are_dumped_after_each_call(caplog: pytest.LogCaptureFixture) -> None:
    browser_logger = f"{LOGGER_NAME}.browser"
    caplog.set_level(logging.DEBUG, logger=browser_logger)
    session = FakeSession()
    session.browser_logs.append(LogEntry(level="error", message="Uncaught TypeError"))

    wrapper = LoggingWrapper(session, dump_browser_logs=True)
    wrapper.session.get("https://example.com")
    wrapper.session.get("https://example.com/next")

    dumped = _messages(caplog, browser_logger)
    assert len(dumped) == 1
    assert dumped[0].endswith("error Uncaught TypeError")
    assert session.browser_logs == []


def test_browser_log_dump_can_be_toggled(caplog: pytest.LogCaptureFixture) -> None:
    browser_logger = f"{LOGGER_NAME}.browser"
    caplog.set_level(logging.DEBUG, logger=browser_logger)
    session = FakeSession()
    session.browser_logs.append(LogEntry(level="info", message="hello"))
    wrapper = LoggingWrapper(session)

    wrapper.session.get("https://example.com")
    assert _messages(caplog, browser_logger) == []

    wrapper.set_dump_browser_logs(True)
    wrapper.session.get("https://example.com")
    assert wrapper.dump_browser_logs
    assert len(_messages(caplog, browser_logger)) == 1
