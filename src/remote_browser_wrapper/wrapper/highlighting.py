"""Wrapper that outlines elements as they are used, for watching runs live."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

from ..browser.base import Element, JavascriptExecutor
from ..errors import ConfigurationError
from ..wait.clock import Sleeper, SystemSleeper
from .base import AbstractWrapper, unwrap
from .session import SessionWrapper

LOGGER = logging.getLogger(__name__)

STYLE_ELEMENT_ID = "highlighting-wrapper-id"
ACTION_CLASS = "highlighting-wrapper-action"
FOUND_CLASS = "highlighting-wrapper-found"
DEFAULT_ACTION_STYLE = "border: 2px solid red"
DEFAULT_FOUND_STYLE = "border: 2px solid blue"
DEFAULT_PAUSE = timedelta(seconds=2)

_ADD_STYLE_SCRIPT = """
if (document.getElementById(arguments[0])) return;
var style = document.createElement('style');
style.id = arguments[0];
style.type = 'text/css';
style.appendChild(document.createTextNode(arguments[1]));
document.getElementsByTagName('head')[0].appendChild(style);
"""
_ADD_CLASS_SCRIPT = "arguments[0].className += ' ' + arguments[1]"
_REMOVE_CLASS_SCRIPT = "arguments[0].className = arguments[0].className.replace(' ' + arguments[1], '')"


class HighlightingWrapper(SessionWrapper):
    """Outlines the element being acted on (red) and elements just found (blue).

    Each highlight stays visible for ``pause`` before it is removed.
    """

    def __init__(
        self,
        original: Any,
        *,
        pause: timedelta = DEFAULT_PAUSE,
        action_style: str = DEFAULT_ACTION_STYLE,
        found_style: str = DEFAULT_FOUND_STYLE,
        sleeper: Optional[Sleeper] = None,
    ) -> None:
        if not isinstance(original, JavascriptExecutor):
            raise ConfigurationError("Highlighting requires a session that can execute JavaScript")
        super().__init__(original)
        self._pause = pause
        self._action_style = action_style
        self._found_style = found_style
        self._sleeper = sleeper or SystemSleeper()

    def before_call(self, target: AbstractWrapper, member: str, args: tuple, kwargs: dict) -> None:
        if isinstance(target.wrapped, Element):
            self.highlight(target.wrapped, ACTION_CLASS)

    def after_call(self, target: AbstractWrapper, member: str, result: Any, args: tuple, kwargs: dict) -> None:
        found = unwrap(result)
        if isinstance(found, Element):
            self.highlight(found, FOUND_CLASS)

    def highlight(self, element: Any, css_class: str) -> None:
        """Add ``css_class`` to ``element``, pause, then remove it."""

        LOGGER.debug("Highlighting %s with %s", element, css_class)
        session = self.wrapped
        session.execute_script(
            _ADD_STYLE_SCRIPT,
            STYLE_ELEMENT_ID,
            f".{ACTION_CLASS} {{{self._action_style}}} .{FOUND_CLASS} {{{self._found_style}}}",
        )
        try:
            session.execute_script(_ADD_CLASS_SCRIPT, element, css_class)
            self._sleeper.sleep(self._pause)
        finally:
            session.execute_script(_REMOVE_CLASS_SCRIPT, element, css_class)
