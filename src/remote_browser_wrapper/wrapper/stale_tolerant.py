"""Recovery from stale element references."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from ..errors import ErrorKind, error_kind
from ..models import Locator
from .base import AbstractWrapper, DecoratorSpec, is_wrapped, unwrap, wrapper_of
from .session import ElementWrapper, SessionWrapper

LOGGER = logging.getLogger(__name__)


class StaleTolerantElementWrapper(ElementWrapper):
    """Element wrapper that remembers how its element was found."""

    def __init__(self, root: SessionWrapper, original: Any) -> None:
        super().__init__(root, original)
        self.search_context: Optional[Any] = None
        self.locator: Optional[Locator] = None

    def rediscover(self) -> None:
        """Find the element again and swap it in."""

        if self.search_context is None or self.locator is None:
            raise LookupError("Element was not obtained through a lookup and cannot be rediscovered")
        fresh = self.search_context.find_element(self.locator)
        self.set_wrapped(unwrap(fresh))


class StaleTolerantWrapper(SessionWrapper):
    """Re-finds stale elements through their original locator and retries once.

    If the element cannot be found again the original stale-reference error
    is raised.
    """

    default_spec: ClassVar[DecoratorSpec] = SessionWrapper.default_spec.replace(
        element=StaleTolerantElementWrapper,
    )

    def after_call(self, target: AbstractWrapper, member: str, result: Any, args: tuple, kwargs: dict) -> None:
        if member != "find_element" or not is_wrapped(result):
            return
        element_wrapper = wrapper_of(result)
        if isinstance(element_wrapper, StaleTolerantElementWrapper):
            element_wrapper.search_context = target.proxy
            element_wrapper.locator = args[0] if args else kwargs.get("locator")

    def on_error(self, target: AbstractWrapper, member: str, exc: Exception, args: tuple, kwargs: dict) -> Any:
        if error_kind(exc) is not ErrorKind.STALE_REFERENCE or not isinstance(target, StaleTolerantElementWrapper):
            raise exc
        if target.search_context is None or target.locator is None:
            raise exc
        LOGGER.info("Element %s went stale during %s, looking it up again", target.locator, member)
        try:
            target.rediscover()
        except Exception as lookup_error:
            if error_kind(lookup_error) is ErrorKind.NOT_FOUND:
                raise exc from None
            raise
        return target.call(member, args, kwargs)
