"""Session providers: turn capability descriptors into live sessions."""

from __future__ import annotations

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Protocol
from urllib.parse import urlparse

from ..browser.playwright_session import BROWSER_TYPES, DEFAULT_ACTION_TIMEOUT_MS, PlaywrightSession
from ..errors import ConfigurationError
from ..models import CapabilityDescriptor

LOGGER = logging.getLogger(__name__)

REMOTE_SCHEMES = ("ws", "wss", "http", "https")


class SessionProvider(ABC):
    """Creates local sessions for the capabilities it recognises."""

    @abstractmethod
    def create(self, capabilities: CapabilityDescriptor) -> Optional[Any]:
        """Return a new session, or ``None`` when ``capabilities`` are not handled here."""


class RemoteSessionProvider(ABC):
    """Creates sessions on a remote endpoint."""

    @abstractmethod
    def create(self, endpoint: str, capabilities: CapabilityDescriptor) -> Any:
        """Return a new session on ``endpoint``."""


class AlivenessChecker(Protocol):
    def is_alive(self, session: Any) -> bool:
        """Return whether ``session`` can still be used."""


class CurrentUrlAlivenessChecker:
    """Considers a session alive when its current URL can be read."""

    def is_alive(self, session: Any) -> bool:
        try:
            session.current_url
        except Exception as exc:
            LOGGER.info("Session %r failed the liveness probe: %s", session, exc)
            return False
        return True


def _viewport(capabilities: CapabilityDescriptor) -> Optional[dict[str, int]]:
    viewport = capabilities.option("viewport")
    if viewport:
        return {"width": int(viewport["width"]), "height": int(viewport["height"])}
    return None


class PlaywrightSessionProvider(SessionProvider):
    """Launches local browsers through Playwright.

    Recognised options: ``headless`` (default True), ``viewport``
    (``{"width": ..., "height": ...}``), ``args`` and ``action_timeout_ms``.
    """

    def create(self, capabilities: CapabilityDescriptor) -> Optional[Any]:
        if capabilities.browser_name not in BROWSER_TYPES:
            return None
        return PlaywrightSession.launch(
            capabilities.browser_name,
            headless=bool(capabilities.option("headless", True)),
            viewport=_viewport(capabilities),
            args=list(capabilities.option("args", [])),
            action_timeout_ms=int(capabilities.option("action_timeout_ms", DEFAULT_ACTION_TIMEOUT_MS)),
        )


class ImportPathSessionProvider(SessionProvider):
    """Instantiates ``module:Class`` browser names with the capabilities.

    Useful for plugging custom backends, or fakes in tests, into a manager.
    """

    def create(self, capabilities: CapabilityDescriptor) -> Optional[Any]:
        module_name, sep, class_name = capabilities.browser_name.partition(":")
        if not sep:
            return None
        try:
            module = importlib.import_module(module_name)
            session_cls = getattr(module, class_name)
        except (ImportError, AttributeError) as exc:
            raise ConfigurationError(f"Unable to load session class {capabilities.browser_name}") from exc
        return session_cls(capabilities)


def validate_endpoint(endpoint: str) -> str:
    """Return ``endpoint`` or raise :class:`ConfigurationError` when it is not a usable URL."""

    parsed = urlparse(endpoint)
    if parsed.scheme not in REMOTE_SCHEMES or not parsed.netloc:
        raise ConfigurationError(f"Malformed remote endpoint: {endpoint!r}")
    return endpoint


class PlaywrightRemoteSessionProvider(RemoteSessionProvider):
    """Connects to a Playwright server or a CDP endpoint."""

    def create(self, endpoint: str, capabilities: CapabilityDescriptor) -> Any:
        validate_endpoint(endpoint)
        if capabilities.browser_name not in BROWSER_TYPES:
            raise ConfigurationError(f"Unsupported remote browser: {capabilities.browser_name}")
        return PlaywrightSession.connect(
            endpoint,
            capabilities.browser_name,
            viewport=_viewport(capabilities),
            action_timeout_ms=int(capabilities.option("action_timeout_ms", DEFAULT_ACTION_TIMEOUT_MS)),
        )


class ProviderRegistry:
    """Ordered local providers plus the remote provider."""

    def __init__(
        self,
        providers: Optional[Iterable[SessionProvider]] = None,
        remote: Optional[RemoteSessionProvider] = None,
    ) -> None:
        self._providers: list[SessionProvider] = (
            list(providers)
            if providers is not None
            else [ImportPathSessionProvider(), PlaywrightSessionProvider()]
        )
        self._remote = remote or PlaywrightRemoteSessionProvider()

    def register(self, provider: SessionProvider) -> None:
        """Give ``provider`` priority over the ones already registered."""

        self._providers.insert(0, provider)

    def create(self, capabilities: CapabilityDescriptor, endpoint: Optional[str] = None) -> Any:
        if endpoint is not None:
            LOGGER.info("Creating remote %s session on %s", capabilities.browser_name, endpoint)
            return self._remote.create(endpoint, capabilities)
        for provider in self._providers:
            session = provider.create(capabilities)
            if session is not None:
                LOGGER.info("Created %s session with %s", capabilities.browser_name, type(provider).__name__)
                return session
        raise ConfigurationError(f"Unrecognized browser type: {capabilities.browser_name}")
