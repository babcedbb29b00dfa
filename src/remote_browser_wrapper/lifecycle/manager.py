"""Session lifecycle manager."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from ..errors import ConfigurationError
from ..models import CapabilityDescriptor, SessionKey
from .providers import AlivenessChecker, ProviderRegistry
from .storage import SessionStorage, SingletonStorage, ThreadLocalSingletonStorage, UnrestrictedStorage

if TYPE_CHECKING:
    from ..config import LifecycleConfig

LOGGER = logging.getLogger(__name__)


class LifecycleMode(str, enum.Enum):
    """Storage policy used by a :class:`SessionManager`."""

    SINGLETON = "singleton"
    THREADLOCAL_SINGLETON = "threadlocal_singleton"
    UNRESTRICTED = "unrestricted"


_STORAGES: dict[LifecycleMode, type[SessionStorage]] = {
    LifecycleMode.SINGLETON: SingletonStorage,
    LifecycleMode.THREADLOCAL_SINGLETON: ThreadLocalSingletonStorage,
    LifecycleMode.UNRESTRICTED: UnrestrictedStorage,
}

_DEFAULT_ENDPOINT: Any = object()


class SessionManager:
    """Creates, reuses and tears down sessions keyed by capabilities and endpoint.

    The manager is an ordinary object owned by the caller; use it as a context
    manager (or call :meth:`close`) to tear down every session it created.
    """

    def __init__(
        self,
        mode: LifecycleMode = LifecycleMode.THREADLOCAL_SINGLETON,
        *,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
        default_endpoint: Optional[str] = None,
    ) -> None:
        self._registry = registry or ProviderRegistry()
        self._aliveness_checker = aliveness_checker
        self._default_endpoint = default_endpoint
        self._mode = LifecycleMode(mode)
        self._storage = self._build_storage(self._mode)

    @classmethod
    def from_config(
        cls,
        config: "LifecycleConfig",
        *,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
    ) -> "SessionManager":
        return cls(
            config.mode,
            registry=registry,
            aliveness_checker=aliveness_checker,
            default_endpoint=config.default_endpoint,
        )

    def _build_storage(self, mode: LifecycleMode) -> SessionStorage:
        return _STORAGES[mode](self._registry, self._aliveness_checker)

    @property
    def mode(self) -> LifecycleMode:
        return self._mode

    @property
    def default_endpoint(self) -> Optional[str]:
        return self._default_endpoint

    def set_mode(self, mode: Union[LifecycleMode, str]) -> None:
        """Switch storage policy; only allowed while no session is owned."""

        mode = LifecycleMode(mode)
        if not self._storage.is_empty():
            raise ConfigurationError("Mode switch is not allowed while there are live sessions")
        LOGGER.debug("Switching lifecycle mode from %s to %s", self._mode.value, mode.value)
        self._mode = mode
        self._storage = self._build_storage(mode)

    def set_default_endpoint(self, endpoint: Optional[str]) -> None:
        self._default_endpoint = endpoint

    def get_session(
        self,
        capabilities: Union[CapabilityDescriptor, Mapping[str, Any]],
        endpoint: Optional[str] = _DEFAULT_ENDPOINT,
    ) -> Any:
        """Return a session for ``capabilities`` on ``endpoint``.

        ``endpoint`` defaults to the manager's default endpoint; pass ``None``
        explicitly to force a local session.
        """

        if not isinstance(capabilities, CapabilityDescriptor):
            capabilities = CapabilityDescriptor.model_validate(capabilities)
        if endpoint is _DEFAULT_ENDPOINT:
            endpoint = self._default_endpoint
        return self._storage.get_session(SessionKey(capabilities, endpoint))

    def dismiss(self, session: Any) -> None:
        self._storage.dismiss(session)

    def dismiss_all(self) -> None:
        self._storage.dismiss_all()

    def is_empty(self) -> bool:
        return self._storage.is_empty()

    def close(self) -> None:
        self.dismiss_all()

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
