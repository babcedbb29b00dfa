"""Storage policies deciding when sessions are created, reused and torn down."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import OwnershipError
from ..models import SessionKey
from ..wrapper.base import unwrap
from .providers import AlivenessChecker, CurrentUrlAlivenessChecker, ProviderRegistry

LOGGER = logging.getLogger(__name__)


class SessionStorage(ABC):
    """Common interface of the storage policies.

    ``dismiss`` accepts decorated sessions as well as raw ones.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
    ) -> None:
        self._registry = registry or ProviderRegistry()
        self._aliveness_checker = aliveness_checker or CurrentUrlAlivenessChecker()

    @abstractmethod
    def get_session(self, key: SessionKey) -> Any:
        """Return a live session for ``key``, creating one when needed."""

    @abstractmethod
    def dismiss(self, session: Any) -> None:
        """Tear down ``session``; raise :class:`OwnershipError` when it is not owned here."""

    @abstractmethod
    def dismiss_all(self) -> None:
        """Tear down every session owned by this storage."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return whether no session is currently owned."""

    def _create(self, key: SessionKey) -> Any:
        return self._registry.create(key.capabilities, key.endpoint)

    def _is_alive(self, session: Any) -> bool:
        return self._aliveness_checker.is_alive(session)

    @staticmethod
    def _quit(session: Any) -> None:
        LOGGER.info("Quitting session %r", session)
        session.quit()

    @staticmethod
    def _discard(session: Any) -> None:
        """Quit a session that failed the liveness probe."""

        try:
            session.quit()
        except Exception:  # pragma: no cover - session is already dead
            LOGGER.debug("Quitting dead session %r failed", session, exc_info=True)

    @classmethod
    def _quit_all(cls, sessions: list[Any]) -> None:
        """Quit every session, then re-raise the first failure."""

        first_error: Optional[Exception] = None
        for session in sessions:
            try:
                cls._quit(session)
            except Exception as exc:
                LOGGER.exception("Failed to quit session %r", session)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error


class SingletonStorage(SessionStorage):
    """At most one live session at a time."""

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
    ) -> None:
        super().__init__(registry, aliveness_checker)
        self._session: Optional[Any] = None
        self._key: Optional[SessionKey] = None

    def get_session(self, key: SessionKey) -> Any:
        if self._session is None:
            self._store(key)
        elif self._key != key:
            LOGGER.info("A different session flavour is required, replacing %r", self._session)
            self.dismiss(self._session)
            self._store(key)
        elif not self._is_alive(self._session):
            self._discard(self._session)
            self._store(key)
        return self._session

    def _store(self, key: SessionKey) -> None:
        self._session = self._create(key)
        self._key = key

    def dismiss(self, session: Any) -> None:
        if self._session is None or unwrap(session) is not self._session:
            raise OwnershipError(f"The session is not owned by the manager: {session!r}")
        owned, self._session, self._key = self._session, None, None
        self._quit(owned)

    def dismiss_all(self) -> None:
        if self._session is not None:
            self.dismiss(self._session)

    def is_empty(self) -> bool:
        return self._session is None


@dataclass
class _Owned:
    session: Any
    key: SessionKey
    thread_id: int


class ThreadLocalSingletonStorage(SessionStorage):
    """One session per thread.

    Only the owning thread may dismiss its session, while ``dismiss_all``
    works from any thread. The registry of owned sessions is shared and
    guarded by a lock.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
    ) -> None:
        super().__init__(registry, aliveness_checker)
        self._local = threading.local()
        self._owned: dict[int, _Owned] = {}
        self._lock = threading.Lock()

    def _current(self) -> Optional[Any]:
        return getattr(self._local, "session", None)

    def _lookup(self, session: Any) -> Optional[_Owned]:
        with self._lock:
            owned = self._owned.get(id(session))
        if owned is None or owned.session is not session:
            return None
        return owned

    def get_session(self, key: SessionKey) -> Any:
        current = self._current()
        owned = self._lookup(current) if current is not None else None
        if owned is None:
            # Either this thread never had a session or it was dismissed elsewhere.
            self._store(key)
        elif owned.key != key:
            LOGGER.info("A different session flavour is required, replacing %r", current)
            with self._lock:
                still_owned = self._owned.pop(id(current), None)
            self._local.session = None
            # dismiss_all may have quit it since the lookup.
            if still_owned is not None:
                self._quit(current)
            self._store(key)
        elif not self._is_alive(current):
            with self._lock:
                self._owned.pop(id(current), None)
            self._discard(current)
            self._store(key)
        return self._current()

    def _store(self, key: SessionKey) -> None:
        session = self._create(key)
        with self._lock:
            self._owned[id(session)] = _Owned(session, key, threading.get_ident())
        self._local.session = session

    def dismiss(self, session: Any) -> None:
        raw = unwrap(session)
        owned = self._lookup(raw)
        if owned is None:
            raise OwnershipError(f"The session is not owned by the manager: {session!r}")
        if raw is not self._current():
            raise OwnershipError(f"The session does not belong to the current thread: {session!r}")
        with self._lock:
            self._owned.pop(id(raw), None)
        self._local.session = None
        self._quit(raw)

    def dismiss_all(self) -> None:
        with self._lock:
            sessions = [owned.session for owned in self._owned.values()]
            self._owned.clear()
        self._local.session = None
        self._quit_all(sessions)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._owned

    def owner_of(self, session: Any) -> Optional[int]:
        """Return the ident of the thread owning ``session``."""

        owned = self._lookup(unwrap(session))
        return owned.thread_id if owned is not None else None


class UnrestrictedStorage(SessionStorage):
    """Pool with one session per key, reused while it stays alive."""

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        aliveness_checker: Optional[AlivenessChecker] = None,
    ) -> None:
        super().__init__(registry, aliveness_checker)
        self._pool: dict[SessionKey, Any] = {}

    def get_session(self, key: SessionKey) -> Any:
        session = self._pool.get(key)
        if session is not None and self._is_alive(session):
            return session
        if session is not None:
            del self._pool[key]
            self._discard(session)
        session = self._create(key)
        self._pool[key] = session
        return session

    def dismiss(self, session: Any) -> None:
        raw = unwrap(session)
        for key, pooled in list(self._pool.items()):
            if pooled is raw:
                del self._pool[key]
                self._quit(raw)
                return
        raise OwnershipError(f"The session is not owned by the manager: {session!r}")

    def dismiss_all(self) -> None:
        sessions = list(self._pool.values())
        self._pool.clear()
        self._quit_all(sessions)

    def is_empty(self) -> bool:
        return not self._pool
