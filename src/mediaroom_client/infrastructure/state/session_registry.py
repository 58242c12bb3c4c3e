"""In-memory session registry implementation."""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock

from mediaroom_client.application.ports.session_registry import SessionRegistryPort
from mediaroom_client.domain.session import Session


class InMemorySessionRegistry(SessionRegistryPort):
    """Stores live sessions in memory, keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def add(self, session: Session) -> None:
        session_id = session.require_session_id()
        with self._lock:
            self._sessions[session_id] = session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
        return session

    def remove(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def values(self) -> Iterable[Session]:
        with self._lock:
            return tuple(self._sessions.values())


__all__ = ["InMemorySessionRegistry"]
