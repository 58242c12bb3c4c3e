"""Port describing the registry of live sessions owned by a client."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from mediaroom_client.domain.session import Session


class SessionRegistryPort(Protocol):
    """In-memory registry for sessions known to be open."""

    def add(self, session: Session) -> None:
        """Store a session that has an id."""

    def get(self, session_id: str) -> Session | None:
        """Return the session identified by ``session_id``."""

    def remove(self, session_id: str) -> Session | None:
        """Remove the session, if present, and return it."""

    def values(self) -> Iterable[Session]:
        """Return registered sessions in registration order."""


__all__ = ["SessionRegistryPort"]
