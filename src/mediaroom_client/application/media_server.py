"""Client context owning the sessions known to be live on one media server."""

from __future__ import annotations

import logging

from mediaroom_client.application.ports.session_gateway import SessionGatewayPort
from mediaroom_client.application.ports.session_registry import SessionRegistryPort
from mediaroom_client.application.session_manager import SessionManager
from mediaroom_client.domain.options import SessionProperties
from mediaroom_client.domain.session import Session

logger = logging.getLogger("mediaroom_client.media_server")


class MediaServer:
    """Creates sessions and keeps the registry of live ones in sync."""

    def __init__(
        self,
        gateway: SessionGatewayPort,
        sessions: SessionRegistryPort,
    ) -> None:
        self._gateway = gateway
        self._sessions = sessions
        self._manager = SessionManager(gateway, sessions)

    @property
    def sessions(self) -> SessionManager:
        """Operations on individual sessions, sharing this context's registry."""
        return self._manager

    @property
    def active_sessions(self) -> tuple[Session, ...]:
        return tuple(self._sessions.values())

    async def create_session(self, properties: SessionProperties | None = None) -> Session:
        """Create (or adopt) a session and register it as live."""
        session = Session.from_properties(properties)
        await self._manager.create(session)
        self._sessions.add(session)
        return session

    async def fetch(self) -> bool:
        """Resynchronize every session with the media server.

        Sessions the server no longer reports are dropped, new ones are added.
        Returns ``True`` if anything changed.
        """
        snapshots = await self._gateway.list_sessions()
        reported_ids = {snapshot.session_id for snapshot in snapshots}
        changed = False

        for session in tuple(self._sessions.values()):
            if session.session_id not in reported_ids:
                self._sessions.remove(session.require_session_id())
                changed = True

        for snapshot in snapshots:
            session = self._sessions.get(snapshot.session_id)
            if session is None:
                self._sessions.add(Session.from_snapshot(snapshot))
                changed = True
            elif SessionManager.apply_snapshot(session, snapshot):
                changed = True

        logger.info(
            "media server sessions fetched",
            extra={"data": {"sessions": len(snapshots), "changed": changed}},
        )
        return changed


__all__ = ["MediaServer"]
