"""Port describing the media server's session API."""

from __future__ import annotations

from typing import Protocol

from mediaroom_client.application.dto.session import ConnectionPatch, CreatedSession
from mediaroom_client.domain.options import SessionProperties, Token, TokenOptions
from mediaroom_client.domain.session import SessionSnapshot


class SessionGatewayPort(Protocol):
    """Remote authority for sessions, connections and streams.

    Implementations raise :mod:`mediaroom_client.errors` exceptions on failure.
    """

    async def create_session(self, properties: SessionProperties) -> CreatedSession:
        """Create a session; raise ``SessionConflictError`` if the custom id exists."""

    async def get_session(self, session_id: str) -> SessionSnapshot:
        """Return the full current state of ``session_id``."""

    async def list_sessions(self) -> tuple[SessionSnapshot, ...]:
        """Return the full current state of every live session."""

    async def delete_session(self, session_id: str) -> None:
        """Close ``session_id``, evicting every participant."""

    async def create_token(self, session_id: str, options: TokenOptions) -> Token:
        """Issue a token bound to ``session_id`` with ``options``."""

    async def delete_connection(self, session_id: str, connection_id: str) -> None:
        """Evict a participant or invalidate an unused token."""

    async def delete_stream(self, session_id: str, stream_id: str) -> None:
        """Force the owner of ``stream_id`` to unpublish it."""

    async def patch_connection(
        self,
        session_id: str,
        connection_id: str,
        options: TokenOptions,
    ) -> ConnectionPatch:
        """Apply new grant options to a connection or pending token."""


__all__ = ["SessionGatewayPort"]
