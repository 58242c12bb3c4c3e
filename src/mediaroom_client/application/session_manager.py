"""Remote session operations with their local cascades."""

from __future__ import annotations

import logging

from mediaroom_client.application.dto.session import PatchOutcome
from mediaroom_client.application.ports.session_gateway import SessionGatewayPort
from mediaroom_client.application.ports.session_registry import SessionRegistryPort
from mediaroom_client.domain.connection import Connection, Publisher
from mediaroom_client.domain.options import Token, TokenOptions
from mediaroom_client.domain.session import Session, SessionSnapshot
from mediaroom_client.errors import (
    MalformedResponseError,
    RequestSetupError,
    SessionConflictError,
)

logger = logging.getLogger("mediaroom_client.session")


def _require_session_id(session: Session) -> str:
    try:
        return session.require_session_id()
    except LookupError as exc:
        raise RequestSetupError(str(exc)) from exc


class SessionManager:
    """Coordinates gateway calls and the local cache updates they imply.

    Every operation awaits the gateway first and touches the session only once
    the remote call has succeeded, so a failure leaves the cache as it was.
    Callers must not run two mutating operations on the same session at once.
    """

    def __init__(
        self,
        gateway: SessionGatewayPort,
        sessions: SessionRegistryPort,
    ) -> None:
        self._gateway = gateway
        self._sessions = sessions

    async def create(self, session: Session) -> str:
        """Create ``session`` remotely, or adopt its custom id if it already exists."""
        if session.session_id is not None:
            return session.session_id
        properties = session.properties.with_defaults()
        try:
            created = await self._gateway.create_session(properties)
        except SessionConflictError as exc:
            custom_session_id = properties.custom_session_id or exc.custom_session_id
            if not custom_session_id:
                raise
            session.assign_identity(custom_session_id, session.created_at)
            logger.info(
                "session already existed; adopting custom id",
                extra={"data": {"session_id": custom_session_id}},
            )
            return custom_session_id
        session.assign_identity(created.session_id, created.created_at)
        logger.info(
            "session created",
            extra={"data": {"session_id": created.session_id, "created_at": created.created_at}},
        )
        return created.session_id

    async def create_token(self, session: Session, options: TokenOptions | None = None) -> Token:
        """Issue a token for ``session``. The cache is not touched."""
        session_id = _require_session_id(session)
        token = await self._gateway.create_token(session_id, options or TokenOptions())
        logger.debug(
            "token issued",
            extra={"data": {"session_id": session_id, "connection_id": token.connection_id}},
        )
        return token

    async def generate_token(self, session: Session, options: TokenOptions | None = None) -> str:
        """Issue a token and return only its string value."""
        token = await self.create_token(session, options)
        return token.token

    async def close(self, session: Session) -> None:
        """Close ``session`` remotely and drop it from the live-session registry."""
        session_id = _require_session_id(session)
        await self._gateway.delete_session(session_id)
        self._sessions.remove(session_id)
        logger.info("session closed", extra={"data": {"session_id": session_id}})

    async def fetch(self, session: Session) -> bool:
        """Resynchronize ``session`` with the media server.

        Returns ``True`` if any observable field changed.
        """
        session_id = _require_session_id(session)
        before = session.canonical_state()
        snapshot = await self._gateway.get_session(session_id)
        changed = self.apply_snapshot(session, snapshot, before=before)
        logger.info(
            "session fetched",
            extra={"data": {"session_id": session_id, "changed": changed}},
        )
        return changed

    @staticmethod
    def apply_snapshot(
        session: Session,
        snapshot: SessionSnapshot,
        *,
        before: dict[str, object] | None = None,
    ) -> bool:
        """Reset ``session`` from ``snapshot`` and report whether it changed."""
        previous = session.canonical_state() if before is None else before
        session.reset_with_snapshot(snapshot)
        return previous != session.canonical_state()

    async def force_disconnect(self, session: Session, connection: str | Connection) -> None:
        """Evict a participant (or invalidate an unused token) and cascade locally."""
        session_id = _require_session_id(session)
        connection_id = connection if isinstance(connection, str) else connection.connection_id
        await self._gateway.delete_connection(session_id, connection_id)
        removed = session.remove_connection(connection_id)
        logger.info(
            "connection closed",
            extra={
                "data": {
                    "session_id": session_id,
                    "connection_id": connection_id,
                    "cached": removed is not None,
                    "streams": removed.stream_ids() if removed is not None else (),
                }
            },
        )

    async def force_unpublish(self, session: Session, publisher: str | Publisher) -> None:
        """Force a stream to be unpublished and cascade locally."""
        session_id = _require_session_id(session)
        stream_id = publisher if isinstance(publisher, str) else publisher.stream_id
        await self._gateway.delete_stream(session_id, stream_id)
        session.unpublish(stream_id)
        logger.info(
            "stream unpublished",
            extra={"data": {"session_id": session_id, "stream_id": stream_id}},
        )

    async def update_connection(
        self,
        session: Session,
        connection_id: str,
        options: TokenOptions,
    ) -> Connection:
        """Apply new grant options to a connection or a still-unused token."""
        session_id = _require_session_id(session)
        patch = await self._gateway.patch_connection(session_id, connection_id, options)
        match patch.outcome:
            case PatchOutcome.APPLIED:
                message = "connection updated"
            case PatchOutcome.UNCHANGED:
                message = "connection options unchanged"
        logger.info(
            message,
            extra={"data": {"session_id": session_id, "connection_id": connection_id}},
        )
        try:
            return session.apply_connection_update(connection_id, options, patch.connection)
        except ValueError as exc:
            raise MalformedResponseError(f"cannot adopt reported connection: {exc}") from exc


__all__ = ["SessionManager"]
