"""Local cache of a session whose authoritative state lives on the media server."""

from __future__ import annotations

import copy
import logging
from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from typing import Any

from mediaroom_client.domain.connection import Connection
from mediaroom_client.domain.options import SessionProperties, TokenOptions

logger = logging.getLogger("mediaroom_client.session")


def _creation_order(connection: Connection) -> int:
    return connection.created_at if connection.created_at is not None else -1


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Full state of a session as reported by the media server."""

    session_id: str
    created_at: int | None
    recording: bool
    properties: SessionProperties
    connections: tuple[Connection, ...] = ()

    def __post_init__(self) -> None:
        if not self.session_id:
            raise ValueError("session_id must not be empty")
        connection_ids = Counter(connection.connection_id for connection in self.connections)
        duplicated = sorted(cid for cid, count in connection_ids.items() if count > 1)
        if duplicated:
            raise ValueError(f"duplicate connection ids in snapshot: {duplicated}")
        stream_ids = Counter(
            stream_id for connection in self.connections for stream_id in connection.stream_ids()
        )
        duplicated = sorted(sid for sid, count in stream_ids.items() if count > 1)
        if duplicated:
            raise ValueError(f"duplicate stream ids in snapshot: {duplicated}")


@dataclass(slots=True)
class Session:
    """Aggregate root mirroring one session.

    ``active_connections`` reflects the last resynchronization, adjusted only by
    the cascades of :meth:`remove_connection`, :meth:`unpublish` and
    :meth:`apply_connection_update`. It is never authoritative.
    """

    properties: SessionProperties = field(default_factory=SessionProperties)
    session_id: str | None = None
    created_at: int | None = None
    recording: bool = False
    active_connections: list[Connection] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.properties = self.properties.with_defaults()

    @classmethod
    def from_properties(cls, properties: SessionProperties | None = None) -> Session:
        return cls(properties=properties or SessionProperties())

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> Session:
        session = cls()
        session.reset_with_snapshot(snapshot)
        return session

    # Identity ---------------------------------------------------------------------------------

    def assign_identity(self, session_id: str, created_at: int | None) -> None:
        """Bind the cache to ``session_id``; the id never changes afterwards."""
        if not session_id:
            raise ValueError("session_id must not be empty")
        if self.session_id is not None and self.session_id != session_id:
            raise ValueError(
                f"session already bound to {self.session_id!r}, cannot rebind to {session_id!r}"
            )
        self.session_id = session_id
        self.created_at = created_at

    def require_session_id(self) -> str:
        if self.session_id is None:
            raise LookupError("session has not been created on the media server yet")
        return self.session_id

    # Queries ----------------------------------------------------------------------------------

    def connection(self, connection_id: str) -> Connection | None:
        for candidate in self.active_connections:
            if candidate.connection_id == connection_id:
                return candidate
        return None

    def stream_ids(self) -> tuple[str, ...]:
        return tuple(
            stream_id
            for connection in self.active_connections
            for stream_id in connection.stream_ids()
        )

    # Cascading mutations ----------------------------------------------------------------------

    def remove_connection(self, connection_id: str) -> Connection | None:
        """Drop a connection and every subscription to the streams it published."""
        removed: Connection | None = None
        remaining: list[Connection] = []
        for candidate in self.active_connections:
            if removed is None and candidate.connection_id == connection_id:
                removed = candidate
            else:
                remaining.append(candidate)
        self.active_connections = remaining

        if removed is None:
            logger.warning(
                "closed connection was not cached locally; active connections unchanged",
                extra={"data": {"session_id": self.session_id, "connection_id": connection_id}},
            )
            return None

        for stream_id in removed.stream_ids():
            for connection in self.active_connections:
                connection.drop_subscription(stream_id)
        return removed

    def unpublish(self, stream_id: str) -> None:
        """Drop a stream from every publisher and subscriber list."""
        for connection in self.active_connections:
            connection.drop_publisher(stream_id)
            connection.drop_subscription(stream_id)

    def apply_connection_update(
        self,
        connection_id: str,
        options: TokenOptions,
        reported: Connection | None = None,
    ) -> Connection:
        """Overwrite a cached connection's grant options, or adopt an unseen one.

        An adopted connection is appended without re-sorting, so the ordering by
        ``created_at`` may not hold until the next resynchronization.
        """
        existing = self.connection(connection_id)
        if existing is not None:
            existing.override_token_options(options)
            return existing
        adopted = reported if reported is not None else Connection.from_token_options(
            connection_id, options
        )
        if adopted.connection_id != connection_id:
            raise ValueError(
                f"reported connection {adopted.connection_id!r} does not match {connection_id!r}"
            )
        clashing = sorted(set(adopted.stream_ids()) & set(self.stream_ids()))
        if clashing:
            raise ValueError(f"reported connection reuses cached stream ids: {clashing}")
        self.active_connections.append(adopted)
        return adopted

    # Resynchronization ------------------------------------------------------------------------

    def reset_with_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Replace all cached state with ``snapshot``.

        ``custom_session_id`` keeps the cached value when one is set;
        ``default_custom_layout`` prefers the snapshot's value. Modes the
        snapshot leaves unset take their defaults, as at construction.
        """
        if self.session_id is not None and self.session_id != snapshot.session_id:
            raise ValueError(
                f"snapshot for {snapshot.session_id!r} cannot reset session {self.session_id!r}"
            )
        previous = self.properties
        self.session_id = snapshot.session_id
        self.created_at = snapshot.created_at
        self.recording = snapshot.recording
        self.properties = replace(
            snapshot.properties,
            custom_session_id=previous.custom_session_id or snapshot.properties.custom_session_id,
            default_custom_layout=(
                snapshot.properties.default_custom_layout or previous.default_custom_layout
            ),
        ).with_defaults()
        connections = [copy.deepcopy(connection) for connection in snapshot.connections]
        # sorted() is stable; connections without a timestamp go first
        self.active_connections = sorted(connections, key=_creation_order)

    def canonical_state(self) -> dict[str, Any]:
        """Return a plain, order-preserving representation of the observable state."""
        return asdict(self)

    def equal_to(self, other: Session) -> bool:
        return self.canonical_state() == other.canonical_state()


__all__ = ["Session", "SessionSnapshot"]
