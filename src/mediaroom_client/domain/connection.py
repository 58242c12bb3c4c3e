"""Local mirror of one participant of a session."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from mediaroom_client.domain.options import ConnectionRole, MediaOptions, TokenOptions
from mediaroom_client.domain.streams import SubscriberRef, without_stream


class ConnectionStatus(str, Enum):
    """Whether the token behind a connection has been consumed yet."""

    PENDING = "pending"
    ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class Publisher:
    """A media stream a connection makes available to others."""

    stream_id: str
    created_at: int | None = None
    has_audio: bool | None = None
    has_video: bool | None = None
    audio_active: bool | None = None
    video_active: bool | None = None
    frame_rate: float | None = None
    type_of_video: str | None = None
    video_dimensions: str | None = None

    def __post_init__(self) -> None:
        if not self.stream_id:
            raise ValueError("stream_id must not be empty")


@dataclass(slots=True)
class Connection:
    """A participant's membership in a session, as last seen locally."""

    connection_id: str
    created_at: int | None = None
    status: ConnectionStatus | None = None
    active_at: int | None = None
    role: ConnectionRole | None = None
    record: bool | None = None
    server_data: str | None = None
    media_options: MediaOptions | None = None
    token: str | None = None
    location: str | None = None
    platform: str | None = None
    client_data: str | None = None
    publishers: list[Publisher] = field(default_factory=list)
    subscribers: list[SubscriberRef] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.connection_id:
            raise ValueError("connection_id must not be empty")

    @classmethod
    def from_token_options(cls, connection_id: str, options: TokenOptions) -> Connection:
        """Build a pending connection that only knows its grant options."""
        return cls(
            connection_id=connection_id,
            status=ConnectionStatus.PENDING,
            role=options.role,
            record=options.record,
            server_data=options.data,
            media_options=options.media_options,
        )

    def override_token_options(self, options: TokenOptions) -> None:
        """Apply every grant option that ``options`` sets."""
        if options.role is not None:
            self.role = options.role
        if options.record is not None:
            self.record = options.record
        if options.data is not None:
            self.server_data = options.data
        if options.media_options is not None:
            self.media_options = options.media_options

    def stream_ids(self) -> tuple[str, ...]:
        return tuple(publisher.stream_id for publisher in self.publishers)

    def drop_publisher(self, stream_id: str) -> None:
        self.publishers = [p for p in self.publishers if p.stream_id != stream_id]

    def drop_subscription(self, stream_id: str) -> None:
        if self.subscribers:
            self.subscribers = without_stream(self.subscribers, stream_id)

    def canonical_state(self) -> dict[str, Any]:
        return asdict(self)

    def equal_to(self, other: Connection) -> bool:
        return self.canonical_state() == other.canonical_state()


__all__ = ["Connection", "ConnectionStatus", "Publisher"]
