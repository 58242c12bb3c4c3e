"""Value objects exchanged with the media server."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class MediaMode(str, Enum):
    """How media flows between participants."""

    ROUTED = "ROUTED"
    RELAYED = "RELAYED"


class RecordingMode(str, Enum):
    """Whether recording starts automatically."""

    ALWAYS = "ALWAYS"
    MANUAL = "MANUAL"


class OutputMode(str, Enum):
    """Recording output layout strategy."""

    COMPOSED = "COMPOSED"
    INDIVIDUAL = "INDIVIDUAL"


class RecordingLayout(str, Enum):
    """Layout used for composed recordings."""

    BEST_FIT = "BEST_FIT"
    PICTURE_IN_PICTURE = "PICTURE_IN_PICTURE"
    VERTICAL_PRESENTATION = "VERTICAL_PRESENTATION"
    HORIZONTAL_PRESENTATION = "HORIZONTAL_PRESENTATION"
    CUSTOM = "CUSTOM"


class ConnectionRole(str, Enum):
    """Capabilities granted to a participant."""

    SUBSCRIBER = "SUBSCRIBER"
    PUBLISHER = "PUBLISHER"
    MODERATOR = "MODERATOR"


@dataclass(frozen=True, slots=True)
class SessionProperties:
    """Properties a session is created with.

    ``None`` means "not chosen"; :meth:`with_defaults` fills the gaps.
    """

    media_mode: MediaMode | None = None
    recording_mode: RecordingMode | None = None
    default_output_mode: OutputMode | None = None
    default_recording_layout: RecordingLayout | None = None
    custom_session_id: str | None = None
    default_custom_layout: str | None = None

    def with_defaults(self) -> SessionProperties:
        """Return a copy where every unset mode carries its default."""
        return replace(
            self,
            media_mode=self.media_mode or MediaMode.ROUTED,
            recording_mode=self.recording_mode or RecordingMode.MANUAL,
            default_output_mode=self.default_output_mode or OutputMode.COMPOSED,
            default_recording_layout=self.default_recording_layout or RecordingLayout.BEST_FIT,
        )


@dataclass(frozen=True, slots=True)
class MediaOptions:
    """Bandwidth bounds and filters applied to a participant's media."""

    video_max_recv_bandwidth: int | None = None
    video_min_recv_bandwidth: int | None = None
    video_max_send_bandwidth: int | None = None
    video_min_send_bandwidth: int | None = None
    allowed_filters: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in (
            "video_max_recv_bandwidth",
            "video_min_recv_bandwidth",
            "video_max_send_bandwidth",
            "video_min_send_bandwidth",
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True, slots=True)
class TokenOptions:
    """Grant options for a token or an existing connection.

    Fields left as ``None`` are not sent and are not applied locally.
    """

    role: ConnectionRole | None = None
    record: bool | None = None
    data: str | None = None
    media_options: MediaOptions | None = None


@dataclass(frozen=True, slots=True)
class Token:
    """Credential that binds a future connection to a session."""

    token: str
    connection_id: str
    session_id: str
    created_at: int | None = None
    options: TokenOptions = field(default_factory=TokenOptions)

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("token must not be empty")
        if not self.connection_id:
            raise ValueError("connection_id must not be empty")


__all__ = [
    "ConnectionRole",
    "MediaMode",
    "MediaOptions",
    "OutputMode",
    "RecordingLayout",
    "RecordingMode",
    "SessionProperties",
    "Token",
    "TokenOptions",
]
