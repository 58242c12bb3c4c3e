"""JSON encoding and decoding for the media server REST API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from mediaroom_client.application.dto.session import CreatedSession
from mediaroom_client.domain.connection import Connection, ConnectionStatus, Publisher
from mediaroom_client.domain.options import (
    ConnectionRole,
    MediaMode,
    MediaOptions,
    OutputMode,
    RecordingLayout,
    RecordingMode,
    SessionProperties,
    Token,
    TokenOptions,
)
from mediaroom_client.domain.session import SessionSnapshot
from mediaroom_client.domain.streams import StructuredSubscriber, SubscriberRef, subscriber_ref


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class _MediaOptionsPayload(_Payload):
    video_max_recv_bandwidth: int | None = None
    video_min_recv_bandwidth: int | None = None
    video_max_send_bandwidth: int | None = None
    video_min_send_bandwidth: int | None = None
    allowed_filters: tuple[str, ...] = ()


class _PublisherMediaPayload(_Payload):
    has_audio: bool | None = None
    has_video: bool | None = None
    audio_active: bool | None = None
    video_active: bool | None = None
    frame_rate: float | None = None
    type_of_video: str | None = None
    video_dimensions: str | None = None


class _PublisherPayload(_Payload):
    stream_id: str
    created_at: int | None = None
    media_options: _PublisherMediaPayload | None = None


class _SubscriberPayload(_Payload):
    model_config = ConfigDict(extra="allow")

    stream_id: str = Field(min_length=1)
    created_at: int | None = None


class _ConnectionPayload(_Payload):
    connection_id: str = Field(validation_alias=AliasChoices("connectionId", "id", "connection_id"))
    created_at: int | None = None
    status: ConnectionStatus | None = None
    active_at: int | None = None
    role: ConnectionRole | None = None
    record: bool | None = None
    server_data: str | None = Field(
        default=None,
        validation_alias=AliasChoices("serverData", "data", "server_data"),
    )
    media_options: _MediaOptionsPayload | None = Field(
        default=None,
        validation_alias=AliasChoices("kurentoOptions", "mediaOptions", "media_options"),
    )
    token: str | None = None
    location: str | None = None
    platform: str | None = None
    client_data: str | None = None
    publishers: list[_PublisherPayload] = Field(default_factory=list)
    subscribers: list[str | _SubscriberPayload] = Field(default_factory=list)


class _ConnectionPage(_Payload):
    number_of_elements: int | None = None
    content: list[_ConnectionPayload] = Field(default_factory=list)


class _SessionPayload(_Payload):
    session_id: str = Field(validation_alias=AliasChoices("sessionId", "id", "session_id"))
    created_at: int | None = None
    recording: bool = False
    media_mode: MediaMode | None = None
    recording_mode: RecordingMode | None = None
    default_output_mode: OutputMode | None = None
    default_recording_layout: RecordingLayout | None = None
    custom_session_id: str | None = None
    default_custom_layout: str | None = None
    connections: _ConnectionPage | list[_ConnectionPayload] = Field(default_factory=list)


class _SessionPage(_Payload):
    number_of_elements: int | None = None
    content: list[_SessionPayload] = Field(default_factory=list)


class _CreatedSessionPayload(_Payload):
    session_id: str = Field(validation_alias=AliasChoices("id", "sessionId", "session_id"))
    created_at: int | None = None


class _TokenPayload(_Payload):
    token: str = Field(validation_alias=AliasChoices("token", "id"))
    connection_id: str
    session_id: str = Field(validation_alias=AliasChoices("session", "sessionId", "session_id"))
    created_at: int | None = None
    role: ConnectionRole | None = None
    record: bool | None = None
    data: str | None = None
    media_options: _MediaOptionsPayload | None = Field(
        default=None,
        validation_alias=AliasChoices("kurentoOptions", "mediaOptions", "media_options"),
    )


_SESSION_LIST_ADAPTER = TypeAdapter(_SessionPage | list[_SessionPayload])


# Decoding -------------------------------------------------------------------------------------


def _media_options(payload: _MediaOptionsPayload | None) -> MediaOptions | None:
    if payload is None:
        return None
    return MediaOptions(
        video_max_recv_bandwidth=payload.video_max_recv_bandwidth,
        video_min_recv_bandwidth=payload.video_min_recv_bandwidth,
        video_max_send_bandwidth=payload.video_max_send_bandwidth,
        video_min_send_bandwidth=payload.video_min_send_bandwidth,
        allowed_filters=payload.allowed_filters,
    )


def _publisher(payload: _PublisherPayload) -> Publisher:
    media = payload.media_options or _PublisherMediaPayload()
    return Publisher(
        stream_id=payload.stream_id,
        created_at=payload.created_at,
        has_audio=media.has_audio,
        has_video=media.has_video,
        audio_active=media.audio_active,
        video_active=media.video_active,
        frame_rate=media.frame_rate,
        type_of_video=media.type_of_video,
        video_dimensions=media.video_dimensions,
    )


def _subscriber(payload: str | _SubscriberPayload) -> SubscriberRef:
    if isinstance(payload, str):
        return subscriber_ref(payload)
    return StructuredSubscriber(
        stream_id=payload.stream_id,
        created_at=payload.created_at,
        extra=dict(payload.model_extra or {}),
    )


def _connection(payload: _ConnectionPayload) -> Connection:
    return Connection(
        connection_id=payload.connection_id,
        created_at=payload.created_at,
        status=payload.status,
        active_at=payload.active_at,
        role=payload.role,
        record=payload.record,
        server_data=payload.server_data,
        media_options=_media_options(payload.media_options),
        token=payload.token,
        location=payload.location,
        platform=payload.platform,
        client_data=payload.client_data,
        publishers=[_publisher(item) for item in payload.publishers],
        subscribers=[_subscriber(item) for item in payload.subscribers],
    )


def _session(payload: _SessionPayload) -> SessionSnapshot:
    connections = payload.connections
    items = connections.content if isinstance(connections, _ConnectionPage) else connections
    return SessionSnapshot(
        session_id=payload.session_id,
        created_at=payload.created_at,
        recording=payload.recording,
        properties=SessionProperties(
            media_mode=payload.media_mode,
            recording_mode=payload.recording_mode,
            default_output_mode=payload.default_output_mode,
            default_recording_layout=payload.default_recording_layout,
            custom_session_id=payload.custom_session_id or None,
            default_custom_layout=payload.default_custom_layout or None,
        ),
        connections=tuple(_connection(item) for item in items),
    )


def parse_session(payload: Mapping[str, object]) -> SessionSnapshot:
    """Normalize a raw session payload into a :class:`SessionSnapshot`."""
    return _session(_SessionPayload.model_validate(payload))


def parse_session_list(payload: object) -> tuple[SessionSnapshot, ...]:
    """Normalize a page (or bare list) of session payloads."""
    parsed = _SESSION_LIST_ADAPTER.validate_python(payload)
    items = parsed.content if isinstance(parsed, _SessionPage) else parsed
    return tuple(_session(item) for item in items)


def parse_connection(payload: Mapping[str, object]) -> Connection:
    return _connection(_ConnectionPayload.model_validate(payload))


def parse_created_session(payload: Mapping[str, object]) -> CreatedSession:
    parsed = _CreatedSessionPayload.model_validate(payload)
    return CreatedSession(session_id=parsed.session_id, created_at=parsed.created_at)


def parse_token(payload: Mapping[str, object]) -> Token:
    parsed = _TokenPayload.model_validate(payload)
    return Token(
        token=parsed.token,
        connection_id=parsed.connection_id,
        session_id=parsed.session_id,
        created_at=parsed.created_at,
        options=TokenOptions(
            role=parsed.role,
            record=parsed.record,
            data=parsed.data,
            media_options=_media_options(parsed.media_options),
        ),
    )


# Encoding -------------------------------------------------------------------------------------


def encode_properties(properties: SessionProperties) -> dict[str, Any]:
    """Encode creation properties; unset optional ids are sent as empty strings."""
    effective = properties.with_defaults()
    assert effective.media_mode is not None
    assert effective.recording_mode is not None
    assert effective.default_output_mode is not None
    assert effective.default_recording_layout is not None
    return {
        "mediaMode": effective.media_mode.value,
        "recordingMode": effective.recording_mode.value,
        "defaultOutputMode": effective.default_output_mode.value,
        "defaultRecordingLayout": effective.default_recording_layout.value,
        "defaultCustomLayout": effective.default_custom_layout or "",
        "customSessionId": effective.custom_session_id or "",
    }


def encode_media_options(options: MediaOptions) -> dict[str, Any]:
    payload_items: dict[str, object | None] = {
        "videoMaxRecvBandwidth": options.video_max_recv_bandwidth,
        "videoMinRecvBandwidth": options.video_min_recv_bandwidth,
        "videoMaxSendBandwidth": options.video_max_send_bandwidth,
        "videoMinSendBandwidth": options.video_min_send_bandwidth,
        "allowedFilters": list(options.allowed_filters) if options.allowed_filters else None,
    }
    return {key: value for key, value in payload_items.items() if value is not None}


def encode_token_options(options: TokenOptions) -> dict[str, Any]:
    """Encode grant options, leaving out every option that is not set."""
    payload_items: dict[str, object | None] = {
        "role": options.role.value if options.role is not None else None,
        "record": options.record,
        "data": options.data,
        "kurentoOptions": (
            encode_media_options(options.media_options)
            if options.media_options is not None
            else None
        ),
    }
    return {key: value for key, value in payload_items.items() if value is not None}


__all__ = [
    "encode_media_options",
    "encode_properties",
    "encode_token_options",
    "parse_connection",
    "parse_created_session",
    "parse_session",
    "parse_session_list",
    "parse_token",
]
