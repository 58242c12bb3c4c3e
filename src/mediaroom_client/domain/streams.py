"""Subscriber references and stream-id resolution."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class BareSubscriber:
    """Subscription reported as a plain stream identifier."""

    stream_id: str


@dataclass(frozen=True, slots=True)
class StructuredSubscriber:
    """Subscription reported as a record carrying extra negotiation details."""

    stream_id: str
    created_at: int | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


SubscriberRef: TypeAlias = BareSubscriber | StructuredSubscriber


def stream_key(entry: object) -> str:
    """Return the stream identifier named by ``entry``.

    Accepts a bare identifier, a mapping with ``streamId``/``stream_id`` or any
    object exposing ``stream_id``.
    """
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping):
        value = entry.get("streamId", entry.get("stream_id"))
    else:
        value = getattr(entry, "stream_id", None)
    if not isinstance(value, str) or not value:
        raise ValueError(f"cannot resolve a stream id from {entry!r}")
    return value


def subscriber_ref(entry: object) -> SubscriberRef:
    """Normalize a raw subscriber entry into a :data:`SubscriberRef`."""
    if isinstance(entry, (BareSubscriber, StructuredSubscriber)):
        return entry
    if isinstance(entry, str):
        return BareSubscriber(stream_id=stream_key(entry))
    if isinstance(entry, Mapping):
        created_at = entry.get("createdAt", entry.get("created_at"))
        extra = {
            key: value
            for key, value in entry.items()
            if key not in {"streamId", "stream_id", "createdAt", "created_at"}
        }
        return StructuredSubscriber(
            stream_id=stream_key(entry),
            created_at=int(created_at) if created_at is not None else None,
            extra=extra,
        )
    raise ValueError(f"unsupported subscriber entry {entry!r}")


def without_stream(subscribers: Iterable[SubscriberRef], stream_id: str) -> list[SubscriberRef]:
    """Return ``subscribers`` minus every reference to ``stream_id``."""
    return [subscriber for subscriber in subscribers if stream_key(subscriber) != stream_id]


__all__ = [
    "BareSubscriber",
    "StructuredSubscriber",
    "SubscriberRef",
    "stream_key",
    "subscriber_ref",
    "without_stream",
]
