"""DTOs exchanged between the session manager and the gateway port."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mediaroom_client.domain.connection import Connection
from mediaroom_client.domain.session import SessionSnapshot


@dataclass(frozen=True)
class CreatedSession:
    """Identity assigned by the media server to a newly created session."""

    session_id: str
    created_at: int | None


class PatchOutcome(str, Enum):
    """Whether a connection patch changed anything server-side."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ConnectionPatch:
    """Result of patching a connection's grant options."""

    outcome: PatchOutcome
    connection: Connection | None = None


__all__ = [
    "ConnectionPatch",
    "CreatedSession",
    "PatchOutcome",
    "SessionSnapshot",
]
