"""Failures surfaced by remote session operations."""

from __future__ import annotations


class SessionGatewayError(RuntimeError):
    """Base class for failures talking to the media server."""


class RemoteRejectedError(SessionGatewayError):
    """Raised when the media server answers with a non-success status."""

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"media server returned {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SessionConflictError(RemoteRejectedError):
    """Raised when a session with the requested custom id already exists."""

    def __init__(self, custom_session_id: str | None) -> None:
        self.custom_session_id = custom_session_id
        super().__init__(409, f"session {custom_session_id!r} already exists")


class NoResponseError(SessionGatewayError):
    """Raised when a request was sent but no response arrived."""


class RequestSetupError(SessionGatewayError):
    """Raised when a request could not be built or issued."""


class MalformedResponseError(SessionGatewayError):
    """Raised when a success response carries an unexpected body."""


__all__ = [
    "MalformedResponseError",
    "NoResponseError",
    "RemoteRejectedError",
    "RequestSetupError",
    "SessionConflictError",
    "SessionGatewayError",
]
