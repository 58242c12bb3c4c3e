"""HTTP adapter for the media server's session REST API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection, Mapping
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from mediaroom_client.application.dto.session import ConnectionPatch, CreatedSession, PatchOutcome
from mediaroom_client.application.ports.session_gateway import SessionGatewayPort
from mediaroom_client.domain.options import SessionProperties, Token, TokenOptions
from mediaroom_client.domain.session import SessionSnapshot
from mediaroom_client.errors import (
    MalformedResponseError,
    NoResponseError,
    RemoteRejectedError,
    RequestSetupError,
    SessionConflictError,
)
from mediaroom_client.infrastructure.http.codec import (
    encode_properties,
    encode_token_options,
    parse_connection,
    parse_created_session,
    parse_session,
    parse_session_list,
    parse_token,
)

_LOGGER = logging.getLogger("mediaroom_client.gateway.calls")

SESSIONS_PATH = "/api/sessions"
TOKENS_PATH = "/api/tokens"

_T = TypeVar("_T")


def _segment(value: str) -> str:
    if not value:
        raise RequestSetupError("path identifiers must not be empty")
    return quote(value, safe="")


class HttpSessionGateway(SessionGatewayPort):
    """Implementation of SessionGatewayPort backed by an HTTPX async client."""

    def __init__(
        self,
        *,
        base_url: str,
        secret: str,
        username: str = "MEDIAROOMAPP",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("media server base_url must not be empty")
        if not secret:
            raise ValueError("media server secret must be provided")
        normalized_base = base_url.rstrip("/")
        self._owns_client = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            base_url=normalized_base,
            timeout=timeout,
        )
        self._auth = httpx.BasicAuth(username, secret)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # Session API ---------------------------------------------------------------------------------

    async def create_session(self, properties: SessionProperties) -> CreatedSession:
        payload = encode_properties(properties)
        try:
            response = await self._request("POST", SESSIONS_PATH, json_payload=payload)
        except RemoteRejectedError as exc:
            if exc.status_code == httpx.codes.CONFLICT:
                raise SessionConflictError(properties.custom_session_id) from exc
            raise
        return self._decode(response, parse_created_session)

    async def get_session(self, session_id: str) -> SessionSnapshot:
        path = f"{SESSIONS_PATH}/{_segment(session_id)}"
        response = await self._request("GET", path)
        return self._decode(response, parse_session)

    async def list_sessions(self) -> tuple[SessionSnapshot, ...]:
        response = await self._request("GET", SESSIONS_PATH)
        return self._decode(response, parse_session_list)

    async def delete_session(self, session_id: str) -> None:
        path = f"{SESSIONS_PATH}/{_segment(session_id)}"
        await self._request("DELETE", path, expected=(httpx.codes.NO_CONTENT,))

    async def create_token(self, session_id: str, options: TokenOptions) -> Token:
        payload = {"session": session_id, **encode_token_options(options)}
        response = await self._request("POST", TOKENS_PATH, json_payload=payload)
        return self._decode(response, parse_token)

    async def delete_connection(self, session_id: str, connection_id: str) -> None:
        path = f"{SESSIONS_PATH}/{_segment(session_id)}/connection/{_segment(connection_id)}"
        await self._request("DELETE", path, expected=(httpx.codes.NO_CONTENT,))

    async def delete_stream(self, session_id: str, stream_id: str) -> None:
        path = f"{SESSIONS_PATH}/{_segment(session_id)}/stream/{_segment(stream_id)}"
        await self._request("DELETE", path, expected=(httpx.codes.NO_CONTENT,))

    async def patch_connection(
        self,
        session_id: str,
        connection_id: str,
        options: TokenOptions,
    ) -> ConnectionPatch:
        path = f"{SESSIONS_PATH}/{_segment(session_id)}/connection/{_segment(connection_id)}"
        response = await self._request(
            "PATCH",
            path,
            json_payload=encode_token_options(options),
            expected=(httpx.codes.OK, httpx.codes.NO_CONTENT),
        )
        if response.status_code == httpx.codes.NO_CONTENT:
            return ConnectionPatch(outcome=PatchOutcome.UNCHANGED)
        return ConnectionPatch(
            outcome=PatchOutcome.APPLIED,
            connection=self._decode(response, parse_connection),
        )

    # ------------------------------------------------------------------
    # internal

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
        expected: Collection[int] = (httpx.codes.OK,),
    ) -> httpx.Response:
        tracer = trace.get_tracer("mediaroom_client.gateway")
        with tracer.start_as_current_span(
            "media_server.request",
            kind=SpanKind.CLIENT,
            attributes={"http.method": method, "http.target": path},
        ) as span:
            start = time.perf_counter()
            try:
                response = await self._client.request(
                    method,
                    path,
                    json=dict(json_payload) if json_payload is not None else None,
                    auth=self._auth,
                    headers={"Accept": "application/json"},
                )
            except (httpx.UnsupportedProtocol, httpx.LocalProtocolError) as exc:
                span.set_status(Status(StatusCode.ERROR, "request_setup"))
                _LOGGER.error(
                    "media_server.request.setup_failed",
                    extra={"data": {"method": method, "path": path, "error": str(exc)}},
                )
                raise RequestSetupError(f"could not issue {method} {path}: {exc}") from exc
            except httpx.TransportError as exc:
                span.set_status(Status(StatusCode.ERROR, "no_response"))
                _LOGGER.error(
                    "media_server.request.no_response",
                    extra={
                        "data": {
                            "method": method,
                            "path": path,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        }
                    },
                )
                raise NoResponseError(f"no response for {method} {path}: {exc!r}") from exc
            except (httpx.InvalidURL, TypeError, ValueError) as exc:
                span.set_status(Status(StatusCode.ERROR, "request_setup"))
                _LOGGER.error(
                    "media_server.request.setup_failed",
                    extra={"data": {"method": method, "path": path, "error": str(exc)}},
                )
                raise RequestSetupError(f"could not build {method} {path}: {exc}") from exc

            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            span.set_attribute("http.status_code", response.status_code)
            if response.status_code not in expected:
                span.set_status(Status(StatusCode.ERROR, f"status_{response.status_code}"))
                _LOGGER.warning(
                    "media_server.request.rejected",
                    extra={
                        "data": {
                            "method": method,
                            "path": path,
                            "status_code": response.status_code,
                            "latency_ms": latency_ms,
                        }
                    },
                )
                raise RemoteRejectedError(response.status_code, response.text[:200] or None)

            _LOGGER.debug(
                "media_server.request.complete",
                extra={
                    "data": {
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "latency_ms": latency_ms,
                    }
                },
            )
            return response

    @staticmethod
    def _decode(response: httpx.Response, parser: Callable[[Any], _T]) -> _T:
        try:
            return parser(response.json())
        except ValueError as exc:
            # pydantic.ValidationError and json decode errors are both ValueErrors
            raise MalformedResponseError(
                f"unexpected body for {response.request.method} {response.request.url.path}: {exc}"
            ) from exc


__all__ = ["HttpSessionGateway", "SESSIONS_PATH", "TOKENS_PATH"]
