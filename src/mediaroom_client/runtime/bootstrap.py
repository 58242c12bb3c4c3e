"""Runtime wiring for the media server client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from mediaroom_client.application.media_server import MediaServer
from mediaroom_client.infrastructure.http.gateway import HttpSessionGateway
from mediaroom_client.infrastructure.state.session_registry import InMemorySessionRegistry
from mediaroom_client.observability.logging import configure_logging
from mediaroom_client.runtime.settings import Settings

logger = logging.getLogger("mediaroom_client.runtime")


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated client components sharing one HTTP connection pool."""

    settings: Settings
    gateway: HttpSessionGateway
    session_registry: InMemorySessionRegistry
    media_server: MediaServer

    async def aclose(self) -> None:
        await self.gateway.aclose()


def create_runtime_context(
    settings: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    configure_logs: bool = False,
) -> RuntimeContext:
    """Build the gateway, registry and client context from ``settings``."""
    resolved = settings or Settings.load()
    if configure_logs:
        configure_logging(
            level=resolved.observability.log_level,
            json_output=resolved.observability.json_logs,
        )
    media_settings = resolved.media_server
    gateway = HttpSessionGateway(
        base_url=media_settings.require_url(),
        username=media_settings.media_server_username,
        secret=media_settings.media_server_secret_value,
        timeout=media_settings.timeout_seconds,
        client=client,
    )
    registry = InMemorySessionRegistry()
    logger.info(
        "media server client ready",
        extra={"data": {"base_url": media_settings.media_server_url}},
    )
    return RuntimeContext(
        settings=resolved,
        gateway=gateway,
        session_registry=registry,
        media_server=MediaServer(gateway, registry),
    )


__all__ = ["RuntimeContext", "create_runtime_context"]
