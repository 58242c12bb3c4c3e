from __future__ import annotations

import pytest
from mediaroom_fakes import FakeSessionGateway, make_snapshot

from mediaroom_client.application.media_server import MediaServer
from mediaroom_client.domain.connection import Connection, Publisher
from mediaroom_client.domain.options import SessionProperties
from mediaroom_client.domain.session import SessionSnapshot
from mediaroom_client.errors import NoResponseError
from mediaroom_client.infrastructure.state.session_registry import InMemorySessionRegistry

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def server(gateway: FakeSessionGateway, registry: InMemorySessionRegistry) -> MediaServer:
    return MediaServer(gateway, registry)


async def test_create_session_registers_live_session(
    server: MediaServer, registry: InMemorySessionRegistry
) -> None:
    session = await server.create_session(SessionProperties(custom_session_id="room1"))

    assert session.session_id == "room1"
    assert registry.get("room1") is session
    assert server.active_sessions == (session,)


async def test_create_session_twice_adopts_the_same_id(server: MediaServer) -> None:
    first = await server.create_session(SessionProperties(custom_session_id="room1"))
    second = await server.create_session(SessionProperties(custom_session_id="room1"))

    assert first.session_id == second.session_id == "room1"
    assert server.active_sessions == (second,)


async def test_close_through_sessions_drops_registration(server: MediaServer) -> None:
    session = await server.create_session()

    await server.sessions.close(session)

    assert server.active_sessions == ()


async def test_fetch_adds_updates_and_drops_sessions(
    server: MediaServer, gateway: FakeSessionGateway, registry: InMemorySessionRegistry
) -> None:
    kept = await server.create_session()
    gone = await server.create_session()
    gateway.snapshots = {
        kept.require_session_id(): make_snapshot(
            kept.require_session_id(),
            [Connection(connection_id="con_1", created_at=5, publishers=[Publisher("str_1")])],
            created_at=kept.created_at or 0,
        ),
        "ses_remote": make_snapshot("ses_remote", created_at=7),
    }

    assert await server.fetch() is True

    assert registry.get(gone.require_session_id()) is None
    assert registry.get(kept.require_session_id()) is kept
    assert kept.stream_ids() == ("str_1",)
    adopted = registry.get("ses_remote")
    assert adopted is not None
    assert adopted.created_at == 7


async def test_fetch_without_differences_reports_unchanged(
    server: MediaServer, gateway: FakeSessionGateway
) -> None:
    session = await server.create_session()
    session_id = session.require_session_id()
    gateway.snapshots[session_id] = make_snapshot(session_id, created_at=session.created_at or 0)

    assert await server.fetch() is False


async def test_fetch_failure_leaves_registry_untouched(
    server: MediaServer, gateway: FakeSessionGateway
) -> None:
    session = await server.create_session()
    gateway.failure = NoResponseError("timed out")

    with pytest.raises(NoResponseError):
        await server.fetch()

    assert server.active_sessions == (session,)


async def test_repeated_fetch_of_unchanged_sessions_reports_no_change(
    server: MediaServer, gateway: FakeSessionGateway
) -> None:
    gateway.snapshots["ses_remote"] = SessionSnapshot(
        session_id="ses_remote",
        created_at=1,
        recording=False,
        properties=SessionProperties(),
    )

    assert await server.fetch() is True
    assert await server.fetch() is False
