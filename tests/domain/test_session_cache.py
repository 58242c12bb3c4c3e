from __future__ import annotations

import logging

import pytest

from mediaroom_client.domain.connection import Connection, Publisher
from mediaroom_client.domain.options import (
    ConnectionRole,
    MediaMode,
    OutputMode,
    RecordingLayout,
    RecordingMode,
    SessionProperties,
    TokenOptions,
)
from mediaroom_client.domain.session import Session, SessionSnapshot
from mediaroom_client.domain.streams import BareSubscriber, StructuredSubscriber


def make_session() -> Session:
    session = Session.from_properties()
    session.assign_identity("ses_1", 50)
    session.active_connections = [
        Connection(
            connection_id="con_A",
            created_at=100,
            publishers=[Publisher("str_A1"), Publisher("str_A2")],
        ),
        Connection(
            connection_id="con_B",
            created_at=200,
            publishers=[Publisher("str_B1")],
            subscribers=[BareSubscriber("str_A1"), BareSubscriber("str_A2")],
        ),
        Connection(
            connection_id="con_C",
            created_at=300,
            subscribers=[
                StructuredSubscriber("str_A1"),
                StructuredSubscriber("str_B1"),
            ],
        ),
    ]
    return session


def test_construction_applies_property_defaults() -> None:
    session = Session.from_properties(SessionProperties(media_mode=MediaMode.RELAYED))

    assert session.properties.media_mode is MediaMode.RELAYED
    assert session.properties.recording_mode is RecordingMode.MANUAL
    assert session.properties.default_output_mode is OutputMode.COMPOSED
    assert session.properties.default_recording_layout is RecordingLayout.BEST_FIT
    assert session.session_id is None
    assert session.active_connections == []
    assert session.recording is False


def test_session_id_cannot_be_rebound() -> None:
    session = Session.from_properties()
    session.assign_identity("ses_1", 1)

    with pytest.raises(ValueError):
        session.assign_identity("ses_2", 2)


def test_remove_connection_cascades_to_subscribers() -> None:
    session = Session.from_properties()
    session.assign_identity("ses_1", 1)
    session.active_connections = [
        Connection(connection_id="A", created_at=100, publishers=[Publisher("s1")]),
        Connection(connection_id="B", created_at=200, subscribers=[BareSubscriber("s1")]),
    ]

    removed = session.remove_connection("A")

    assert removed is not None
    assert removed.connection_id == "A"
    assert [c.connection_id for c in session.active_connections] == ["B"]
    assert session.active_connections[0].subscribers == []


def test_remove_connection_drops_every_published_stream() -> None:
    session = make_session()

    session.remove_connection("con_A")

    remaining_refs = {
        subscriber.stream_id
        for connection in session.active_connections
        for subscriber in connection.subscribers
    }
    assert remaining_refs.isdisjoint({"str_A1", "str_A2"})
    assert session.connection("con_C") is not None
    assert session.connection("con_C").subscribers == [StructuredSubscriber("str_B1")]


def test_remove_unknown_connection_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="mediaroom_client.session")
    session = make_session()
    before = session.canonical_state()

    assert session.remove_connection("con_missing") is None

    assert session.canonical_state() == before
    assert any("not cached locally" in record.getMessage() for record in caplog.records)


def test_unpublish_is_scoped_to_one_stream() -> None:
    session = make_session()

    session.unpublish("str_A1")

    con_a, con_b, con_c = session.active_connections
    assert con_a.stream_ids() == ("str_A2",)
    assert con_b.stream_ids() == ("str_B1",)
    assert con_b.subscribers == [BareSubscriber("str_A2")]
    assert con_c.subscribers == [StructuredSubscriber("str_B1")]


def test_apply_connection_update_overrides_cached_connection() -> None:
    session = make_session()

    updated = session.apply_connection_update(
        "con_B",
        TokenOptions(role=ConnectionRole.MODERATOR, record=False),
    )

    assert updated is session.connection("con_B")
    assert updated.role is ConnectionRole.MODERATOR
    assert updated.record is False
    assert len(session.active_connections) == 3


def test_apply_connection_update_appends_unseen_connection_without_sorting() -> None:
    session = make_session()
    reported = Connection(connection_id="con_new", created_at=10, role=ConnectionRole.PUBLISHER)

    adopted = session.apply_connection_update(
        "con_new",
        TokenOptions(role=ConnectionRole.PUBLISHER),
        reported,
    )

    assert adopted is reported
    assert [c.connection_id for c in session.active_connections] == [
        "con_A",
        "con_B",
        "con_C",
        "con_new",
    ]


def test_reset_with_snapshot_sorts_connections_stably() -> None:
    session = Session.from_properties()
    snapshot = SessionSnapshot(
        session_id="ses_1",
        created_at=5,
        recording=True,
        properties=SessionProperties(media_mode=MediaMode.ROUTED),
        connections=(
            Connection(connection_id="late", created_at=300),
            Connection(connection_id="tie_first", created_at=100),
            Connection(connection_id="early", created_at=50),
            Connection(connection_id="tie_second", created_at=100),
        ),
    )

    session.reset_with_snapshot(snapshot)

    assert [c.connection_id for c in session.active_connections] == [
        "early",
        "tie_first",
        "tie_second",
        "late",
    ]
    assert session.recording is True
    assert session.created_at == 5


def test_reset_with_snapshot_merges_caller_overrides() -> None:
    session = Session.from_properties(
        SessionProperties(custom_session_id="room1", default_custom_layout="local/layout")
    )
    snapshot = SessionSnapshot(
        session_id="room1",
        created_at=5,
        recording=False,
        properties=SessionProperties(
            recording_mode=RecordingMode.ALWAYS,
            custom_session_id="server-side",
            default_custom_layout=None,
        ),
    )

    session.reset_with_snapshot(snapshot)

    assert session.properties.custom_session_id == "room1"
    assert session.properties.default_custom_layout == "local/layout"
    assert session.properties.recording_mode is RecordingMode.ALWAYS

    session.reset_with_snapshot(
        SessionSnapshot(
            session_id="room1",
            created_at=5,
            recording=False,
            properties=SessionProperties(default_custom_layout="server/layout"),
        )
    )
    assert session.properties.default_custom_layout == "server/layout"


def test_reset_with_snapshot_takes_server_custom_id_when_none_cached() -> None:
    session = Session.from_properties()

    session.reset_with_snapshot(
        SessionSnapshot(
            session_id="room9",
            created_at=1,
            recording=False,
            properties=SessionProperties(custom_session_id="room9"),
        )
    )

    assert session.properties.custom_session_id == "room9"


def test_reset_with_snapshot_copies_connections() -> None:
    connection = Connection(connection_id="con_1", created_at=1)
    snapshot = SessionSnapshot(
        session_id="ses_1",
        created_at=1,
        recording=False,
        properties=SessionProperties(),
        connections=(connection,),
    )
    session = Session.from_snapshot(snapshot)

    session.active_connections[0].publishers.append(Publisher("str_X"))

    assert connection.publishers == []


def test_reset_with_snapshot_rejects_foreign_session() -> None:
    session = make_session()
    before = session.canonical_state()

    with pytest.raises(ValueError):
        session.reset_with_snapshot(
            SessionSnapshot(
                session_id="ses_other",
                created_at=1,
                recording=False,
                properties=SessionProperties(),
            )
        )
    assert session.canonical_state() == before


def test_snapshot_rejects_duplicate_identifiers() -> None:
    with pytest.raises(ValueError, match="connection ids"):
        SessionSnapshot(
            session_id="ses_1",
            created_at=1,
            recording=False,
            properties=SessionProperties(),
            connections=(Connection(connection_id="dup"), Connection(connection_id="dup")),
        )
    with pytest.raises(ValueError, match="stream ids"):
        SessionSnapshot(
            session_id="ses_1",
            created_at=1,
            recording=False,
            properties=SessionProperties(),
            connections=(
                Connection(connection_id="a", publishers=[Publisher("s")]),
                Connection(connection_id="b", publishers=[Publisher("s")]),
            ),
        )


def test_from_snapshot_applies_defaults_for_missing_modes() -> None:
    session = Session.from_snapshot(
        SessionSnapshot(
            session_id="ses_1",
            created_at=1,
            recording=False,
            properties=SessionProperties(),
        )
    )

    assert session.session_id == "ses_1"
    assert session.properties.media_mode is MediaMode.ROUTED
    assert session.properties.default_recording_layout is RecordingLayout.BEST_FIT


def test_equal_to_is_order_sensitive() -> None:
    left = make_session()
    right = make_session()
    assert left.equal_to(right)

    right.active_connections.reverse()
    assert not left.equal_to(right)


def test_reset_with_snapshot_defaults_unset_modes_every_time() -> None:
    snapshot = SessionSnapshot(
        session_id="ses_1",
        created_at=1,
        recording=False,
        properties=SessionProperties(),
    )
    session = Session.from_snapshot(snapshot)
    before = session.canonical_state()

    session.reset_with_snapshot(snapshot)

    assert session.properties.recording_mode is RecordingMode.MANUAL
    assert session.canonical_state() == before


def test_apply_connection_update_rejects_duplicate_stream_ids() -> None:
    session = make_session()
    before = session.canonical_state()

    with pytest.raises(ValueError, match="stream ids"):
        session.apply_connection_update(
            "con_new",
            TokenOptions(),
            Connection(connection_id="con_new", publishers=[Publisher("str_B1")]),
        )

    assert session.canonical_state() == before
