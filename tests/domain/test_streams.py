from __future__ import annotations

import pytest

from mediaroom_client.domain.streams import (
    BareSubscriber,
    StructuredSubscriber,
    stream_key,
    subscriber_ref,
    without_stream,
)


def test_stream_key_accepts_every_representation() -> None:
    assert stream_key("str_CAM_1") == "str_CAM_1"
    assert stream_key({"streamId": "str_CAM_2"}) == "str_CAM_2"
    assert stream_key({"stream_id": "str_CAM_3"}) == "str_CAM_3"
    assert stream_key(BareSubscriber("str_CAM_4")) == "str_CAM_4"
    assert stream_key(StructuredSubscriber("str_CAM_5")) == "str_CAM_5"


def test_stream_key_rejects_entries_without_stream_id() -> None:
    with pytest.raises(ValueError):
        stream_key({"publisher": "con_1"})
    with pytest.raises(ValueError):
        stream_key(42)


def test_subscriber_ref_normalizes_records() -> None:
    ref = subscriber_ref({"streamId": "str_A", "createdAt": 150, "publisher": "con_1"})

    assert ref == StructuredSubscriber(
        stream_id="str_A",
        created_at=150,
        extra={"publisher": "con_1"},
    )
    assert subscriber_ref("str_B") == BareSubscriber("str_B")


def test_without_stream_filters_mixed_representations() -> None:
    subscribers = [
        BareSubscriber("str_A"),
        StructuredSubscriber("str_B"),
        StructuredSubscriber("str_A", created_at=10),
        BareSubscriber("str_C"),
    ]

    remaining = without_stream(subscribers, "str_A")

    assert remaining == [StructuredSubscriber("str_B"), BareSubscriber("str_C")]


def test_without_stream_returns_empty_for_empty_input() -> None:
    assert without_stream([], "str_A") == []
