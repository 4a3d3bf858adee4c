"""
xdnmb-wire: unit tests for thread and reply records

File: tests/unit/records/test_thread_records.py

Purpose
- Validate thread/reply decoding against the shapes the forum actually serves.

What this test file should cover
- Mixed scalar encodings decoding to one canonical record.
- String-wrapped nested payloads and brief-view presence semantics.
- Alias handling between API versions.
- Round-trip through the wire form and post-time parsing.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from xdnmb_wire.decoding.errors import (
    AliasConflict,
    BooleanOutOfRange,
    FieldDecodeFailure,
    ItemDecodeFailure,
    MissingRequiredField,
    UnexpectedFields,
)
from xdnmb_wire.decoding.fields import DecodeOptions
from xdnmb_wire.records import Reply, Thread
from xdnmb_wire.records.thread import parse_post_time

try:
    from hypothesis import given, settings
    from hypothesis import strategies as st

    HYPOTHESIS_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - fallback path
    HYPOTHESIS_AVAILABLE = False

BOARD_THREAD_WIRE: dict[str, object] = {
    "id": "50000001",
    "fid": "4",
    "ReplyCount": "12",
    "img": "2022-06-18/62ad8a8bbd2e5",
    "ext": ".jpg",
    "now": "2022-06-18(六)16:43:55",
    "user_hash": "abcDEF1",
    "name": "无名氏",
    "title": "无标题",
    "content": "第一",
    "sage": "0",
    "admin": "0",
    "Hide": "0",
    "Replies": [
        {
            "id": "50000010",
            "user_hash": "Tips",
            "now": "2022-06-18(六)16:50:00",
            "name": "",
            "title": "",
            "content": "第二",
            "sage": 0,
            "admin": 1,
            "Hide": 0,
            "img": "",
            "ext": "",
        }
    ],
    "RemainReplies": 11,
}


def test_scenario_mixed_encodings_and_empty_reply_count() -> None:
    thread = Thread.from_wire({"id": "123", "Hide": 0, "ReplyCount": ""})
    assert thread.id == 123
    assert thread.hide is False
    assert thread.reply_count is None


def test_scenario_native_and_string_encodings_are_identical() -> None:
    native = Thread.from_wire({"id": 123, "Hide": True})
    stringly = Thread.from_wire({"id": "123", "Hide": "1"})
    assert native == stringly
    assert native.hide is True


def test_scenario_wrapped_and_native_reply_ids_match() -> None:
    wrapped = Thread.from_wire({"id": 1, "recent_replies": "[101,102]"})
    native = Thread.from_wire({"id": 1, "recent_replies": [101, 102]})
    assert wrapped.recent_replies == native.recent_replies == (101, 102)
    assert wrapped == native


def test_scenario_out_of_range_hide_fails() -> None:
    with pytest.raises(FieldDecodeFailure) as excinfo:
        Thread.from_wire({"Hide": 5})
    error = excinfo.value
    assert error.record_type == "Thread"
    assert error.wire_key == "Hide"
    assert isinstance(error.cause, BooleanOutOfRange)
    assert error.raw == 5


def test_very_long_numeric_strings_fail_as_typed_field_errors() -> None:
    with pytest.raises(FieldDecodeFailure) as excinfo:
        Thread.from_wire({"id": "9" * 5000})
    assert excinfo.value.wire_key == "id"
    assert excinfo.value.root_cause.kind == "number_out_of_range"

    with pytest.raises(FieldDecodeFailure) as excinfo:
        Thread.from_wire({"id": 1, "sage": "1" * 5000})
    assert isinstance(excinfo.value.cause, BooleanOutOfRange)


def test_board_listing_thread_decodes_fully() -> None:
    thread = Thread.from_wire(BOARD_THREAD_WIRE)

    assert thread.id == 50000001
    assert thread.fid == 4
    assert thread.reply_count == 12
    assert thread.user_hash == "abcDEF1"
    assert thread.sage is False
    assert thread.is_brief is True
    assert thread.remain_replies == 11
    assert thread.replies is not None
    reply = thread.replies[0]
    assert isinstance(reply, Reply)
    assert reply.id == 50000010
    assert reply.admin is True
    assert reply.name == ""
    assert thread.reply_ids() == (50000010,)


def test_full_thread_view_is_not_brief() -> None:
    payload = {key: value for key, value in BOARD_THREAD_WIRE.items() if key != "RemainReplies"}
    thread = Thread.from_wire(payload)
    assert thread.is_brief is False
    assert thread.remain_replies is None


@pytest.mark.parametrize("remain", [0, "", None, "3"])
def test_remain_replies_presence_marks_brief_view(remain: object) -> None:
    thread = Thread.from_wire({"id": 1, "RemainReplies": remain})
    assert thread.is_brief is True


def test_string_wrapped_replies_from_feed() -> None:
    wrapped = Thread.from_wire({"id": 1, "Replies": '[{"id": "2", "sage": "1"}]'})
    native = Thread.from_wire({"id": 1, "Replies": [{"id": 2, "sage": 1}]})
    assert wrapped == native
    assert wrapped.replies == (Reply(id=2, sage=True),)


@pytest.mark.parametrize("empty", ["", None])
def test_empty_replies_are_absent(empty: object) -> None:
    thread = Thread.from_wire({"id": 1, "Replies": empty})
    assert thread.replies is None
    assert thread.reply_ids() == ()


def test_reply_failure_inside_thread_keeps_path() -> None:
    with pytest.raises(FieldDecodeFailure) as excinfo:
        Thread.from_wire({"id": 1, "Replies": [{"id": 2}, {"id": 3, "Hide": 9}]})
    outer = excinfo.value
    assert outer.wire_key == "Replies"
    assert isinstance(outer.cause, ItemDecodeFailure)
    assert outer.cause.index == 1
    assert isinstance(outer.root_cause, BooleanOutOfRange)
    assert outer.message == "Thread.Replies: [1]: Reply.Hide: " + outer.root_cause.message


def test_secondary_aliases_from_older_api_versions() -> None:
    thread = Thread.from_wire(
        {"id": 1, "reply_count": "3", "userid": "xyz", "hide": "1", "replys": [{"id": 9}]}
    )
    assert thread.reply_count == 3
    assert thread.user_hash == "xyz"
    assert thread.hide is True
    assert thread.replies == (Reply(id=9),)


def test_alias_tie_break_prefers_primary_key() -> None:
    thread = Thread.from_wire({"id": 1, "ReplyCount": 3, "reply_count": 5})
    assert thread.reply_count == 3


def test_alias_conflict_raises_under_error_policy() -> None:
    with pytest.raises(AliasConflict) as excinfo:
        Thread.from_wire(
            {"id": 1, "user_hash": "a", "userid": "b"},
            options=DecodeOptions(alias_conflict="error"),
        )
    assert excinfo.value.field_name == "user_hash"
    assert excinfo.value.wire_keys == ("user_hash", "userid")


def test_unknown_keys_rejected_only_when_requested() -> None:
    payload = {"id": 1, "po": "", "future_field": 1}
    assert Thread.from_wire(payload).po == ""
    with pytest.raises(UnexpectedFields):
        Thread.from_wire(payload, options=DecodeOptions(reject_unknown_fields=True))


def test_reply_ignores_thread_only_keys_unless_strict() -> None:
    reply = Reply.from_wire({"id": 1, "RemainReplies": 2})
    assert reply == Reply(id=1)
    with pytest.raises(UnexpectedFields):
        Reply.from_wire(
            {"id": 1, "RemainReplies": 2}, options=DecodeOptions(reject_unknown_fields=True)
        )


def test_reply_and_thread_are_distinct_types() -> None:
    payload = {"id": 1, "content": "x"}
    assert Reply.from_wire(payload) != Thread.from_wire(payload)
    assert not isinstance(Thread.from_wire(payload), Reply)


def test_missing_id_is_reported() -> None:
    with pytest.raises(MissingRequiredField) as excinfo:
        Reply.from_wire({"content": "x"})
    assert excinfo.value.wire_keys == ("id",)


def test_thread_round_trip_through_wire_form() -> None:
    thread = Thread.from_wire(BOARD_THREAD_WIRE)
    wire = thread.to_wire()

    assert wire["Hide"] == 0
    assert wire["RemainReplies"] == 11
    assert "hide" not in wire
    assert isinstance(wire["Replies"], list)
    assert Thread.from_wire(wire) == thread


def test_brief_flag_without_value_round_trips() -> None:
    thread = Thread.from_wire({"id": 1, "RemainReplies": ""})
    wire = thread.to_wire()
    assert wire == {"id": 1, "RemainReplies": ""}
    assert Thread.from_wire(wire) == thread


def test_wrapped_encoding_is_not_preserved_but_meaning_is() -> None:
    thread = Thread.from_wire({"id": 1, "recent_replies": "[7,8]"})
    assert thread.to_wire()["recent_replies"] == [7, 8]


def test_posted_at_parses_forum_time_format() -> None:
    thread = Thread.from_wire(BOARD_THREAD_WIRE)
    assert thread.posted_at() == datetime(2022, 6, 18, 16, 43, 55)
    assert Reply(id=1).posted_at() is None


@pytest.mark.parametrize("text", ["2022-06-18 16:43:55", "2022-06-18(六)16:43", "yesterday"])
def test_parse_post_time_rejects_other_shapes(text: str) -> None:
    with pytest.raises(ValueError, match="unrecognized post time"):
        parse_post_time(text)


if HYPOTHESIS_AVAILABLE:

    _int64 = st.integers(min_value=-(2**63), max_value=2**63 - 1)
    _optional_text = st.none() | st.text(max_size=12)
    _optional_flag = st.none() | st.booleans()

    _replies = st.builds(
        Reply,
        id=_int64,
        reply_count=st.none() | _int64,
        user_hash=_optional_text,
        content=_optional_text,
        sage=_optional_flag,
        hide=_optional_flag,
    )

    @settings(max_examples=100, derandomize=True, deadline=None)
    @given(
        thread=st.builds(
            Thread,
            id=_int64,
            fid=st.none() | _int64,
            title=_optional_text,
            admin=_optional_flag,
            hide=_optional_flag,
            replies=st.none() | st.lists(_replies, max_size=3).map(tuple),
            remain_replies=st.none() | st.integers(min_value=0, max_value=10_000),
            is_brief=st.booleans(),
            recent_replies=st.none() | st.lists(_int64, max_size=5).map(tuple),
        ).filter(lambda item: item.remain_replies is None or item.is_brief)
    )
    def test_property_thread_round_trip(thread: Thread) -> None:
        assert Thread.from_wire(thread.to_wire()) == thread
