"""
xdnmb-wire: unit tests for field-level schema wiring

File: tests/unit/decoding/test_fields.py

Purpose
- Validate presence checks, optional-field policies, alias handling and strictness options.

What this test file should cover
- Missing keys never reach a normalizer.
- Present fields fail before missing required fields are reported.
- Alias tie-break (primary wins) and the error policy.
- Unknown-key logging and rejection.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from structlog.testing import capture_logs

from xdnmb_wire.decoding.errors import (
    AliasConflict,
    BooleanOutOfRange,
    FieldDecodeFailure,
    MissingRequiredField,
    NotAnObject,
    UnexpectedFields,
)
from xdnmb_wire.decoding.fields import (
    DecodeOptions,
    FieldSpec,
    boolean_field,
    decode_fields,
    encode_fields,
    integer_field,
    integer_sequence_field,
    presence_field,
    text_field,
)

SPECS: tuple[FieldSpec, ...] = (
    integer_field("id", "id", required=True),
    integer_field("reply_count", "ReplyCount", "reply_count"),
    text_field("title", "title"),
    boolean_field("hide", "Hide", "hide"),
    presence_field("remain", "RemainReplies", flag="brief"),
    integer_sequence_field("recent", "recent_replies"),
)


@dataclass
class _RecordingLogger:
    calls: list[tuple[str, str, dict[str, object]]] = field(default_factory=list)

    def debug(self, event: str, **kwargs: object) -> None:
        self.calls.append(("debug", event, kwargs))

    def warning(self, event: str, **kwargs: object) -> None:
        self.calls.append(("warning", event, kwargs))


def test_missing_optional_fields_are_absent() -> None:
    values = decode_fields("Post", SPECS, {"id": 1})
    assert values == {
        "id": 1,
        "reply_count": None,
        "title": None,
        "hide": None,
        "brief": False,
        "remain": None,
        "recent": None,
    }


def test_empty_string_policy_differs_for_text_and_typed_fields() -> None:
    values = decode_fields(
        "Post",
        SPECS,
        {"id": "", "ReplyCount": "", "title": "", "Hide": "", "recent_replies": ""},
    )
    assert values["id"] == 0
    assert values["reply_count"] is None
    assert values["title"] == ""
    assert values["hide"] is None
    assert values["recent"] is None


def test_null_on_optional_field_is_absent() -> None:
    values = decode_fields("Post", SPECS, {"id": 1, "title": None, "Hide": None})
    assert values["title"] is None
    assert values["hide"] is None


def test_presence_flag_tracks_key_not_value() -> None:
    for raw in (0, 3, "", None, "7"):
        values = decode_fields("Post", SPECS, {"id": 1, "RemainReplies": raw})
        assert values["brief"] is True


def test_field_failure_wraps_record_type_and_wire_key() -> None:
    with pytest.raises(FieldDecodeFailure) as excinfo:
        decode_fields("Post", SPECS, {"id": 1, "hide": 2})
    error = excinfo.value
    assert error.record_type == "Post"
    assert error.field_name == "hide"
    assert error.wire_key == "hide"
    assert error.raw == 2
    assert isinstance(error.cause, BooleanOutOfRange)
    assert isinstance(error.__cause__, BooleanOutOfRange)
    assert str(error).startswith("Post.hide: ")


def test_present_field_failure_wins_over_missing_required() -> None:
    with pytest.raises(FieldDecodeFailure) as excinfo:
        decode_fields("Post", SPECS, {"Hide": 5})
    assert isinstance(excinfo.value.root_cause, BooleanOutOfRange)


def test_missing_required_fields_reported_together() -> None:
    specs = (
        integer_field("id", "id", required=True),
        text_field("name", "name", required=True),
    )
    with pytest.raises(MissingRequiredField) as excinfo:
        decode_fields("Forum", specs, {})
    assert excinfo.value.wire_keys == ("id", "name")
    assert excinfo.value.record_type == "Forum"


def test_required_null_is_not_treated_as_absent() -> None:
    with pytest.raises(FieldDecodeFailure):
        decode_fields("Post", SPECS, {"id": None})


def test_non_object_input_raises_not_an_object() -> None:
    with pytest.raises(NotAnObject) as excinfo:
        decode_fields("Post", SPECS, [1, 2])
    assert excinfo.value.raw == [1, 2]


def test_alias_secondary_key_is_accepted() -> None:
    values = decode_fields("Post", SPECS, {"id": 1, "reply_count": "4", "hide": "1"})
    assert values["reply_count"] == 4
    assert values["hide"] is True


def test_alias_agreeing_values_are_not_a_conflict() -> None:
    logger = _RecordingLogger()
    values = decode_fields(
        "Post",
        SPECS,
        {"id": 1, "Hide": 1, "hide": "1"},
        DecodeOptions(logger=logger),
    )
    assert values["hide"] is True
    assert logger.calls == []


def test_alias_conflict_prefers_primary_and_warns() -> None:
    logger = _RecordingLogger()
    values = decode_fields(
        "Post",
        SPECS,
        {"id": 1, "ReplyCount": 3, "reply_count": 9},
        DecodeOptions(logger=logger),
    )
    assert values["reply_count"] == 3
    assert logger.calls == [
        (
            "warning",
            "wire_alias_conflict",
            {
                "record_type": "Post",
                "field": "reply_count",
                "kept": "ReplyCount",
                "ignored": ["reply_count"],
            },
        )
    ]


def test_alias_conflict_with_undecodable_secondary_is_still_a_conflict() -> None:
    with pytest.raises(AliasConflict) as excinfo:
        decode_fields(
            "Post",
            SPECS,
            {"id": 1, "Hide": 0, "hide": 7},
            DecodeOptions(alias_conflict="error"),
        )
    assert excinfo.value.wire_keys == ("Hide", "hide")
    assert excinfo.value.raw == {"Hide": 0, "hide": 7}


def test_unknown_keys_logged_at_debug_by_default() -> None:
    with capture_logs() as events:
        decode_fields("Post", SPECS, {"id": 1, "zz": 1, "aa": 2})
    assert {
        "event": "wire_unknown_fields",
        "record_type": "Post",
        "keys": ["aa", "zz"],
        "log_level": "debug",
    } in events


def test_unknown_keys_rejected_in_strict_mode() -> None:
    with pytest.raises(UnexpectedFields) as excinfo:
        decode_fields(
            "Post",
            SPECS,
            {"id": 1, "zz": 1, "aa": 2},
            DecodeOptions(reject_unknown_fields=True),
        )
    assert excinfo.value.wire_keys == ("aa", "zz")


def test_decode_options_validates_policy() -> None:
    with pytest.raises(ValueError, match="alias_conflict"):
        DecodeOptions(alias_conflict="prefer_newest")


def test_field_spec_requires_a_wire_key() -> None:
    with pytest.raises(ValueError):
        integer_field("id")


def test_encode_fields_uses_primary_keys_and_presence_marker() -> None:
    @dataclass
    class _Post:
        id: int = 1
        reply_count: int | None = 2
        title: str | None = None
        hide: bool | None = False
        remain: int | None = None
        brief: bool = True
        recent: tuple[int, ...] | None = (5, 6)

    assert encode_fields(SPECS, _Post()) == {
        "id": 1,
        "ReplyCount": 2,
        "Hide": 0,
        "RemainReplies": "",
        "recent_replies": [5, 6],
    }
