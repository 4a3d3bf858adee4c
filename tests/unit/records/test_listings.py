"""
xdnmb-wire: unit tests for listing decoders and kind dispatch

File: tests/unit/records/test_listings.py

Purpose
- Validate top-level array decoders and ``decode(kind, value)`` routing.
"""

from __future__ import annotations

import pytest

from xdnmb_wire.constants import LIST_KINDS, RECORD_KINDS
from xdnmb_wire.decoding.errors import ItemDecodeFailure, NotAnObject, UnsupportedShape
from xdnmb_wire.decoding.fields import DecodeOptions
from xdnmb_wire.records import (
    LIST_ELEMENT_TYPES,
    RECORD_TYPES,
    CdnPath,
    ForumGroup,
    Reply,
    Thread,
    Timeline,
    decode,
    decode_cdn_path_list,
    decode_forum_list,
    decode_thread_list,
    decode_timeline_list,
)


def test_kind_tables_match_constants() -> None:
    assert tuple(RECORD_TYPES) == RECORD_KINDS
    assert tuple(LIST_ELEMENT_TYPES) == LIST_KINDS


def test_decode_forum_list() -> None:
    groups = decode_forum_list(
        [
            {
                "id": "1",
                "name": "综合",
                "sort": "1",
                "status": "n",
                "forums": [{"id": "4", "name": "综合版1", "msg": ""}],
            }
        ]
    )
    assert isinstance(groups, tuple)
    assert groups[0].forums[0].id == 4


def test_decode_thread_list_preserves_order() -> None:
    threads = decode_thread_list([{"id": 3}, {"id": "1"}, {"id": 2}])
    assert [thread.id for thread in threads] == [3, 1, 2]


def test_decode_timeline_and_cdn_lists() -> None:
    timelines = decode_timeline_list([{"id": 1, "name": "综合线", "max_page": 20}])
    paths = decode_cdn_path_list([{"url": "https://image.nmb.best/", "rate": 0.8}])
    assert timelines == (Timeline(id=1, name="综合线", max_page=20),)
    assert paths == (CdnPath(url="https://image.nmb.best/", rate=0.8),)


def test_list_element_failure_carries_index() -> None:
    with pytest.raises(ItemDecodeFailure) as excinfo:
        decode_thread_list([{"id": 1}, "oops"])
    assert excinfo.value.index == 1
    assert isinstance(excinfo.value.cause, NotAnObject)


def test_list_decoders_reject_non_arrays() -> None:
    with pytest.raises(UnsupportedShape):
        decode_thread_list({"id": 1})


def test_list_decoders_honor_options() -> None:
    strict = DecodeOptions(reject_unknown_fields=True)
    with pytest.raises(ItemDecodeFailure) as excinfo:
        decode_thread_list([{"id": 1, "extra": 1}], options=strict)
    assert excinfo.value.root_cause.kind == "unexpected_fields"


@pytest.mark.parametrize(
    ("kind", "payload", "expected_type"),
    [
        ("thread", {"id": 1}, Thread),
        ("reply", {"id": 1}, Reply),
        (
            "forum-group",
            {"id": 1, "name": "g", "sort": 1, "status": "n", "forums": []},
            ForumGroup,
        ),
        ("cdn-path", {"url": "u", "rate": 1.0}, CdnPath),
    ],
)
def test_decode_dispatches_record_kinds(kind: str, payload: object, expected_type: type) -> None:
    assert isinstance(decode(kind, payload), expected_type)


def test_decode_dispatches_list_kinds() -> None:
    decoded = decode("thread-list", [{"id": 1}])
    assert decoded == (Thread(id=1),)


def test_decode_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="unknown record kind 'post'"):
        decode("post", {})
