"""Top-level listing decoders and kind-based dispatch for whole API responses."""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

from xdnmb_wire.decoding.envelope import decode_sequence
from xdnmb_wire.decoding.fields import DecodeOptions
from xdnmb_wire.records.base import WireRecord
from xdnmb_wire.records.forum import CdnPath, Forum, ForumGroup, Timeline
from xdnmb_wire.records.thread import Reply, Thread

RECORD_TYPES: Final[dict[str, type[WireRecord]]] = {
    "forum-group": ForumGroup,
    "forum": Forum,
    "timeline": Timeline,
    "cdn-path": CdnPath,
    "thread": Thread,
    "reply": Reply,
}

LIST_ELEMENT_TYPES: Final[dict[str, type[WireRecord]]] = {
    "forum-list": ForumGroup,
    "thread-list": Thread,
    "timeline-list": Timeline,
    "cdn-paths": CdnPath,
}


def decode_forum_list(
    value: object, *, options: DecodeOptions | None = None
) -> tuple[ForumGroup, ...]:
    """Decode the ``getForumList`` response: an array of forum groups."""

    return _list_decoder(ForumGroup, options)(value)


def decode_thread_list(value: object, *, options: DecodeOptions | None = None) -> tuple[Thread, ...]:
    """Decode board, timeline and feed pages: an array of threads."""

    return _list_decoder(Thread, options)(value)


def decode_timeline_list(
    value: object, *, options: DecodeOptions | None = None
) -> tuple[Timeline, ...]:
    return _list_decoder(Timeline, options)(value)


def decode_cdn_path_list(
    value: object, *, options: DecodeOptions | None = None
) -> tuple[CdnPath, ...]:
    return _list_decoder(CdnPath, options)(value)


def decode(
    kind: str,
    value: object,
    *,
    options: DecodeOptions | None = None,
) -> WireRecord | tuple[WireRecord, ...]:
    """Decode ``value`` as the named record or listing kind."""

    record_type = RECORD_TYPES.get(kind)
    if record_type is not None:
        return record_type.from_wire(value, options=options)
    element_type = LIST_ELEMENT_TYPES.get(kind)
    if element_type is not None:
        return _list_decoder(element_type, options)(value)
    known = ", ".join(sorted((*RECORD_TYPES, *LIST_ELEMENT_TYPES)))
    raise ValueError(f"unknown record kind {kind!r}; expected one of: {known}")


def _list_decoder(
    record_type: type[WireRecord],
    options: DecodeOptions | None,
) -> Callable[[object], tuple[WireRecord, ...]]:
    def decode_one(item: object) -> WireRecord:
        return record_type.from_wire(item, options=options)

    decode_one.__name__ = record_type.__name__
    return decode_sequence(decode_one)


__all__ = [
    "LIST_ELEMENT_TYPES",
    "RECORD_TYPES",
    "decode",
    "decode_cdn_path_list",
    "decode_forum_list",
    "decode_thread_list",
    "decode_timeline_list",
]
