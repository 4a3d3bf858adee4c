"""Canonical forum records and the listing decoders built on them."""

from xdnmb_wire.records.base import WireRecord, canonical_json
from xdnmb_wire.records.forum import CdnPath, Forum, ForumGroup, Timeline
from xdnmb_wire.records.listings import (
    LIST_ELEMENT_TYPES,
    RECORD_TYPES,
    decode,
    decode_cdn_path_list,
    decode_forum_list,
    decode_thread_list,
    decode_timeline_list,
)
from xdnmb_wire.records.thread import Reply, Thread, parse_post_time

__all__ = [
    "CdnPath",
    "Forum",
    "ForumGroup",
    "LIST_ELEMENT_TYPES",
    "RECORD_TYPES",
    "Reply",
    "Thread",
    "Timeline",
    "WireRecord",
    "canonical_json",
    "decode",
    "decode_cdn_path_list",
    "decode_forum_list",
    "decode_thread_list",
    "decode_timeline_list",
    "parse_post_time",
]
