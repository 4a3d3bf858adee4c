"""Thread and reply records.

Threads and replies share most of their wire fields, and one API variant even
returns replies in the thread shape. They stay separate classes so a future
shape change on one side cannot silently merge them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Final

from xdnmb_wire.decoding.fields import (
    FieldSpec,
    boolean_field,
    integer_field,
    integer_sequence_field,
    presence_field,
    record_sequence_field,
    text_field,
)
from xdnmb_wire.records.base import WireRecord

# "2025-07-31(四)13:49:32": the parenthesized weekday is locale text and ignored.
_POST_TIME: Final[re.Pattern[str]] = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})\([^)]*\)(\d{2}):(\d{2}):(\d{2})"
)


def parse_post_time(text: str) -> datetime:
    """Parse the forum's ``now`` timestamp into a naive local ``datetime``."""

    match = _POST_TIME.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"unrecognized post time {text!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups())
    return datetime(year, month, day, hour, minute, second)


def _post_fields() -> tuple[FieldSpec, ...]:
    return (
        integer_field("id", "id", required=True),
        integer_field("fid", "fid"),
        integer_field("reply_count", "ReplyCount", "reply_count"),
        text_field("img", "img"),
        text_field("ext", "ext"),
        text_field("now", "now"),
        text_field("user_hash", "user_hash", "userid"),
        text_field("name", "name"),
        text_field("email", "email"),
        text_field("title", "title"),
        text_field("content", "content"),
        boolean_field("sage", "sage"),
        boolean_field("admin", "admin"),
        boolean_field("hide", "Hide", "hide"),
    )


@dataclass(frozen=True, slots=True)
class Reply(WireRecord):
    """A single reply inside a thread, or a post fetched by reference."""

    id: int
    fid: int | None = None
    reply_count: int | None = None
    img: str | None = None
    ext: str | None = None
    now: str | None = None
    user_hash: str | None = None
    name: str | None = None
    email: str | None = None
    title: str | None = None
    content: str | None = None
    sage: bool | None = None
    admin: bool | None = None
    hide: bool | None = None

    _FIELDS = _post_fields()

    def posted_at(self) -> datetime | None:
        if self.now is None:
            return None
        return parse_post_time(self.now)


@dataclass(frozen=True, slots=True)
class Thread(WireRecord):
    """A thread head with its (possibly partial) replies.

    ``is_brief`` is set whenever the wire object carried ``RemainReplies``,
    whatever its value: board listings send only the latest few replies and
    that key marks the reply list as incomplete.
    """

    id: int
    fid: int | None = None
    reply_count: int | None = None
    img: str | None = None
    ext: str | None = None
    now: str | None = None
    user_hash: str | None = None
    name: str | None = None
    email: str | None = None
    title: str | None = None
    content: str | None = None
    sage: bool | None = None
    admin: bool | None = None
    hide: bool | None = None
    replies: tuple[Reply, ...] | None = None
    remain_replies: int | None = None
    is_brief: bool = False
    recent_replies: tuple[int, ...] | None = None
    category: str | None = None
    file_id: int | None = None
    po: str | None = None
    user_id: int | None = None
    status: str | None = None

    _FIELDS = (
        *_post_fields(),
        record_sequence_field("replies", "Replies", "replys", record=Reply.from_wire),
        presence_field("remain_replies", "RemainReplies", flag="is_brief"),
        integer_sequence_field("recent_replies", "recent_replies"),
        text_field("category", "category"),
        integer_field("file_id", "file_id"),
        text_field("po", "po"),
        integer_field("user_id", "user_id"),
        text_field("status", "status"),
    )

    def posted_at(self) -> datetime | None:
        if self.now is None:
            return None
        return parse_post_time(self.now)

    def reply_ids(self) -> tuple[int, ...]:
        """Ids of the replies carried inline, falling back to ``recent_replies``."""

        if self.replies is not None:
            return tuple(reply.id for reply in self.replies)
        return self.recent_replies or ()


__all__ = ["Reply", "Thread", "parse_post_time"]
