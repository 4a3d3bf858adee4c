"""Forum-level records: forum groups, forums, timelines and CDN paths."""

from __future__ import annotations

from dataclasses import dataclass

from xdnmb_wire.decoding.fields import (
    boolean_field,
    float_field,
    integer_field,
    record_sequence_field,
    text_field,
)
from xdnmb_wire.records.base import WireRecord


@dataclass(frozen=True, slots=True)
class Forum(WireRecord):
    """A single board. ``msg`` is the board notice as HTML."""

    id: int
    name: str
    msg: str
    show_name: str | None = None
    fgroup: int | None = None
    sort: int | None = None
    status: str | None = None
    thread_count: int | None = None
    interval: int | None = None
    forum_fuse_id: int | None = None
    auto_delete: bool | None = None
    permission_level: int | None = None
    safe_mode: bool | None = None
    created_at: str | None = None
    update_at: str | None = None

    _FIELDS = (
        integer_field("id", "id", required=True),
        text_field("name", "name", required=True),
        text_field("msg", "msg", required=True),
        text_field("show_name", "showName"),
        integer_field("fgroup", "fgroup"),
        integer_field("sort", "sort"),
        text_field("status", "status"),
        integer_field("thread_count", "thread_count"),
        integer_field("interval", "interval"),
        integer_field("forum_fuse_id", "forum_fuse_id"),
        boolean_field("auto_delete", "auto_delete"),
        integer_field("permission_level", "permission_level"),
        boolean_field("safe_mode", "safe_mode"),
        text_field("created_at", "createdAt"),
        text_field("update_at", "updateAt"),
    )

    @property
    def display_name(self) -> str:
        return self.show_name or self.name


@dataclass(frozen=True, slots=True)
class ForumGroup(WireRecord):
    """A named group owning an ordered list of forums."""

    id: int
    name: str
    sort: int
    status: str
    forums: tuple[Forum, ...]

    _FIELDS = (
        integer_field("id", "id", required=True),
        text_field("name", "name", required=True),
        integer_field("sort", "sort", required=True),
        text_field("status", "status", required=True),
        record_sequence_field(
            "forums", "forums", record=Forum.from_wire, required=True, envelope=False
        ),
    )

    def forum_by_id(self, forum_id: int) -> Forum | None:
        for forum in self.forums:
            if forum.id == forum_id:
                return forum
        return None


@dataclass(frozen=True, slots=True)
class Timeline(WireRecord):
    id: int
    name: str
    display_name: str | None = None
    notice: str | None = None
    max_page: int | None = None

    _FIELDS = (
        integer_field("id", "id", required=True),
        text_field("name", "name", required=True),
        text_field("display_name", "display_name"),
        text_field("notice", "notice"),
        integer_field("max_page", "max_page"),
    )


@dataclass(frozen=True, slots=True)
class CdnPath(WireRecord):
    """Image CDN base URL with its load-balancing weight."""

    url: str
    rate: float

    _FIELDS = (
        text_field("url", "url", required=True),
        float_field("rate", "rate", required=True),
    )


__all__ = ["CdnPath", "Forum", "ForumGroup", "Timeline"]
