"""Stable constants shared by the decoding layer and its callers."""

from __future__ import annotations

from typing import Final

# Signed 64-bit bounds for IntegerScalar values.
INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1

# Schema version for the persisted config contract.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Record kinds accepted by ``records.listings.decode``.
RECORD_KINDS: Final[tuple[str, ...]] = (
    "forum-group",
    "forum",
    "timeline",
    "cdn-path",
    "thread",
    "reply",
)
LIST_KINDS: Final[tuple[str, ...]] = (
    "forum-list",
    "thread-list",
    "timeline-list",
    "cdn-paths",
)

# Alias conflict policies.
ALIAS_PREFER_PRIMARY: Final[str] = "prefer_primary"
ALIAS_ERROR: Final[str] = "error"
ALIAS_CONFLICT_POLICIES: Final[tuple[str, ...]] = (ALIAS_PREFER_PRIMARY, ALIAS_ERROR)

__all__ = [
    "ALIAS_CONFLICT_POLICIES",
    "ALIAS_ERROR",
    "ALIAS_PREFER_PRIMARY",
    "CONFIG_SCHEMA_VERSION",
    "INT64_MAX",
    "INT64_MIN",
    "LIST_KINDS",
    "RECORD_KINDS",
]
