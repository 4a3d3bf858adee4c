"""Scalar normalizer: wire JSON values to canonical integers and booleans.

The upstream API encodes the same flag or counter as a JSON number, a JSON
boolean, a numeric string or an empty string depending on the endpoint and
API version. Each normalizer is an explicit match over the JSON kind; every
kind it does not handle is a reported failure.

Named policy: the empty string means "unset", so it normalizes to ``0`` for
integers and ``False`` for booleans. That is the only value the normalizers
accept without a direct numeric or boolean reading.
"""

from __future__ import annotations

import math
import re
from typing import Final

from xdnmb_wire.constants import INT64_MAX, INT64_MIN
from xdnmb_wire.decoding.errors import (
    BooleanOutOfRange,
    NotABoolean,
    NotAnInteger,
    NumberOutOfRange,
    UnsupportedShape,
    json_kind,
    preview_raw,
)

_INTEGER_TEXT: Final[re.Pattern[str]] = re.compile(r"[+-]?0*(?P<digits>[0-9]+)", re.ASCII)

# INT64_MAX has 19 digits; more significant digits than that is out of range.
_INT64_DIGITS: Final[int] = 19


def normalize_integer(value: object) -> int:
    """Decode a wire value into a signed 64-bit integer."""

    if isinstance(value, bool):
        raise UnsupportedShape(f"expected integer, got boolean {preview_raw(value)}", raw=value)
    if isinstance(value, int):
        return _checked_int64(value, raw=value)
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise NumberOutOfRange(f"number {preview_raw(value)} is not an integer", raw=value)
        return _checked_int64(int(value), raw=value)
    if isinstance(value, str):
        if value == "":
            return 0
        match = _INTEGER_TEXT.fullmatch(value)
        if match is None:
            raise NotAnInteger(f"string {preview_raw(value)} is not a base-10 integer", raw=value)
        if len(match["digits"]) > _INT64_DIGITS:
            raise NumberOutOfRange(
                f"integer {preview_raw(value)} is outside signed 64-bit range", raw=value
            )
        return _checked_int64(_parse_digits(match), raw=value)
    raise UnsupportedShape(f"expected integer, got {json_kind(value)}", raw=value)


def normalize_boolean(value: object) -> bool:
    """Decode a wire value into a boolean flag; only 0/1 encodings are accepted."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return _boolean_from_int(value, raw=value)
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise UnsupportedShape(
                f"number {preview_raw(value)} cannot encode a boolean", raw=value
            )
        return _boolean_from_int(int(value), raw=value)
    if isinstance(value, str):
        if value == "":
            return False
        match = _INTEGER_TEXT.fullmatch(value)
        if match is None:
            raise NotABoolean(f"string {preview_raw(value)} is not a 0/1 flag", raw=value)
        if len(match["digits"]) > _INT64_DIGITS:
            raise BooleanOutOfRange(
                f"integer {preview_raw(value)} is not a boolean (expected 0 or 1)", raw=value
            )
        return _boolean_from_int(_parse_digits(match), raw=value)
    raise UnsupportedShape(f"expected boolean, got {json_kind(value)}", raw=value)


def normalize_text(value: object) -> str:
    """Accept JSON strings only; the empty string is kept as present-but-empty."""

    if isinstance(value, str):
        return value
    raise UnsupportedShape(f"expected string, got {json_kind(value)}", raw=value)


def normalize_float(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UnsupportedShape(f"expected number, got {json_kind(value)}", raw=value)
    parsed = float(value)
    if not math.isfinite(parsed):
        raise NumberOutOfRange(f"number {preview_raw(value)} must be finite", raw=value)
    return parsed


def boolean_to_wire(value: bool) -> int:
    """Canonical wire encoding of a boolean flag (``1``/``0``)."""

    return 1 if value else 0


def _parse_digits(match: re.Match[str]) -> int:
    magnitude = int(match["digits"])
    return -magnitude if match.string.startswith("-") else magnitude


def _checked_int64(parsed: int, *, raw: object) -> int:
    if parsed < INT64_MIN or parsed > INT64_MAX:
        raise NumberOutOfRange(
            f"integer {preview_raw(raw)} is outside signed 64-bit range", raw=raw
        )
    return parsed


def _boolean_from_int(parsed: int, *, raw: object) -> bool:
    if parsed == 0:
        return False
    if parsed == 1:
        return True
    raise BooleanOutOfRange(
        f"integer {preview_raw(raw)} is not a boolean (expected 0 or 1)", raw=raw
    )


__all__ = [
    "boolean_to_wire",
    "normalize_boolean",
    "normalize_float",
    "normalize_integer",
    "normalize_text",
]
