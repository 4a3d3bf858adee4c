"""Typed decode failures surfaced by the lenient decoding layer.

Every failure is raised to the caller; nothing in the decoding layer converts a
malformed value into a default. Each error keeps the offending wire value in
``raw`` so an upstream schema change can be diagnosed from the exception alone.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

_RAW_PREVIEW_LIMIT = 120


def json_kind(value: object) -> str:
    """Return the JSON kind name of an already-parsed wire value."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def preview_raw(value: object) -> str:
    """Render a bounded, deterministic preview of a wire value for messages."""

    try:
        rendered = json.dumps(value, sort_keys=True, ensure_ascii=False, allow_nan=True)
    except (TypeError, ValueError):
        rendered = repr(value)
    if len(rendered) > _RAW_PREVIEW_LIMIT:
        return rendered[: _RAW_PREVIEW_LIMIT - 3] + "..."
    return rendered


class DecodeError(ValueError):
    """Base class for every decoding failure."""

    kind = "decode_error"

    def __init__(self, message: str, *, raw: object = None) -> None:
        self.message = message
        self.raw = raw
        super().__init__(message)

    @property
    def cause(self) -> DecodeError | None:
        return None

    @property
    def root_cause(self) -> DecodeError:
        """Innermost decode failure, following wrapped causes."""

        current: DecodeError = self
        while current.cause is not None:
            current = current.cause
        return current


class UnsupportedShape(DecodeError):
    """The wire value's JSON kind cannot represent the target scalar."""

    kind = "unsupported_shape"


class NotAnInteger(DecodeError):
    """A string failed base-10 integer parsing."""

    kind = "not_an_integer"


class NumberOutOfRange(DecodeError):
    """A number carried a fractional part or fell outside signed 64-bit range."""

    kind = "number_out_of_range"


class NotABoolean(DecodeError):
    """A string could not be read as a 0/1 boolean flag."""

    kind = "not_a_boolean"


class BooleanOutOfRange(DecodeError):
    """An integer boolean encoding other than 0 or 1."""

    kind = "boolean_out_of_range"


class EnvelopeParseFailure(DecodeError):
    """A string-wrapped nested payload was not valid JSON text."""

    kind = "envelope_parse_failure"

    def __init__(self, message: str, *, raw: object = None, field_name: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(message, raw=raw)


class EnvelopeDecodeFailure(DecodeError):
    """The inner decoder rejected a named envelope field's payload."""

    kind = "envelope_decode_failure"

    def __init__(self, *, field_name: str, error: DecodeError) -> None:
        self.field_name = field_name
        self._cause = error
        super().__init__(f"{field_name}: {error.message}", raw=error.raw)

    @property
    def cause(self) -> DecodeError:
        return self._cause


class NotAnObject(DecodeError):
    """A record decoder received something other than a JSON object."""

    kind = "not_an_object"

    def __init__(self, record_type: str, *, raw: object = None) -> None:
        self.record_type = record_type
        super().__init__(
            f"{record_type}: expected object, got {json_kind(raw)}",
            raw=raw,
        )


class FieldDecodeFailure(DecodeError):
    """Wraps a field-level failure with its record type and field name."""

    kind = "field_decode_failure"

    def __init__(
        self,
        *,
        record_type: str,
        field_name: str,
        wire_key: str,
        error: DecodeError,
    ) -> None:
        self.record_type = record_type
        self.field_name = field_name
        self.wire_key = wire_key
        self._cause = error
        super().__init__(f"{record_type}.{wire_key}: {error.message}", raw=error.raw)

    @property
    def cause(self) -> DecodeError:
        return self._cause


class ItemDecodeFailure(DecodeError):
    """Wraps a failure decoding one element of a wire array."""

    kind = "item_decode_failure"

    def __init__(self, *, index: int, error: DecodeError) -> None:
        self.index = index
        self._cause = error
        super().__init__(f"[{index}]: {error.message}", raw=error.raw)

    @property
    def cause(self) -> DecodeError:
        return self._cause


class MissingRequiredField(DecodeError):
    """One or more required wire keys were absent from the object."""

    kind = "missing_required_field"

    def __init__(self, *, record_type: str, wire_keys: Sequence[str]) -> None:
        self.record_type = record_type
        self.wire_keys = tuple(wire_keys)
        super().__init__(f"{record_type}: missing required fields: {list(self.wire_keys)}")


class AliasConflict(DecodeError):
    """Two aliases of the same field carried different values."""

    kind = "alias_conflict"

    def __init__(
        self,
        *,
        record_type: str,
        field_name: str,
        wire_keys: Sequence[str],
        raw: object = None,
    ) -> None:
        self.record_type = record_type
        self.field_name = field_name
        self.wire_keys = tuple(wire_keys)
        super().__init__(
            f"{record_type}.{field_name}: conflicting values for aliases {list(self.wire_keys)}",
            raw=raw,
        )


class UnexpectedFields(DecodeError):
    """The object carried keys no field declares (strict mode only)."""

    kind = "unexpected_fields"

    def __init__(self, *, record_type: str, wire_keys: Sequence[str]) -> None:
        self.record_type = record_type
        self.wire_keys = tuple(sorted(wire_keys))
        super().__init__(f"{record_type}: unexpected fields: {list(self.wire_keys)}")


__all__ = [
    "AliasConflict",
    "BooleanOutOfRange",
    "DecodeError",
    "EnvelopeDecodeFailure",
    "EnvelopeParseFailure",
    "FieldDecodeFailure",
    "ItemDecodeFailure",
    "MissingRequiredField",
    "NotABoolean",
    "NotAnInteger",
    "NotAnObject",
    "NumberOutOfRange",
    "UnexpectedFields",
    "UnsupportedShape",
    "json_kind",
    "preview_raw",
]
