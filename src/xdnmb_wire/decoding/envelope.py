"""Envelope decoder for nested payloads that may arrive string-wrapped.

Subscription and aggregation listings serialize some structured fields as a
JSON string (``"[101,102]"``) where direct retrieval returns the native
structure (``[101, 102]``). ``decode_envelope`` accepts both, plus ``null`` and
``""`` as "no payload", and hands the structure to a caller-supplied inner
decoder. It knows nothing about the payload's shape.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TypeVar

import structlog

from xdnmb_wire.decoding.errors import (
    DecodeError,
    EnvelopeDecodeFailure,
    EnvelopeParseFailure,
    ItemDecodeFailure,
    UnsupportedShape,
    json_kind,
    preview_raw,
)

T = TypeVar("T")
Decoder = Callable[[object], T]

_logger = structlog.get_logger(__name__)


def decode_envelope(
    value: object,
    inner: Callable[[object], T],
    *,
    field_name: str | None = None,
) -> T | None:
    """Decode a possibly string-wrapped payload; ``None`` means no payload.

    With ``field_name`` set, parse failures and inner-decoder failures both
    name the field: ``EnvelopeParseFailure`` and ``EnvelopeDecodeFailure``.
    """

    if value is None:
        return None
    if isinstance(value, str):
        if value == "":
            return None
        parsed = _parse_wrapped(value, field_name)
        if parsed is None:
            return None
        _logger.debug(
            "wire_envelope_unwrapped",
            field=field_name,
            payload_kind=json_kind(parsed),
            text_length=len(value),
        )
        return _run_inner(inner, parsed, field_name)
    return _run_inner(inner, value, field_name)


def enveloped(inner: Callable[[object], T]) -> Callable[[object], T | None]:
    """Wrap ``inner`` so it also accepts the string-wrapped and empty encodings."""

    def decode(value: object) -> T | None:
        return decode_envelope(value, inner)

    decode.__name__ = f"enveloped_{getattr(inner, '__name__', 'decoder')}"
    decode.__qualname__ = decode.__name__
    return decode


def decode_sequence(item: Callable[[object], T]) -> Callable[[object], tuple[T, ...]]:
    """Build a decoder for a JSON array whose elements all decode with ``item``."""

    def decode(value: object) -> tuple[T, ...]:
        if not isinstance(value, (list, tuple)):
            raise UnsupportedShape(f"expected array, got {json_kind(value)}", raw=value)
        decoded: list[T] = []
        for index, element in enumerate(value):
            try:
                decoded.append(item(element))
            except DecodeError as exc:
                raise ItemDecodeFailure(index=index, error=exc) from exc
        return tuple(decoded)

    decode.__name__ = f"sequence_of_{getattr(item, '__name__', 'item')}"
    decode.__qualname__ = decode.__name__
    return decode


def _run_inner(inner: Callable[[object], T], payload: object, field_name: str | None) -> T:
    if field_name is None:
        return inner(payload)
    try:
        return inner(payload)
    except DecodeError as exc:
        raise EnvelopeDecodeFailure(field_name=field_name, error=exc) from exc


def _parse_wrapped(text: str, field_name: str | None) -> object:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        label = f"{field_name}: " if field_name else ""
        raise EnvelopeParseFailure(
            f"{label}string-wrapped payload {preview_raw(text)} is not valid JSON ({exc})",
            raw=text,
            field_name=field_name,
        ) from exc


def _reject_constant(name: str) -> object:
    raise ValueError(f"non-standard JSON constant {name}")


__all__ = [
    "Decoder",
    "decode_envelope",
    "decode_sequence",
    "enveloped",
]
