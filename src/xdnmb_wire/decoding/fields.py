"""Field-level schema wiring shared by every record type.

A record declares a tuple of ``FieldSpec`` entries: the canonical attribute
name, the accepted wire keys (primary alias first), whether the field is
required, and how its value decodes and re-encodes. ``decode_fields`` walks the
declarations in order:

- presence is checked before normalization, so a missing key is "absent"
  without calling any normalizer;
- every present field is normalized, and failures are wrapped in
  ``FieldDecodeFailure`` with the record type and wire key;
- only then are missing required keys reported, all at once.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, Literal, TypeVar

import structlog

from xdnmb_wire.constants import ALIAS_CONFLICT_POLICIES, ALIAS_ERROR, ALIAS_PREFER_PRIMARY
from xdnmb_wire.decoding.envelope import decode_envelope, decode_sequence
from xdnmb_wire.decoding.errors import (
    AliasConflict,
    DecodeError,
    EnvelopeDecodeFailure,
    FieldDecodeFailure,
    MissingRequiredField,
    NotAnObject,
    UnexpectedFields,
)
from xdnmb_wire.decoding.scalars import (
    boolean_to_wire,
    normalize_boolean,
    normalize_float,
    normalize_integer,
    normalize_text,
)

T = TypeVar("T")

FieldKind = Literal["integer", "boolean", "text", "float", "nested"]
ValueDecoder = Callable[[object, "DecodeOptions"], object]
ValueEncoder = Callable[[Any], object]

_logger = structlog.get_logger(__name__)

# Kinds for which an empty string on an optional field means "not present".
_EMPTY_IS_ABSENT: Final[frozenset[str]] = frozenset({"integer", "boolean", "float", "nested"})


@dataclass(frozen=True, slots=True)
class DecodeOptions:
    """Caller-selected decoding policies. Defaults are the strict, documented ones."""

    alias_conflict: str = ALIAS_PREFER_PRIMARY
    reject_unknown_fields: bool = False
    logger: Any | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.alias_conflict not in ALIAS_CONFLICT_POLICIES:
            allowed = ", ".join(ALIAS_CONFLICT_POLICIES)
            raise ValueError(
                f"invalid alias_conflict {self.alias_conflict!r}; expected one of: {allowed}"
            )

    @property
    def event_logger(self) -> Any:
        return self.logger if self.logger is not None else _logger


DEFAULT_OPTIONS: Final[DecodeOptions] = DecodeOptions()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declaration of one canonical field and the wire keys that feed it."""

    name: str
    wire_keys: tuple[str, ...]
    kind: FieldKind
    decode: ValueDecoder
    encode: ValueEncoder
    required: bool = False
    presence_flag: str | None = None

    def __post_init__(self) -> None:
        if not self.wire_keys:
            raise ValueError(f"field {self.name!r} must declare at least one wire key")

    @property
    def primary_key(self) -> str:
        return self.wire_keys[0]

    def read(self, raw: object, options: DecodeOptions) -> object:
        """Apply the absent-value policy, then the field decoder."""

        if not self.required:
            if raw is None:
                return None
            if raw == "" and self.kind in _EMPTY_IS_ABSENT:
                return None
        return self.decode(raw, options)


def integer_field(name: str, *wire_keys: str, required: bool = False) -> FieldSpec:
    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="integer",
        decode=_scalar(normalize_integer),
        encode=_identity,
        required=required,
    )


def boolean_field(name: str, *wire_keys: str, required: bool = False) -> FieldSpec:
    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="boolean",
        decode=_scalar(normalize_boolean),
        encode=boolean_to_wire,
        required=required,
    )


def text_field(name: str, *wire_keys: str, required: bool = False) -> FieldSpec:
    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="text",
        decode=_scalar(normalize_text),
        encode=_identity,
        required=required,
    )


def float_field(name: str, *wire_keys: str, required: bool = False) -> FieldSpec:
    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="float",
        decode=_scalar(normalize_float),
        encode=_identity,
        required=required,
    )


def presence_field(name: str, *wire_keys: str, flag: str) -> FieldSpec:
    """Optional integer whose key presence alone is recorded in ``flag``."""

    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="integer",
        decode=_scalar(normalize_integer),
        encode=_identity,
        presence_flag=flag,
    )


def integer_sequence_field(name: str, *wire_keys: str) -> FieldSpec:
    """Optional array of integers that may arrive string-wrapped."""

    item_decoder = decode_sequence(normalize_integer)

    def decode(raw: object, options: DecodeOptions) -> object:
        return decode_envelope(raw, item_decoder, field_name=wire_keys[0])

    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="nested",
        decode=decode,
        encode=list,
    )


def record_sequence_field(
    name: str,
    *wire_keys: str,
    record: Callable[..., T],
    required: bool = False,
    envelope: bool = True,
) -> FieldSpec:
    """Array of nested records; ``record`` is a ``from_wire``-style callable."""

    def decode(raw: object, options: DecodeOptions) -> object:
        def decode_one(item: object) -> T:
            return record(item, options=options)

        decode_one.__name__ = getattr(record, "__qualname__", "record")
        sequence = decode_sequence(decode_one)
        if envelope:
            return decode_envelope(raw, sequence, field_name=wire_keys[0])
        return sequence(raw)

    return FieldSpec(
        name=name,
        wire_keys=wire_keys,
        kind="nested",
        decode=decode,
        encode=_encode_records,
        required=required,
    )


def decode_fields(
    record_type: str,
    specs: Sequence[FieldSpec],
    data: object,
    options: DecodeOptions | None = None,
) -> dict[str, object]:
    """Decode ``data`` against ``specs`` and return constructor keyword arguments."""

    resolved = options if options is not None else DEFAULT_OPTIONS
    if not isinstance(data, Mapping):
        raise NotAnObject(record_type, raw=data)

    values: dict[str, object] = {}
    missing: list[str] = []
    for spec in specs:
        present = [key for key in spec.wire_keys if key in data]
        if spec.presence_flag is not None:
            values[spec.presence_flag] = bool(present)
        if not present:
            if spec.required:
                missing.append(spec.primary_key)
            values[spec.name] = None
            continue

        wire_key = present[0]
        raw = data[wire_key]
        try:
            decoded = spec.read(raw, resolved)
        except DecodeError as exc:
            # The record failure already names the wire key.
            error = exc.cause if isinstance(exc, EnvelopeDecodeFailure) else exc
            raise FieldDecodeFailure(
                record_type=record_type,
                field_name=spec.name,
                wire_key=wire_key,
                error=error,
            ) from exc
        if len(present) > 1:
            _check_aliases(record_type, spec, present, decoded, data, resolved)
        values[spec.name] = decoded

    if missing:
        raise MissingRequiredField(record_type=record_type, wire_keys=missing)

    declared = {key for spec in specs for key in spec.wire_keys}
    unknown = sorted(str(key) for key in data if key not in declared)
    if unknown:
        if resolved.reject_unknown_fields:
            raise UnexpectedFields(record_type=record_type, wire_keys=unknown)
        resolved.event_logger.debug(
            "wire_unknown_fields",
            record_type=record_type,
            keys=unknown,
        )
    return values


def encode_fields(specs: Sequence[FieldSpec], record: object) -> dict[str, object]:
    """Inverse of ``decode_fields``: primary keys only, absent fields omitted."""

    out: dict[str, object] = {}
    for spec in specs:
        value = getattr(record, spec.name)
        if value is None:
            if spec.presence_flag is not None and getattr(record, spec.presence_flag):
                out[spec.primary_key] = ""
            continue
        out[spec.primary_key] = spec.encode(value)
    return out


def _check_aliases(
    record_type: str,
    spec: FieldSpec,
    present: Sequence[str],
    decoded: object,
    data: Mapping[str, object],
    options: DecodeOptions,
) -> None:
    conflicting: list[str] = []
    for alias in present[1:]:
        try:
            other = spec.read(data[alias], options)
        except DecodeError:
            conflicting.append(alias)
            continue
        if other != decoded:
            conflicting.append(alias)
    if not conflicting:
        return

    keys = [present[0], *conflicting]
    if options.alias_conflict == ALIAS_ERROR:
        raise AliasConflict(
            record_type=record_type,
            field_name=spec.name,
            wire_keys=keys,
            raw={key: data[key] for key in keys},
        )
    options.event_logger.warning(
        "wire_alias_conflict",
        record_type=record_type,
        field=spec.name,
        kept=present[0],
        ignored=conflicting,
    )


def _scalar(normalizer: Callable[[object], object]) -> ValueDecoder:
    def decode(raw: object, options: DecodeOptions) -> object:
        return normalizer(raw)

    decode.__name__ = normalizer.__name__
    return decode


def _identity(value: object) -> object:
    return value


def _encode_records(records: Sequence[Any]) -> list[object]:
    return [item.to_wire() for item in records]


__all__ = [
    "DEFAULT_OPTIONS",
    "DecodeOptions",
    "FieldKind",
    "FieldSpec",
    "boolean_field",
    "decode_fields",
    "encode_fields",
    "float_field",
    "integer_field",
    "integer_sequence_field",
    "presence_field",
    "record_sequence_field",
    "text_field",
]
