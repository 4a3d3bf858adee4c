"""Record mixin: decode from wire objects, re-encode, and canonical serialization."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from typing import TYPE_CHECKING, ClassVar, TypeVar, cast

from xdnmb_wire.decoding.errors import DecodeError, NotAnObject
from xdnmb_wire.decoding.fields import decode_fields, encode_fields

if TYPE_CHECKING:
    from xdnmb_wire.decoding.fields import DecodeOptions, FieldSpec

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TRecord = TypeVar("TRecord", bound="WireRecord")


class WireRecord:
    """Mixin for immutable records built from a single wire document."""

    _FIELDS: ClassVar[tuple[FieldSpec, ...]] = ()

    @classmethod
    def from_wire(
        cls: type[TRecord],
        data: object,
        *,
        options: DecodeOptions | None = None,
    ) -> TRecord:
        """Decode a parsed wire object into this record type."""

        values = decode_fields(cls.__name__, cls._FIELDS, data, options)
        return cls(**values)

    @classmethod
    def from_json(
        cls: type[TRecord],
        raw: str | bytes,
        *,
        options: DecodeOptions | None = None,
    ) -> TRecord:
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"{cls.__name__}: invalid JSON document: {exc}", raw=raw) from exc
        if not isinstance(parsed, dict):
            raise NotAnObject(cls.__name__, raw=parsed)
        return cls.from_wire(parsed, options=options)

    @classmethod
    def wire_keys(cls) -> frozenset[str]:
        """Every wire key (including aliases) this record declares."""

        return frozenset(key for spec in cls._FIELDS for key in spec.wire_keys)

    def to_wire(self) -> dict[str, object]:
        """Encode back to wire form using primary keys and canonical scalars."""

        return encode_fields(self._FIELDS, self)

    def to_dict(self) -> dict[str, JSONValue]:
        serialized = _serialize_value(self, self.__class__.__name__)
        if not isinstance(serialized, dict):
            raise TypeError(f"{self.__class__.__name__}: serialized record must be an object")
        return serialized

    def to_json(self) -> str:
        return canonical_json(self.to_dict())


def canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _serialize_value(value: object, path: str) -> JSONValue:
    if value is None or isinstance(value, bool):
        return cast("JSONValue", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeError(f"{path}: float values must be finite")
        return value
    if isinstance(value, str):
        return value
    if isinstance(value, (tuple, list)):
        return [_serialize_value(item, f"{path}[]") for item in value]
    if isinstance(value, Mapping):
        out: dict[str, JSONValue] = {}
        for key, item in value.items():
            out[str(key)] = _serialize_value(item, f"{path}.{key}")
        return out
    if is_dataclass(value):
        out_obj: dict[str, JSONValue] = {}
        for dataclass_field in fields(value):
            out_obj[dataclass_field.name] = _serialize_value(
                getattr(value, dataclass_field.name),
                f"{path}.{dataclass_field.name}",
            )
        return out_obj

    raise TypeError(f"{path}: cannot serialize value of type {type(value).__name__}")


__all__ = [
    "JSONScalar",
    "JSONValue",
    "WireRecord",
    "canonical_json",
]
