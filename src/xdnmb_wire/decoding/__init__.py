"""Lenient decoding layer: scalar normalizer, envelope decoder and field wiring.

Everything in this package is pure. It consumes already-parsed JSON values and
either returns canonical values or raises a ``DecodeError`` subclass.
"""

from xdnmb_wire.decoding.envelope import decode_envelope, decode_sequence, enveloped
from xdnmb_wire.decoding.errors import (
    AliasConflict,
    BooleanOutOfRange,
    DecodeError,
    EnvelopeDecodeFailure,
    EnvelopeParseFailure,
    FieldDecodeFailure,
    ItemDecodeFailure,
    MissingRequiredField,
    NotABoolean,
    NotAnInteger,
    NotAnObject,
    NumberOutOfRange,
    UnexpectedFields,
    UnsupportedShape,
)
from xdnmb_wire.decoding.fields import DEFAULT_OPTIONS, DecodeOptions, FieldSpec, decode_fields
from xdnmb_wire.decoding.scalars import (
    boolean_to_wire,
    normalize_boolean,
    normalize_float,
    normalize_integer,
    normalize_text,
)

__all__ = [
    "AliasConflict",
    "BooleanOutOfRange",
    "DEFAULT_OPTIONS",
    "DecodeError",
    "DecodeOptions",
    "EnvelopeDecodeFailure",
    "EnvelopeParseFailure",
    "FieldDecodeFailure",
    "FieldSpec",
    "ItemDecodeFailure",
    "MissingRequiredField",
    "NotABoolean",
    "NotAnInteger",
    "NotAnObject",
    "NumberOutOfRange",
    "UnexpectedFields",
    "UnsupportedShape",
    "boolean_to_wire",
    "decode_envelope",
    "decode_fields",
    "decode_sequence",
    "enveloped",
    "normalize_boolean",
    "normalize_float",
    "normalize_integer",
    "normalize_text",
]
