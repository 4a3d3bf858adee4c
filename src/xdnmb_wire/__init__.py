"""
xdnmb-wire: lenient decoding of the X-Island forum JSON API.

The forum backend encodes the same logical value several ways: integers as
numbers or numeric strings, booleans as 0/1 in either form, and nested arrays
either natively or as string-wrapped JSON text. This package turns those wire
documents into immutable canonical records and raises typed ``DecodeError``
subclasses for anything it cannot read.

Importing the package has no side effects: no config loading and no logging
initialization.
"""

from xdnmb_wire.decoding.errors import DecodeError
from xdnmb_wire.decoding.fields import DecodeOptions
from xdnmb_wire.records import (
    CdnPath,
    Forum,
    ForumGroup,
    Reply,
    Thread,
    Timeline,
    decode,
)

__version__ = "0.1.0"

__all__ = [
    "CdnPath",
    "DecodeError",
    "DecodeOptions",
    "Forum",
    "ForumGroup",
    "Reply",
    "Thread",
    "Timeline",
    "__version__",
    "decode",
]
