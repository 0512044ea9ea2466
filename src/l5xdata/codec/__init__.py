"""l5xdata codec: textual radix encodings of atomic values.

Public API::

    from l5xdata.codec import Radix, format_value, parse_value

    text = format_value(10, Radix.HEX, AtomicKind.SINT)      # "16#0A"
    value = parse_value("2#0000_1010", Radix.BINARY, AtomicKind.SINT)  # 10
"""

from l5xdata.model.errors import RadixFormatError, RadixUnsupportedError
from l5xdata.model.types import AtomicKind, Radix, default_radix, supported_radixes

from ._radix import (
    ascii_bytes,
    ascii_text,
    format_value,
    infer_radix,
    parse_value,
    supports_radix,
    validate_radix,
)

__all__ = [
    "AtomicKind",
    "Radix",
    "RadixFormatError",
    "RadixUnsupportedError",
    "ascii_bytes",
    "ascii_text",
    "default_radix",
    "format_value",
    "infer_radix",
    "parse_value",
    "supported_radixes",
    "supports_radix",
    "validate_radix",
]
