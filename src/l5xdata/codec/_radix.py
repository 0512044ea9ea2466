"""Radix codec: atomic values <-> their textual encodings.

Every radix has one canonical text form per kind, and ``format_value`` /
``parse_value`` are inverses for each supported (radix, kind) pair:

- Decimal: ``-42``; BOOL is ``0``/``1``
- Binary / Octal / Hex: ``2#0000_1010``, ``8#000_016``, ``16#0000_000A``.
  Two's-complement bit pattern, most significant digits first, zero padded
  to the kind's byte width (8, 3 and 2 digits per byte), grouped with ``_``
- ASCII: ``'$00$00$00A'``, one unit per byte, most significant first
- Float: shortest text that round-trips the kind's precision, always with
  a decimal point
- Exponential: ``1.50000000e+003``
- Date/Time, Date/Time (ns): see ``_time``
"""

from __future__ import annotations

import math
import re
from typing import Callable

from l5xdata.model.errors import RadixFormatError
from l5xdata.model.types import (
    AtomicKind,
    Radix,
    check_radix,
    default_radix,
    supported_radixes,
)
from l5xdata.model.values import normalize_value

from ._time import (
    format_date_time,
    format_date_time_ns,
    parse_date_time,
    parse_date_time_ns,
)


# ---------------------------------------------------------------------------
# Based integers (Binary, Octal, Hex)
# ---------------------------------------------------------------------------

# radix -> (prefix, base, digits per byte, group size)
_BASED: dict[Radix, tuple[str, int, int, int]] = {
    Radix.BINARY: ("2#", 2, 8, 4),
    Radix.OCTAL: ("8#", 8, 3, 3),
    Radix.HEX: ("16#", 16, 2, 4),
}

_DIGITS = {
    2: re.compile(r"^[01]+$"),
    8: re.compile(r"^[0-7]+$"),
    16: re.compile(r"^[0-9A-Fa-f]+$"),
}


def _group(digits: str, size: int) -> str:
    """Separate *digits* into groups of *size*, counted from the right."""
    head = len(digits) % size
    groups = [digits[:head]] if head else []
    groups.extend(digits[i:i + size] for i in range(head, len(digits), size))
    return "_".join(groups)


def _format_based(value: int | bool, kind: AtomicKind, radix: Radix) -> str:
    prefix, base, per_byte, group = _BASED[radix]
    if kind is AtomicKind.BOOL:
        return f"{prefix}{int(value)}"
    raw = kind.to_raw(value)
    code = {2: "b", 8: "o", 16: "X"}[base]
    digits = format(raw, code).zfill(kind.width * per_byte)
    return f"{prefix}{_group(digits, group)}"


def _parse_based(text: str, kind: AtomicKind, radix: Radix) -> int | bool:
    prefix, base, _, _ = _BASED[radix]
    if not text.upper().startswith(prefix.upper()):
        raise RadixFormatError(text, radix.value, f"{text!r} does not start with {prefix!r}")
    digits = text[len(prefix):].replace("_", "")
    if not _DIGITS[base].match(digits):
        raise RadixFormatError(text, radix.value)
    raw = int(digits, base)
    if raw >> kind.bits:
        raise RadixFormatError(
            text, radix.value, f"{text!r} does not fit in {kind.value}"
        )
    return kind.from_raw(raw)


# ---------------------------------------------------------------------------
# Decimal
# ---------------------------------------------------------------------------

_DECIMAL_RE = re.compile(r"^[+-]?\d+$")


def _format_decimal(value: int | bool, kind: AtomicKind) -> str:
    if kind is AtomicKind.BOOL:
        return "1" if value else "0"
    return str(value)


def _parse_decimal(text: str, kind: AtomicKind) -> int | bool:
    if not _DECIMAL_RE.match(text):
        raise RadixFormatError(text, Radix.DECIMAL.value)
    number = int(text)
    if kind is AtomicKind.BOOL:
        if number not in (0, 1):
            raise RadixFormatError(text, Radix.DECIMAL.value, f"{text!r} is not a BOOL value")
        return bool(number)
    if not kind.min_value <= number <= kind.max_value:
        raise RadixFormatError(
            text, Radix.DECIMAL.value, f"{text!r} is out of range for {kind.value}"
        )
    return number


# ---------------------------------------------------------------------------
# ASCII
# ---------------------------------------------------------------------------

_ASCII_TOKEN = re.compile(r"\$[0-9A-Fa-f]{2}|\$[tlnprTLNPR'$]|[^$]")

_ASCII_ESCAPES = {
    "t": 0x09,
    "l": 0x0A,
    "n": 0x0A,
    "p": 0x0C,
    "r": 0x0D,
    "$": 0x24,
    "'": 0x27,
}


def ascii_text(data: bytes) -> str:
    """Canonical quoted ASCII text for a byte sequence."""
    parts: list[str] = []
    for byte in data:
        if byte == 0x24:
            parts.append("$$")
        elif byte == 0x27:
            parts.append("$'")
        elif 0x20 <= byte < 0x7F:
            parts.append(chr(byte))
        else:
            parts.append(f"${byte:02X}")
    return "'" + "".join(parts) + "'"


def ascii_bytes(text: str) -> bytes:
    """Inverse of ``ascii_text``; also accepts the ``$t $l $n $p $r`` escapes."""
    if len(text) < 2 or not (text.startswith("'") and text.endswith("'")):
        raise RadixFormatError(text, Radix.ASCII.value, f"{text!r} is not a quoted ASCII literal")
    body = text[1:-1]
    data = bytearray()
    position = 0
    for match in _ASCII_TOKEN.finditer(body):
        if match.start() != position:
            break
        token = match.group()
        position = match.end()
        if len(token) == 3:
            data.append(int(token[1:], 16))
        elif len(token) == 2:
            data.append(_ASCII_ESCAPES[token[1].lower()])
        else:
            code = ord(token)
            if code > 0x7F:
                raise RadixFormatError(text, Radix.ASCII.value, f"{token!r} is not an ASCII character")
            data.append(code)
    if position != len(body):
        raise RadixFormatError(text, Radix.ASCII.value, f"dangling '$' in {text!r}")
    return bytes(data)


def _format_ascii(value: int, kind: AtomicKind) -> str:
    return ascii_text(kind.to_raw(value).to_bytes(kind.width, "big"))


def _parse_ascii(text: str, kind: AtomicKind) -> int:
    data = ascii_bytes(text)
    if len(data) > kind.width:
        raise RadixFormatError(
            text, Radix.ASCII.value, f"{text!r} holds {len(data)} bytes, {kind.value} holds {kind.width}"
        )
    return kind.from_raw(int.from_bytes(data, "big"))


# ---------------------------------------------------------------------------
# Float and Exponential
# ---------------------------------------------------------------------------

_FLOAT_RE = re.compile(
    r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$|^[+-]?(?:inf|nan)$",
    re.IGNORECASE,
)

_EXPONENT_RE = re.compile(r"e([+-])(\d+)$")


def _format_float(value: float, kind: AtomicKind) -> str:
    if not math.isfinite(value):
        return repr(value)
    text = repr(value)
    if kind is AtomicKind.REAL:
        for precision in range(1, 10):
            candidate = float(f"{value:.{precision}g}")
            if normalize_value(kind, candidate) == value:
                text = repr(candidate)
                break
    mantissa, sep, exponent = text.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}{sep}{exponent}"


def _format_exponential(value: float, kind: AtomicKind) -> str:
    if not math.isfinite(value):
        return repr(value)
    places = 8 if kind is AtomicKind.REAL else 16
    text = f"{value:.{places}e}"
    return _EXPONENT_RE.sub(lambda m: f"e{m.group(1)}{m.group(2).zfill(3)}", text)


def _parse_float(text: str, kind: AtomicKind, radix: Radix) -> float:
    if not _FLOAT_RE.match(text):
        raise RadixFormatError(text, radix.value)
    try:
        return normalize_value(kind, float(text))
    except ValueError as exc:
        raise RadixFormatError(text, radix.value, str(exc)) from None


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_Formatter = Callable[[object, AtomicKind], str]
_Parser = Callable[[str, AtomicKind], object]

_FORMATTERS: dict[Radix, _Formatter] = {
    Radix.DECIMAL: _format_decimal,
    Radix.BINARY: lambda v, k: _format_based(v, k, Radix.BINARY),
    Radix.OCTAL: lambda v, k: _format_based(v, k, Radix.OCTAL),
    Radix.HEX: lambda v, k: _format_based(v, k, Radix.HEX),
    Radix.ASCII: _format_ascii,
    Radix.FLOAT: _format_float,
    Radix.EXPONENTIAL: _format_exponential,
    Radix.DATE_TIME: lambda v, k: format_date_time(v),
    Radix.DATE_TIME_NS: lambda v, k: format_date_time_ns(v),
}

_PARSERS: dict[Radix, _Parser] = {
    Radix.DECIMAL: _parse_decimal,
    Radix.BINARY: lambda t, k: _parse_based(t, k, Radix.BINARY),
    Radix.OCTAL: lambda t, k: _parse_based(t, k, Radix.OCTAL),
    Radix.HEX: lambda t, k: _parse_based(t, k, Radix.HEX),
    Radix.ASCII: _parse_ascii,
    Radix.FLOAT: lambda t, k: _parse_float(t, k, Radix.FLOAT),
    Radix.EXPONENTIAL: lambda t, k: _parse_float(t, k, Radix.EXPONENTIAL),
    Radix.DATE_TIME: lambda t, k: parse_date_time(t),
    Radix.DATE_TIME_NS: lambda t, k: parse_date_time_ns(t),
}


def supports_radix(kind: AtomicKind, radix: Radix) -> bool:
    return radix in supported_radixes(kind)


def validate_radix(kind: AtomicKind, radix: Radix) -> Radix:
    """Return *radix*, or raise ``RadixUnsupportedError`` if it cannot encode *kind*."""
    return check_radix(kind.value, radix)


def format_value(value: object, radix: Radix | None, kind: AtomicKind) -> str:
    """Format *value* of *kind* in *radix* (the kind's default when ``None``).

    Raises ``RadixUnsupportedError`` for an incompatible pair and
    ``RadixFormatError`` for a value the kind cannot hold.
    """
    if radix is None:
        radix = default_radix(kind.value)
    check_radix(kind.value, radix)
    try:
        value = normalize_value(kind, value)
    except ValueError as exc:
        raise RadixFormatError(repr(value), radix.value, str(exc)) from None
    return _FORMATTERS[radix](value, kind)


def parse_value(text: str, radix: Radix | None, kind: AtomicKind) -> bool | int | float:
    """Parse *text* written in *radix* into a value of *kind*.

    Raises ``RadixUnsupportedError`` for an incompatible pair and
    ``RadixFormatError`` when the text is not a valid literal.
    """
    if radix is None:
        radix = default_radix(kind.value)
    check_radix(kind.value, radix)
    return _PARSERS[radix](text.strip(), kind)


_INFER_ORDER: tuple[tuple[Radix, Callable[[str], bool]], ...] = (
    (Radix.BINARY, lambda s: s.startswith("2#")),
    (Radix.OCTAL, lambda s: s.startswith("8#")),
    (Radix.HEX, lambda s: s.upper().startswith("16#")),
    (Radix.DATE_TIME_NS, lambda s: s.upper().startswith("LDT#")),
    (Radix.DATE_TIME, lambda s: s.upper().startswith("DT#")),
    (Radix.ASCII, lambda s: len(s) >= 2 and s.startswith("'") and s.endswith("'")),
    (Radix.DECIMAL, lambda s: bool(_DECIMAL_RE.match(s))),
    (Radix.EXPONENTIAL, lambda s: "." in s and "e" in s.lower() and bool(_FLOAT_RE.match(s))),
    (Radix.FLOAT, lambda s: bool(_FLOAT_RE.match(s))),
)


def infer_radix(text: str) -> Radix:
    """Determine the radix a literal is written in from its shape."""
    stripped = text.strip()
    for radix, matches in _INFER_ORDER:
        if matches(stripped):
            return radix
    raise RadixFormatError(text, "any", f"Could not determine a radix for {text!r}")
