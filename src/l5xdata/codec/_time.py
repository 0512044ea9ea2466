"""Date/Time radix literals for LINT values.

- ``Date/Time``: ``DT#2024-01-31-13:45:10.123_456Z``, microseconds since
  the Unix epoch, always UTC.
- ``Date/Time (ns)``: ``LDT#2024-01-31-13:45:10.123_456_789(UTC+00:00)``,
  nanoseconds since the Unix epoch. Any offset is accepted on parse;
  formatting always writes UTC.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from l5xdata.model.errors import RadixFormatError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_LINT_MIN = -(1 << 63)
_LINT_MAX = (1 << 63) - 1

_DT_RE = re.compile(
    r"^DT#(\d{4})-(\d{2})-(\d{2})-(\d{2}):(\d{2}):(\d{2})\.([\d_]+)Z$",
    re.IGNORECASE,
)

_LDT_RE = re.compile(
    r"^LDT#(\d{4})-(\d{2})-(\d{2})-(\d{2}):(\d{2}):(\d{2})\.([\d_]+)"
    r"\(UTC([+-])(\d{2}):(\d{2})\)$",
    re.IGNORECASE,
)


def _group(digits: str) -> str:
    """Insert ``_`` every three digits from the left of a fraction."""
    return "_".join(digits[i:i + 3] for i in range(0, len(digits), 3))


def _stamp(seconds: int) -> str:
    moment = _EPOCH + timedelta(seconds=seconds)
    return moment.strftime("%Y-%m-%d-%H:%M:%S")


def _seconds(match: re.Match, text: str, radix: str) -> int:
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    try:
        moment = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as exc:
        raise RadixFormatError(text, radix, f"{text!r}: {exc}") from None
    return int((moment - _EPOCH).total_seconds())


def _fraction(raw: str, digits: int, text: str, radix: str) -> int:
    fraction = raw.replace("_", "")
    if len(fraction) != digits:
        raise RadixFormatError(
            text, radix, f"{text!r}: expected {digits} fractional digits"
        )
    return int(fraction)


def _in_range(value: int, text: str, radix: str) -> int:
    if not _LINT_MIN <= value <= _LINT_MAX:
        raise RadixFormatError(text, radix, f"{text!r} is out of range for LINT")
    return value


def format_date_time(value: int) -> str:
    seconds, micros = divmod(value, 1_000_000)
    try:
        stamp = _stamp(seconds)
    except OverflowError:
        raise RadixFormatError(str(value), "Date/Time", f"{value} is outside the calendar range") from None
    return f"DT#{stamp}.{_group(f'{micros:06d}')}Z"


def parse_date_time(text: str) -> int:
    match = _DT_RE.match(text)
    if match is None:
        raise RadixFormatError(text, "Date/Time")
    seconds = _seconds(match, text, "Date/Time")
    value = seconds * 1_000_000 + _fraction(match.group(7), 6, text, "Date/Time")
    return _in_range(value, text, "Date/Time")


def format_date_time_ns(value: int) -> str:
    seconds, nanos = divmod(value, 1_000_000_000)
    try:
        stamp = _stamp(seconds)
    except OverflowError:
        raise RadixFormatError(str(value), "Date/Time (ns)", f"{value} is outside the calendar range") from None
    return f"LDT#{stamp}.{_group(f'{nanos:09d}')}(UTC+00:00)"


def parse_date_time_ns(text: str) -> int:
    match = _LDT_RE.match(text)
    if match is None:
        raise RadixFormatError(text, "Date/Time (ns)")
    seconds = _seconds(match, text, "Date/Time (ns)")
    sign = -1 if match.group(8) == "-" else 1
    offset = sign * (int(match.group(9)) * 3600 + int(match.group(10)) * 60)
    nanos = _fraction(match.group(7), 9, text, "Date/Time (ns)")
    return _in_range((seconds - offset) * 1_000_000_000 + nanos, text, "Date/Time (ns)")
