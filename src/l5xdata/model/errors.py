"""Exception taxonomy for the l5xdata core.

Every exception carries the offending name or path so callers can report
precisely where a document or definition went wrong. ``TypeUnresolvedError``
is the only non-fatal kind: the registry and serializer absorb it into an
``Undefined`` value unless strict type checking is requested.
"""

from __future__ import annotations


class L5XError(Exception):
    """Base exception for l5xdata."""


class NameCollisionError(L5XError):
    """Raised when two names in one scope differ only by letter case (or not at all)."""

    def __init__(self, name: str, scope: str | None = None, message: str | None = None) -> None:
        self.name = name
        self.scope = scope
        if message is None:
            where = f" in {scope!r}" if scope else ""
            message = f"Name {name!r} collides with an existing name{where}"
        super().__init__(message)


class CircularReferenceError(L5XError):
    """Raised when a structure contains itself, directly or through other structures."""

    def __init__(self, name: str, cycle: list[str]) -> None:
        self.name = name
        self.cycle = list(cycle)
        super().__init__(
            f"Structure {name!r} contains itself: {' -> '.join(self.cycle)}"
        )


class InvalidNameError(L5XError):
    """Raised when a component or member name fails the identifier grammar."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name {name!r}: {reason}")


class RadixUnsupportedError(L5XError):
    """Raised for an unknown radix token or a radix incompatible with a kind."""

    def __init__(self, radix: str, kind: str | None = None, message: str | None = None) -> None:
        self.radix = radix
        self.kind = kind
        if message is None:
            if kind is None:
                message = f"Unrecognized radix {radix!r}"
            else:
                message = f"Radix {radix!r} is not supported by {kind}"
        super().__init__(message)


class RadixFormatError(L5XError, ValueError):
    """Raised when literal text does not match a radix or overflows a kind."""

    def __init__(self, text: str, radix: str, message: str | None = None) -> None:
        self.text = text
        self.radix = radix
        super().__init__(message or f"{text!r} is not a valid {radix} literal")


class DecodeMalformedError(L5XError):
    """Raised when an element lacks a required attribute or child during decode."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class TypeUnresolvedError(L5XError):
    """A type name could not be resolved from any definition source."""

    def __init__(self, name: str, path: str = "") -> None:
        self.name = name
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"Data type {name!r} could not be resolved{where}")
