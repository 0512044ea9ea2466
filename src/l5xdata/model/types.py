"""Type system for L5X data definitions.

Two distinct concepts:
- TypeDefinition: a named, read-only definition (atomic, predefined,
  user-defined, module-defined or Add-On Instruction structure) that lives
  in a document's type registry and is shared by every reference to it.
- Member: one entry of a definition. Members reference their data type by
  *name*; the registry resolves names to definitions.

Value instances (Atomic, Structure, Array, Undefined) live in
``l5xdata.model.values`` and never share mutable state with definitions.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import InvalidNameError, NameCollisionError, RadixUnsupportedError


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

MAX_NAME_LENGTH = 40

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def name_key(name: str) -> str:
    """Case-insensitive identity key for type, member and index names."""
    return name.casefold()


def validate_name(name: str) -> str:
    """Check *name* against the Logix identifier grammar and return it."""
    if not name:
        raise InvalidNameError(name, "name must not be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            name, f"name is {len(name)} characters, limit is {MAX_NAME_LENGTH}"
        )
    if not _NAME_RE.match(name):
        raise InvalidNameError(
            name,
            "must start with a letter or underscore and contain only "
            "letters, digits and underscores",
        )
    return name


# ---------------------------------------------------------------------------
# Atomic kinds
# ---------------------------------------------------------------------------

class AtomicKind(str, Enum):
    """Logix elementary types."""

    BOOL = "BOOL"

    SINT = "SINT"
    INT = "INT"
    DINT = "DINT"
    LINT = "LINT"

    USINT = "USINT"
    UINT = "UINT"
    UDINT = "UDINT"
    ULINT = "ULINT"

    REAL = "REAL"
    LREAL = "LREAL"

    @classmethod
    def lookup(cls, name: str) -> AtomicKind | None:
        """Return the kind named *name* (case-insensitive), or ``None``.

        ``BIT`` is the spelling BOOL members take inside a DataType
        definition and maps to BOOL.
        """
        upper = name.upper()
        if upper == "BIT":
            return cls.BOOL
        try:
            return cls(upper)
        except ValueError:
            return None

    @property
    def bits(self) -> int:
        return _KIND_TABLE[self][0]

    @property
    def width(self) -> int:
        """Storage width in bytes (BOOL occupies one byte when stored)."""
        return max(1, self.bits // 8)

    @property
    def signed(self) -> bool:
        return _KIND_TABLE[self][1]

    @property
    def floating(self) -> bool:
        return _KIND_TABLE[self][2]

    @property
    def integral(self) -> bool:
        return not self.floating and self is not AtomicKind.BOOL

    @property
    def min_value(self) -> int:
        if self.signed:
            return -(1 << (self.bits - 1))
        return 0

    @property
    def max_value(self) -> int:
        if self.signed:
            return (1 << (self.bits - 1)) - 1
        return (1 << self.bits) - 1

    def to_raw(self, value: int | bool) -> int:
        """Unsigned bit pattern of an integral or BOOL value."""
        return int(value) & ((1 << self.bits) - 1)

    def from_raw(self, raw: int) -> int | bool:
        """Inverse of ``to_raw``: reinterpret a bit pattern as this kind."""
        if self is AtomicKind.BOOL:
            return bool(raw & 1)
        raw &= (1 << self.bits) - 1
        if self.signed and raw >> (self.bits - 1):
            return raw - (1 << self.bits)
        return raw


# kind -> (bits, signed, floating)
_KIND_TABLE: dict[AtomicKind, tuple[int, bool, bool]] = {
    AtomicKind.BOOL: (1, False, False),
    AtomicKind.SINT: (8, True, False),
    AtomicKind.INT: (16, True, False),
    AtomicKind.DINT: (32, True, False),
    AtomicKind.LINT: (64, True, False),
    AtomicKind.USINT: (8, False, False),
    AtomicKind.UINT: (16, False, False),
    AtomicKind.UDINT: (32, False, False),
    AtomicKind.ULINT: (64, False, False),
    AtomicKind.REAL: (32, True, True),
    AtomicKind.LREAL: (64, True, True),
}


# ---------------------------------------------------------------------------
# Radix
# ---------------------------------------------------------------------------

class Radix(str, Enum):
    """Textual encodings of atomic values, spelled as they appear in files."""

    NULL = "NullType"
    BINARY = "Binary"
    OCTAL = "Octal"
    DECIMAL = "Decimal"
    HEX = "Hex"
    EXPONENTIAL = "Exponential"
    FLOAT = "Float"
    ASCII = "ASCII"
    DATE_TIME = "Date/Time"
    DATE_TIME_NS = "Date/Time (ns)"

    @classmethod
    def parse(cls, token: str) -> Radix:
        """Map a file token to a Radix, case-insensitively.

        Raises ``RadixUnsupportedError`` for an unrecognized token.
        """
        folded = token.strip().casefold()
        for radix in cls:
            if folded in (radix.value.casefold(), radix.name.casefold()):
                return radix
        raise RadixUnsupportedError(token)


_BOOL_RADIXES = frozenset({Radix.BINARY, Radix.OCTAL, Radix.DECIMAL, Radix.HEX})
_INTEGER_RADIXES = _BOOL_RADIXES | {Radix.ASCII}
_FLOAT_RADIXES = frozenset({Radix.FLOAT, Radix.EXPONENTIAL})


def supported_radixes(kind: AtomicKind) -> frozenset[Radix]:
    """Radixes that can encode values of *kind*."""
    if kind is AtomicKind.BOOL:
        return _BOOL_RADIXES
    if kind.floating:
        return _FLOAT_RADIXES
    if kind is AtomicKind.LINT:
        return _INTEGER_RADIXES | {Radix.DATE_TIME, Radix.DATE_TIME_NS}
    return _INTEGER_RADIXES


def default_radix(data_type: str) -> Radix:
    """Float for floating kinds, Decimal for other atomics, NullType otherwise."""
    kind = AtomicKind.lookup(data_type)
    if kind is None:
        return Radix.NULL
    return Radix.FLOAT if kind.floating else Radix.DECIMAL


def check_radix(data_type: str, radix: Radix) -> Radix:
    """Reject a radix that cannot encode *data_type*; return it otherwise."""
    kind = AtomicKind.lookup(data_type)
    if kind is None:
        if radix is not Radix.NULL:
            raise RadixUnsupportedError(radix.value, data_type)
        return radix
    if radix not in supported_radixes(kind):
        raise RadixUnsupportedError(radix.value, kind.value)
    return radix


# ---------------------------------------------------------------------------
# Definition enumerations
# ---------------------------------------------------------------------------

class ExternalAccess(str, Enum):
    READ_WRITE = "Read/Write"
    READ_ONLY = "Read Only"
    NONE = "None"

    @classmethod
    def _missing_(cls, value: object) -> ExternalAccess | None:
        if isinstance(value, str):
            compact = value.replace(" ", "").replace("/", "").casefold()
            for access in cls:
                if access.value.replace(" ", "").replace("/", "").casefold() == compact:
                    return access
        return None


class DataTypeFamily(str, Enum):
    NONE = "NoFamily"
    STRING = "StringFamily"


class DataTypeClass(str, Enum):
    ATOMIC = "Atomic"
    PREDEFINED = "ProductDefined"
    USER = "User"
    IO = "IO"
    ADD_ON = "AddOnDefined"


# ---------------------------------------------------------------------------
# Members and definitions
# ---------------------------------------------------------------------------

class Member(BaseModel):
    """One member of a structure definition.

    The radix is checked against the member's data type here, when it is
    assigned, so later formatting never meets an incompatible pair.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    dimension: int = Field(default=0, ge=0)
    radix: Radix = Radix.NULL
    external_access: ExternalAccess = ExternalAccess.READ_WRITE
    description: str = ""
    hidden: bool = False
    target: str | None = None
    bit_number: int | None = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_radix(cls, data):
        # NullType on an atomic member means "no radix": use the kind's default
        if isinstance(data, dict) and "data_type" in data:
            radix = data.get("radix")
            if radix is None or radix == Radix.NULL.value:
                data = dict(data)
                data["radix"] = default_radix(str(data["data_type"]))
        return data

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return validate_name(value)

    @field_validator("data_type")
    @classmethod
    def _canonical_type(cls, value: str) -> str:
        if not value:
            raise ValueError("data_type must not be empty")
        kind = AtomicKind.lookup(value)
        return kind.value if kind is not None else value

    @model_validator(mode="after")
    def _check_member(self):
        check_radix(self.data_type, self.radix)
        if (self.target is not None or self.bit_number is not None) and not self.is_bool:
            raise ValueError(
                f"member {self.name!r}: only BOOL members may have a target or bit number"
            )
        return self

    @property
    def kind(self) -> AtomicKind | None:
        return AtomicKind.lookup(self.data_type)

    @property
    def is_bool(self) -> bool:
        return self.data_type == AtomicKind.BOOL.value and self.dimension == 0


class TypeDefinition(BaseModel):
    """A named data type definition, shared read-only across a document."""

    model_config = ConfigDict(frozen=True)

    name: str
    family: DataTypeFamily = DataTypeFamily.NONE
    type_class: DataTypeClass = DataTypeClass.USER
    description: str = ""
    members: tuple[Member, ...] = ()

    @model_validator(mode="after")
    def _check_definition(self):
        if self.type_class is DataTypeClass.USER:
            validate_name(self.name)
        seen: dict[str, str] = {}
        for member in self.members:
            key = name_key(member.name)
            if key in seen:
                raise NameCollisionError(member.name, self.name)
            seen[key] = member.name
        hidden = {name_key(m.name) for m in self.members if m.hidden}
        for member in self.members:
            if member.target is not None and name_key(member.target) not in hidden:
                raise ValueError(
                    f"member {member.name!r} targets {member.target!r}, "
                    f"which is not a hidden member of {self.name!r}"
                )
        return self

    # -- Classification ------------------------------------------------------

    @property
    def is_atomic(self) -> bool:
        return self.type_class is DataTypeClass.ATOMIC

    @property
    def is_structure(self) -> bool:
        return not self.is_atomic

    @property
    def is_string(self) -> bool:
        return self.family is DataTypeFamily.STRING

    @property
    def kind(self) -> AtomicKind | None:
        if not self.is_atomic:
            return None
        return AtomicKind.lookup(self.name)

    # -- Members -------------------------------------------------------------

    @property
    def public_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if not m.hidden)

    @property
    def hidden_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if m.hidden)

    def member(self, name: str) -> Member | None:
        """Case-insensitive member lookup, hidden members included."""
        key = name_key(name)
        for member in self.members:
            if name_key(member.name) == key:
                return member
        return None

    def dependencies(self) -> list[str]:
        """Names of the non-atomic types this definition's members use, in order."""
        names: list[str] = []
        seen: set[str] = set()
        for member in self.members:
            if AtomicKind.lookup(member.data_type) is not None:
                continue
            key = name_key(member.data_type)
            if key not in seen:
                seen.add(key)
                names.append(member.data_type)
        return names

    # -- Structural identity -------------------------------------------------

    def structural_key(self) -> tuple:
        """Hashable shape used to deduplicate definitions across imports."""
        return (
            name_key(self.name),
            tuple(
                (name_key(m.name), name_key(m.data_type), m.dimension)
                for m in self.public_members
            ),
        )

    def structurally_equals(self, other: TypeDefinition) -> bool:
        """Same name and same ordered public (name, type, dimension) members.

        Hidden backing members and descriptions are ignored.
        """
        return self.structural_key() == other.structural_key()
