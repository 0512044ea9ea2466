"""Value instances for L5X data.

A value is a fresh, independently mutable instantiation of a definition:

- Atomic: one scalar of a fixed kind, with the radix it is written in.
- Structure: named composite of ``MemberValue`` entries (hidden backing
  members included, in declaration order).
- Array: ``length`` elements of one element type.
- Undefined: a placeholder for a type name no source could resolve.

``LogixType`` is the discriminated union of the four.
"""

from __future__ import annotations

import math
import struct
from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .errors import NameCollisionError
from .types import (
    AtomicKind,
    DataTypeClass,
    DataTypeFamily,
    Member,
    Radix,
    check_radix,
    default_radix,
    name_key,
)


# ---------------------------------------------------------------------------
# Atomic values
# ---------------------------------------------------------------------------

def normalize_value(kind: AtomicKind, value: object) -> bool | int | float:
    """Coerce *value* to the Python representation of *kind*.

    - BOOL -> bool (only 0/1 accepted)
    - integer kinds -> int, range checked
    - REAL -> float rounded to single precision; LREAL -> float
    """
    if kind is AtomicKind.BOOL:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        raise ValueError(f"BOOL value must be 0 or 1, got {value!r}")

    if kind.floating:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{kind.value} value must be a number, got {value!r}")
        result = float(value)
        if kind is AtomicKind.REAL and math.isfinite(result):
            try:
                result = struct.unpack("<f", struct.pack("<f", result))[0]
            except OverflowError:
                raise ValueError(f"{value!r} is out of range for REAL") from None
        return result

    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{kind.value} value must be integral, got {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise ValueError(f"{kind.value} value must be an integer, got {value!r}")
    if not kind.min_value <= value <= kind.max_value:
        raise ValueError(
            f"{value} is out of range for {kind.value} "
            f"({kind.min_value}..{kind.max_value})"
        )
    return value


class Atomic(BaseModel):
    """A scalar value of one atomic kind.

    Assigning ``radix`` re-checks it against the kind.
    """

    model_config = ConfigDict(validate_assignment=True)

    kind: Literal["atomic"] = "atomic"
    data_type: AtomicKind
    value: bool | int | float = Field(default=0, validate_default=True)
    radix: Radix | None = Field(default=None, validate_default=True)

    @field_validator("data_type", mode="before")
    @classmethod
    def _lookup_kind(cls, value):
        if isinstance(value, str) and not isinstance(value, AtomicKind):
            kind = AtomicKind.lookup(value)
            if kind is None:
                raise ValueError(f"{value!r} is not an atomic data type")
            return kind
        return value

    @field_validator("value")
    @classmethod
    def _normalize(cls, value, info: ValidationInfo):
        kind = info.data.get("data_type")
        if kind is None:
            return value
        return normalize_value(kind, value)

    @field_validator("radix")
    @classmethod
    def _check_radix(cls, value, info: ValidationInfo):
        kind = info.data.get("data_type")
        if kind is None:
            return value
        if value is None:
            return default_radix(kind.value)
        return check_radix(kind.value, value)

    @property
    def width(self) -> int:
        return self.data_type.width


# ---------------------------------------------------------------------------
# Structures
# ---------------------------------------------------------------------------

class MemberValue(BaseModel):
    """A structure member definition paired with its current value."""

    member: Member
    value: LogixType

    @property
    def name(self) -> str:
        return self.member.name

    @property
    def hidden(self) -> bool:
        return self.member.hidden


class Structure(BaseModel):
    """A structure value: every member of its definition, in declaration order."""

    kind: Literal["structure"] = "structure"
    name: str
    family: DataTypeFamily = DataTypeFamily.NONE
    type_class: DataTypeClass = DataTypeClass.USER
    members: list[MemberValue] = []

    @model_validator(mode="after")
    def _unique_members(self):
        seen: set[str] = set()
        for entry in self.members:
            key = name_key(entry.name)
            if key in seen:
                raise NameCollisionError(entry.name, self.name)
            seen.add(key)
        return self

    # -- Member access -------------------------------------------------------

    @property
    def public_members(self) -> list[MemberValue]:
        return [m for m in self.members if not m.hidden]

    @property
    def hidden_members(self) -> list[MemberValue]:
        return [m for m in self.members if m.hidden]

    @property
    def names(self) -> list[str]:
        """Public member names in declaration order."""
        return [m.name for m in self.public_members]

    def member(self, name: str) -> MemberValue | None:
        """Case-insensitive lookup, hidden members included."""
        key = name_key(name)
        for entry in self.members:
            if name_key(entry.name) == key:
                return entry
        return None

    def get(self, name: str, default: LogixType | None = None) -> LogixType | None:
        entry = self.member(name)
        return entry.value if entry is not None else default

    def __getitem__(self, name: str) -> LogixType:
        entry = self.member(name)
        if entry is None:
            raise KeyError(f"{self.name} has no member {name!r}")
        return entry.value

    def __setitem__(self, name: str, value: LogixType) -> None:
        entry = self.member(name)
        if entry is None:
            raise KeyError(f"{self.name} has no member {name!r}")
        entry.value = value

    # -- Bit packing ---------------------------------------------------------

    def _targeted(self) -> list[tuple[MemberValue, MemberValue]]:
        pairs = []
        for entry in self.members:
            target = entry.member.target
            if target is None:
                continue
            backing = self.member(target)
            if backing is None or not isinstance(backing.value, Atomic):
                continue
            if not isinstance(entry.value, Atomic):
                continue
            pairs.append((entry, backing))
        return pairs

    def sync_backing(self) -> None:
        """Pack BOOL member values into their hidden backing members."""
        for entry, backing in self._targeted():
            atomic = backing.value
            bit = entry.member.bit_number or 0
            raw = atomic.data_type.to_raw(atomic.value)
            if entry.value.value:
                raw |= 1 << bit
            else:
                raw &= ~(1 << bit)
            atomic.value = atomic.data_type.from_raw(raw)

    def unpack_backing(self, names: set[str] | None = None) -> None:
        """Set BOOL members from their backing members' bits.

        *names*, when given, limits the update to those BOOL members
        (case-folded names).
        """
        for entry, backing in self._targeted():
            if names is not None and name_key(entry.name) not in names:
                continue
            atomic = backing.value
            bit = entry.member.bit_number or 0
            raw = atomic.data_type.to_raw(atomic.value)
            entry.value.value = bool(raw >> bit & 1)


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------

class Array(BaseModel):
    """A one- or multi-dimensional array, stored flat in row-major order."""

    kind: Literal["array"] = "array"
    element_type: str
    length: int = Field(ge=0)
    dimensions: list[int] = []
    elements: list[LogixType] = []

    @field_validator("element_type")
    @classmethod
    def _canonical_type(cls, value: str) -> str:
        kind = AtomicKind.lookup(value)
        return kind.value if kind is not None else value

    @model_validator(mode="after")
    def _check_shape(self):
        if len(self.elements) != self.length:
            raise ValueError(
                f"array of {self.element_type} declares length {self.length} "
                f"but holds {len(self.elements)} elements"
            )
        if self.dimensions:
            if any(d < 0 for d in self.dimensions):
                raise ValueError(f"dimensions must be non-negative, got {self.dimensions}")
            if math.prod(self.dimensions) != self.length:
                raise ValueError(
                    f"dimensions {self.dimensions} do not multiply to length {self.length}"
                )
        expected = name_key(self.element_type)
        for position, element in enumerate(self.elements):
            if isinstance(element, Array):
                raise ValueError("array elements must not be arrays")
            if name_key(type_name(element)) != expected:
                raise ValueError(
                    f"element [{position}] is {type_name(element)}, "
                    f"expected {self.element_type}"
                )
        radixes = {e.radix for e in self.elements if isinstance(e, Atomic)}
        if len(radixes) > 1:
            raise ValueError(
                "array elements must share one radix, got "
                + ", ".join(sorted(r.value for r in radixes))
            )
        return self

    @property
    def shape(self) -> list[int]:
        return list(self.dimensions) if self.dimensions else [self.length]

    def index_of(self, position: int) -> tuple[int, ...]:
        """Row-major index tuple of flat *position*."""
        index: list[int] = []
        for size in reversed(self.shape):
            position, rem = divmod(position, size)
            index.append(rem)
        return tuple(reversed(index))

    def __len__(self) -> int:
        return self.length

    def __getitem__(self, position: int) -> LogixType:
        return self.elements[position]

    def __setitem__(self, position: int, value: LogixType) -> None:
        if name_key(type_name(value)) != name_key(self.element_type):
            raise ValueError(
                f"cannot store {type_name(value)} in array of {self.element_type}"
            )
        if isinstance(value, Atomic) and self.elements:
            current = self.elements[0]
            if isinstance(current, Atomic) and current.radix is not value.radix:
                raise ValueError(
                    f"cannot store a {value.radix.value} element in an array "
                    f"written in {current.radix.value}"
                )
        self.elements[position] = value


# ---------------------------------------------------------------------------
# Undefined
# ---------------------------------------------------------------------------

class Undefined(BaseModel):
    """Value of a type name that no definition source could resolve."""

    kind: Literal["undefined"] = "undefined"
    name: str


LogixType = Annotated[
    Union[Atomic, Structure, Array, Undefined],
    Field(discriminator="kind"),
]


def type_name(value: Atomic | Structure | Array | Undefined) -> str:
    """The data type name a value carries."""
    if isinstance(value, Atomic):
        return value.data_type.value
    if isinstance(value, Array):
        return value.element_type
    return value.name


# ---------------------------------------------------------------------------
# Rebuild models with recursive LogixType references
# ---------------------------------------------------------------------------

MemberValue.model_rebuild()
Structure.model_rebuild()
Array.model_rebuild()
