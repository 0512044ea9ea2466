"""Structure expansion and value instantiation.

Expansion gives every BOOL member of a user-defined structure a hidden
SINT backing member, unless the BOOL already names one through ``target``:

    MOTOR {Run: BOOL, Speed: DINT}
      -> ZZZZZZZZZZMOTOR0 (SINT, hidden), Run -> target ZZZZZZZZZZMOTOR0 bit 0,
         Speed

Backing names depend only on the owner name and each BOOL's position among
the BOOL members, so expanding the same definition always yields the same
names, and expanding an expanded definition changes nothing.
"""

from __future__ import annotations

import logging
from typing import Callable

from l5xdata.model.types import (
    AtomicKind,
    DataTypeClass,
    ExternalAccess,
    Member,
    Radix,
    TypeDefinition,
)
from l5xdata.model.values import (
    Array,
    Atomic,
    LogixType,
    MemberValue,
    Structure,
    Undefined,
)

logger = logging.getLogger(__name__)

BACKING_PREFIX = "ZZZZZZZZZZ"


def backing_name(owner: str, position: int) -> str:
    """Name of the backing member for the BOOL at *position* among BOOLs."""
    return f"{BACKING_PREFIX}{owner[:10]}{position}"


Resolver = Callable[[str], "TypeDefinition | Undefined"]


class StructureBuilder:
    """Expands definitions and materializes fresh default values.

    *resolve* maps a member type name to its definition (or ``Undefined``);
    it is normally ``TypeRegistry.resolve``, which has already rejected
    self-containing structures.
    """

    def __init__(self, resolve: Resolver | None = None) -> None:
        self._resolve = resolve

    def expand(self, definition: TypeDefinition) -> TypeDefinition:
        if definition.type_class is not DataTypeClass.USER:
            return definition

        members: list[Member] = []
        position = 0
        synthesized = 0
        for member in definition.members:
            if member.is_bool:
                if member.target is None:
                    backing = backing_name(definition.name, position)
                    members.append(Member(
                        name=backing,
                        data_type=AtomicKind.SINT.value,
                        radix=Radix.DECIMAL,
                        external_access=ExternalAccess.READ_WRITE,
                        hidden=True,
                    ))
                    member = member.model_copy(update={"target": backing, "bit_number": 0})
                    synthesized += 1
                position += 1
            members.append(member)

        if not synthesized:
            return definition
        logger.debug(
            "Synthesized %d backing member(s) for %s", synthesized, definition.name
        )
        return TypeDefinition(
            name=definition.name,
            family=definition.family,
            type_class=definition.type_class,
            description=definition.description,
            members=tuple(members),
        )

    # -- Instantiation -------------------------------------------------------
    #
    # Structures are created empty and filled from an explicit work stack, so
    # nesting depth is bounded by memory rather than the interpreter stack.

    def build(self, definition: TypeDefinition) -> Structure:
        definition = self.expand(definition)
        structure = _empty(definition)
        self._fill([(structure, definition)])
        return structure

    def instantiate(
        self,
        data_type: str,
        dimension: int = 0,
        radix: Radix | None = None,
    ) -> LogixType:
        value, definition = self._shell(data_type, dimension, radix)
        self._fill(_pending(value, definition))
        return value

    def _fill(self, stack: list[tuple[Structure, TypeDefinition]]) -> None:
        while stack:
            structure, definition = stack.pop()
            for member in definition.members:
                value, nested = self._shell(member.data_type, member.dimension, member.radix)
                entry = MemberValue(member=member, value=value)
                structure.members.append(entry)
                stack.extend(_pending(entry.value, nested))

    def _shell(
        self,
        data_type: str,
        dimension: int,
        radix: Radix | None,
    ) -> tuple[LogixType, TypeDefinition | None]:
        """Default value of *data_type* with any structures left empty.

        Returns the value and, when it holds structures, their definition.
        """
        if radix is Radix.NULL:
            radix = None
        if dimension:
            elements = []
            definition = None
            for _ in range(dimension):
                element, definition = self._shell(data_type, 0, radix)
                elements.append(element)
            array = Array(element_type=data_type, length=dimension, elements=elements)
            return array, definition

        kind = AtomicKind.lookup(data_type)
        if kind is not None:
            return Atomic(data_type=kind, radix=radix), None

        definition = self._resolve(data_type) if self._resolve is not None else None
        if definition is None or isinstance(definition, Undefined):
            return Undefined(name=data_type), None
        if definition.is_atomic:
            return Atomic(data_type=definition.kind, radix=radix), None
        definition = self.expand(definition)
        return _empty(definition), definition


def _empty(definition: TypeDefinition) -> Structure:
    return Structure(
        name=definition.name,
        family=definition.family,
        type_class=definition.type_class,
        members=[],
    )


def _pending(
    value: LogixType, definition: TypeDefinition | None
) -> list[tuple[Structure, TypeDefinition]]:
    if definition is None:
        return []
    if isinstance(value, Array):
        return [(e, definition) for e in value.elements if isinstance(e, Structure)]
    if isinstance(value, Structure):
        return [(value, definition)]
    return []
