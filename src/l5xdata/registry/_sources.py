"""Readers that turn definition-bearing elements into ``TypeDefinition``s.

- ``read_data_type``: a ``DataType`` entry (``BIT`` members read as BOOL)
- ``read_module_structure``: a ``Structure`` embedded in module connection
  data; the member list is the structure's own value children
- ``read_instruction``: an ``AddOnInstructionDefinition``; parameters
  (``InOut`` excluded) followed by local tags
"""

from __future__ import annotations

from typing import Any

from l5xdata.model import elements as el
from l5xdata.model.errors import DecodeMalformedError
from l5xdata.model.types import (
    DataTypeClass,
    DataTypeFamily,
    ExternalAccess,
    Member,
    Radix,
    TypeDefinition,
)


def _required(node: Any, attribute: str, path: str) -> str:
    value = node.get(attribute)
    if not value:
        raise DecodeMalformedError(path, f"<{node.tag}> is missing the {attribute} attribute")
    return value


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def _description(node: Any) -> str:
    child = el.find_child(node, el.DESCRIPTION)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _enum(enum_cls, value: str | None, default, path: str):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise DecodeMalformedError(path, f"unknown {enum_cls.__name__} {value!r}") from None


def _dimension(node: Any, attribute: str, path: str) -> int:
    try:
        sizes = el.parse_dimensions(node.get(attribute))
    except ValueError as exc:
        raise DecodeMalformedError(path, str(exc)) from None
    total = 1
    for size in sizes:
        total *= size
    return total if sizes else 0


def _member(node: Any, owner: str, dimension_attribute: str) -> Member:
    name = _required(node, el.NAME, owner)
    path = f"{owner}.{name}"
    radix = node.get(el.RADIX)
    bit_number = node.get(el.BIT_NUMBER)
    return Member(
        name=name,
        data_type=_required(node, el.DATA_TYPE_ATTR, path),
        dimension=_dimension(node, dimension_attribute, path),
        radix=Radix.parse(radix) if radix else None,
        external_access=_enum(
            ExternalAccess, node.get(el.EXTERNAL_ACCESS), ExternalAccess.READ_WRITE, path
        ),
        description=_description(node),
        hidden=_flag(node.get(el.HIDDEN)),
        target=node.get(el.TARGET) or None,
        bit_number=int(bit_number) if bit_number is not None else None,
    )


# ---------------------------------------------------------------------------
# DataType entries
# ---------------------------------------------------------------------------

def read_data_type(node: Any) -> TypeDefinition:
    name = _required(node, el.NAME, el.DATA_TYPE)
    members_node = el.find_child(node, el.MEMBERS)
    members = []
    if members_node is not None:
        members = [
            _member(child, name, el.DIMENSION)
            for child in el.child_elements(members_node, el.MEMBER)
        ]
    return TypeDefinition(
        name=name,
        family=_enum(DataTypeFamily, node.get(el.FAMILY), DataTypeFamily.NONE, name),
        type_class=_enum(DataTypeClass, node.get(el.CLASS), DataTypeClass.USER, name),
        description=_description(node),
        members=tuple(members),
    )


# ---------------------------------------------------------------------------
# Module connection structures
# ---------------------------------------------------------------------------

def read_module_structure(node: Any) -> TypeDefinition:
    name = _required(node, el.DATA_TYPE_ATTR, node.get(el.NAME) or el.STRUCTURE)
    members = [
        _member(child, name, el.DIMENSIONS)
        for child in el.child_elements(
            node, el.DATA_VALUE_MEMBER, el.STRUCTURE_MEMBER, el.ARRAY_MEMBER
        )
    ]
    return TypeDefinition(
        name=name,
        type_class=DataTypeClass.IO,
        members=tuple(members),
    )


# ---------------------------------------------------------------------------
# Add-On Instructions
# ---------------------------------------------------------------------------

def read_instruction(node: Any) -> TypeDefinition:
    name = _required(node, el.NAME, el.ADD_ON_INSTRUCTION)
    members = []

    parameters = el.find_child(node, el.PARAMETERS)
    if parameters is not None:
        for child in el.child_elements(parameters, el.PARAMETER):
            if child.get(el.USAGE) == el.IN_OUT:
                continue
            members.append(_member(child, name, el.DIMENSIONS))

    local_tags = el.find_child(node, el.LOCAL_TAGS)
    if local_tags is not None:
        for child in el.child_elements(local_tags, el.LOCAL_TAG):
            members.append(_member(child, name, el.DIMENSIONS))

    return TypeDefinition(
        name=name,
        type_class=DataTypeClass.ADD_ON,
        description=_description(node),
        members=tuple(members),
    )
