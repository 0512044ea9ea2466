"""TypeDefinition -> ``DataType`` element.

The output reads back through ``read_data_type`` to an equal definition.
Scalar BOOL members are written with the definition spelling ``BIT``.
"""

from __future__ import annotations

from typing import Any

from lxml import etree

from l5xdata.model import elements as el
from l5xdata.model.types import Member, TypeDefinition

_BIT = "BIT"


def _description(parent: Any, text: str, cdata: bool) -> None:
    if not text:
        return
    node = etree.SubElement(parent, el.DESCRIPTION)
    node.text = etree.CDATA(text) if cdata else text


def _member(parent: Any, member: Member, cdata: bool) -> None:
    attributes = {
        el.NAME: member.name,
        el.DATA_TYPE_ATTR: _BIT if member.is_bool else member.data_type,
        el.DIMENSION: str(member.dimension),
        el.RADIX: member.radix.value,
        el.HIDDEN: "true" if member.hidden else "false",
    }
    if member.target is not None:
        attributes[el.TARGET] = member.target
    if member.bit_number is not None:
        attributes[el.BIT_NUMBER] = str(member.bit_number)
    attributes[el.EXTERNAL_ACCESS] = member.external_access.value
    node = etree.SubElement(parent, el.MEMBER, attributes)
    _description(node, member.description, cdata)


def write_definition(definition: TypeDefinition, parent: Any = None, cdata: bool = True) -> Any:
    attributes = {
        el.NAME: definition.name,
        el.FAMILY: definition.family.value,
        el.CLASS: definition.type_class.value,
    }
    if parent is None:
        node = etree.Element(el.DATA_TYPE, attributes)
    else:
        node = etree.SubElement(parent, el.DATA_TYPE, attributes)
    _description(node, definition.description, cdata)
    members = etree.SubElement(node, el.MEMBERS)
    for member in definition.members:
        _member(members, member, cdata)
    return node
