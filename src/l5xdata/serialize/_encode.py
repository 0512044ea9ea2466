"""Value -> element encoding.

Output is deterministic: members in declaration order, array elements in
row-major order, attributes in a fixed order. Atomic values always carry
their radix.
"""

from __future__ import annotations

from typing import Any

from lxml import etree

from l5xdata.codec import ascii_text, format_value
from l5xdata.config import SerializerConfig
from l5xdata.model import elements as el
from l5xdata.model.types import DataTypeFamily, Radix, default_radix
from l5xdata.model.values import (
    Array,
    Atomic,
    LogixType,
    MemberValue,
    Structure,
    type_name,
)

STRING_DATA = "DATA"
STRING_LENGTH = "LEN"


def _element(tag: str, parent: Any = None, **attributes: str) -> Any:
    if parent is None:
        return etree.Element(tag, attributes)
    return etree.SubElement(parent, tag, attributes)


def string_length(value: Structure) -> int:
    """LEN clamped to the DATA capacity."""
    length = value.get(STRING_LENGTH)
    data = value.get(STRING_DATA)
    capacity = data.length if isinstance(data, Array) else 0
    if not isinstance(length, Atomic):
        return capacity
    return max(0, min(int(length.value), capacity))


def string_text(value: Structure) -> str:
    """Quoted ASCII text of the first LEN characters of a string structure."""
    data = value.get(STRING_DATA)
    if not isinstance(data, Array):
        return "''"
    raw = bytes(
        element.data_type.to_raw(element.value)
        for element in data.elements[:string_length(value)]
        if isinstance(element, Atomic)
    )
    return ascii_text(raw)


class Encoder:
    def __init__(self, config: SerializerConfig) -> None:
        self.config = config

    def _text(self, text: str) -> Any:
        return etree.CDATA(text) if self.config.string_cdata else text

    # -- Entry points --------------------------------------------------------

    def encode(self, value: LogixType, parent: Any = None) -> Any:
        if isinstance(value, Atomic):
            return _element(
                el.DATA_VALUE, parent,
                DataType=value.data_type.value,
                Radix=value.radix.value,
                Value=format_value(value.value, value.radix, value.data_type),
            )
        if isinstance(value, Structure):
            node = _element(el.STRUCTURE, parent, DataType=value.name)
            self._members(node, value)
            return node
        if isinstance(value, Array):
            node = _element(el.ARRAY, parent, DataType=value.element_type)
            self._array(node, value)
            return node
        return _element(el.STRUCTURE, parent, DataType=value.name)

    def encode_data(self, value: LogixType, parent: Any = None) -> Any:
        """Wrap *value* in a ``Data`` element.

        String-family structures use ``Format="String"``; everything else
        is ``Format="Decorated"``.
        """
        if isinstance(value, Structure) and value.family is DataTypeFamily.STRING:
            node = _element(
                el.DATA, parent,
                Format=el.STRING_FORMAT,
                Length=str(string_length(value)),
            )
            node.text = self._text(string_text(value))
            return node
        node = _element(el.DATA, parent, Format=el.DECORATED)
        self.encode(value, node)
        return node

    # -- Structures ----------------------------------------------------------

    def _members(self, node: Any, value: Structure) -> None:
        is_string = value.family is DataTypeFamily.STRING
        for entry in value.members:
            if entry.hidden and not self.config.emit_hidden_members:
                continue
            if is_string and entry.name.upper() == STRING_DATA and isinstance(entry.value, Array):
                child = _element(
                    el.DATA_VALUE_MEMBER, node,
                    Name=entry.name,
                    DataType=value.name,
                    Radix=Radix.ASCII.value,
                )
                child.text = self._text(string_text(value))
                continue
            self._member(node, entry)

    def _member(self, node: Any, entry: MemberValue) -> None:
        value = entry.value
        if isinstance(value, Atomic):
            child = _element(
                el.DATA_VALUE_MEMBER, node,
                Name=entry.name,
                DataType=value.data_type.value,
                Radix=value.radix.value,
                Value=format_value(value.value, value.radix, value.data_type),
            )
        elif isinstance(value, Structure):
            child = _element(el.STRUCTURE_MEMBER, node, Name=entry.name, DataType=value.name)
            self._members(child, value)
        elif isinstance(value, Array):
            child = _element(el.ARRAY_MEMBER, node, Name=entry.name, DataType=value.element_type)
            self._array(child, value)
        else:
            child = _element(el.STRUCTURE_MEMBER, node, Name=entry.name, DataType=value.name)
        if entry.hidden:
            child.set(el.HIDDEN, "true")

    # -- Arrays --------------------------------------------------------------

    def _array(self, node: Any, value: Array) -> None:
        node.set(el.DIMENSIONS, el.format_dimensions(value.shape))
        radix = None
        first = value.elements[0] if value.elements else None
        if isinstance(first, Atomic):
            radix = first.radix
        elif first is None:
            candidate = default_radix(value.element_type)
            radix = candidate if candidate is not Radix.NULL else None
        if radix is not None:
            node.set(el.RADIX, radix.value)

        multi = len(value.shape) > 1
        for position, element in enumerate(value.elements):
            index = value.index_of(position) if multi else (position,)
            child = _element(el.ELEMENT, node, Index="[" + ",".join(map(str, index)) + "]")
            if isinstance(element, Atomic):
                child.set(el.VALUE, format_value(element.value, radix, element.data_type))
            elif isinstance(element, Structure):
                self.encode(element, child)
            else:
                _element(el.STRUCTURE, child, DataType=type_name(element))
