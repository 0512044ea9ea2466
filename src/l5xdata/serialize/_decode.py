"""Element -> value decoding.

Dispatch is on the element's tag:

- ``DataValue`` / ``DataValueMember``    -> Atomic
- ``Structure`` / ``StructureMember``    -> Structure (or Undefined)
- ``Array`` / ``ArrayMember``            -> Array of ``Element`` children
- ``Data`` / ``DefaultData``             -> the wrapped value

Error paths name the offending value the way a tag reference would read,
e.g. ``MOTOR.Speed`` or ``Values[3]``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from l5xdata.codec import ascii_bytes, parse_value
from l5xdata.config import SerializerConfig
from l5xdata.model import elements as el
from l5xdata.model.errors import DecodeMalformedError, RadixFormatError, TypeUnresolvedError
from l5xdata.model.types import (
    AtomicKind,
    DataTypeFamily,
    Radix,
    default_radix,
    name_key,
    supported_radixes,
)
from l5xdata.model.values import (
    Array,
    Atomic,
    LogixType,
    MemberValue,
    Structure,
    Undefined,
    type_name,
)
from l5xdata.registry import TypeRegistry

logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"^\[\s*(\d+(?:\s*,\s*\d+)*)\s*\]$")

STRING_DATA = "DATA"
STRING_LENGTH = "LEN"


def _required(node: Any, attribute: str, path: str) -> str:
    value = node.get(attribute)
    if value is None or value == "":
        raise DecodeMalformedError(path, f"<{node.tag}> is missing the {attribute} attribute")
    return value


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def flat_index(text: str, sizes: list[int], path: str) -> int:
    """``"[i]"`` / ``"[i,j]"`` -> row-major position within *sizes*."""
    match = _INDEX_RE.match(text.strip())
    if match is None:
        raise DecodeMalformedError(path, f"malformed element index {text!r}")
    indices = [int(part) for part in match.group(1).split(",")]
    if len(indices) != len(sizes):
        raise DecodeMalformedError(
            path, f"index {text!r} has {len(indices)} subscripts, array has {len(sizes)}"
        )
    position = 0
    for index, size in zip(indices, sizes):
        if index >= size:
            raise DecodeMalformedError(path, f"index {text!r} is out of bounds")
        position = position * size + index
    return position


def fill_string(value: Structure, text: str | None, path: str) -> int:
    """Write quoted ASCII *text* into a string structure's DATA array.

    Returns the number of characters written.
    """
    data = value.get(STRING_DATA)
    if not isinstance(data, Array):
        raise DecodeMalformedError(path, f"{value.name} has no {STRING_DATA} array")
    try:
        raw = ascii_bytes((text or "''").strip())
    except RadixFormatError as exc:
        raise DecodeMalformedError(path, str(exc)) from exc
    if len(raw) > data.length:
        raise DecodeMalformedError(
            path, f"string of {len(raw)} characters exceeds {value.name} capacity {data.length}"
        )
    for position, element in enumerate(data.elements):
        if not isinstance(element, Atomic):
            raise DecodeMalformedError(path, f"{value.name}.{STRING_DATA} is not atomic")
        byte = raw[position] if position < len(raw) else 0
        element.value = element.data_type.from_raw(byte)
    return len(raw)


def _atomic_value(kind: AtomicKind, value: object, radix: Radix, path: str) -> Atomic:
    try:
        return Atomic(data_type=kind, value=value, radix=radix)
    except ValidationError as exc:
        raise DecodeMalformedError(path, str(exc)) from None


def _check_member(entry: MemberValue, value: LogixType, path: str) -> None:
    """Reject a decoded value whose type or shape differs from its member."""
    member = entry.member
    if member.dimension:
        if not isinstance(value, Array):
            raise DecodeMalformedError(
                path, f"member is an array of {member.dimension} {member.data_type}, got a scalar"
            )
        if value.length != member.dimension:
            raise DecodeMalformedError(
                path, f"member holds {member.dimension} elements, got {value.length}"
            )
    elif isinstance(value, Array):
        raise DecodeMalformedError(path, f"member is a scalar {member.data_type}, got an array")
    if name_key(type_name(value)) != name_key(member.data_type):
        raise DecodeMalformedError(
            path, f"member is declared {member.data_type}, got {type_name(value)}"
        )


def set_string_length(value: Structure, length: int) -> None:
    entry = value.member(STRING_LENGTH)
    if entry is not None and isinstance(entry.value, Atomic):
        entry.value.value = length


class Decoder:
    """Decodes value elements against a registry."""

    def __init__(self, registry: TypeRegistry, config: SerializerConfig) -> None:
        self.registry = registry
        self.config = config

    # -- Entry points --------------------------------------------------------

    def decode(self, node: Any, path: str = "", radix: Radix | None = None) -> LogixType:
        """Decode one value element.

        *radix* is the declared radix of the member being decoded; it applies
        when the element carries no ``Radix`` attribute of its own.
        """
        path = path or node.get(el.NAME) or node.get(el.DATA_TYPE_ATTR) or ""
        tag = node.tag
        if tag in el.ATOMIC_ELEMENTS:
            return self._atomic(node, path, radix)
        if tag in el.STRUCTURE_ELEMENTS:
            return self._structure(node, path)
        if tag in el.ARRAY_ELEMENTS:
            return self._array(node, path, radix)
        if tag in el.DATA_WRAPPERS:
            return self.decode_data(node)
        if tag == el.ELEMENT:
            data_type = node.get(el.DATA_TYPE_ATTR)
            radix = node.get(el.RADIX)
            return self._element(
                node, path, data_type, Radix.parse(radix) if radix else None
            )
        raise DecodeMalformedError(path, f"unexpected element <{tag}>")

    def decode_data(self, node: Any, data_type: str | None = None) -> LogixType:
        """Decode a ``Data`` wrapper, or the preferred ``Data`` child of a tag.

        ``Format="Decorated"`` wraps one value element; ``Format="String"``
        holds quoted text for a string-family type (*data_type*, else the
        owner's ``DataType`` attribute, else ``STRING``).
        """
        if node.tag not in el.DATA_WRAPPERS:
            owner = node
            node = self._select_data(owner)
            data_type = data_type or owner.get(el.DATA_TYPE_ATTR)
        path = node.get(el.NAME) or ""
        form = node.get(el.FORMAT, el.DECORATED)

        if form == el.DECORATED:
            child = next(el.child_elements(node), None)
            if child is None:
                raise DecodeMalformedError(path or node.tag, "decorated data holds no value")
            return self.decode(child, path)

        if form == el.STRING_FORMAT:
            if data_type is None:
                parent = node.getparent()
                data_type = parent.get(el.DATA_TYPE_ATTR) if parent is not None else None
            return self._string_text(node, data_type or "STRING", path or node.tag)

        raise DecodeMalformedError(path or node.tag, f"unsupported data format {form!r}")

    # -- Atomics -------------------------------------------------------------

    def _atomic(self, node: Any, path: str, declared: Radix | None = None) -> LogixType:
        data_type = _required(node, el.DATA_TYPE_ATTR, path)
        kind = AtomicKind.lookup(data_type)
        if kind is None:
            return self._string_text(node, data_type, path)
        radix = self._radix(node, data_type, declared)
        return _atomic_value(kind, self._parse(_required(node, el.VALUE, path), radix, kind, path), radix, path)

    def _radix(self, node: Any, data_type: str, declared: Radix | None = None) -> Radix:
        token = node.get(el.RADIX)
        if token:
            return Radix.parse(token)
        kind = AtomicKind.lookup(data_type)
        if declared is not None and kind is not None and declared in supported_radixes(kind):
            return declared
        return default_radix(data_type)

    def _parse(self, text: str, radix: Radix, kind: AtomicKind, path: str):
        try:
            return parse_value(text, radix, kind)
        except RadixFormatError as exc:
            raise DecodeMalformedError(path, str(exc)) from exc

    def _string_text(self, node: Any, data_type: str, path: str) -> LogixType:
        value = self._instance(data_type, path)
        if isinstance(value, Undefined):
            return value
        if not (isinstance(value, Structure) and value.family is DataTypeFamily.STRING):
            raise DecodeMalformedError(path, f"{data_type} is neither atomic nor a string type")
        text = node.text if node.text is not None else node.get(el.VALUE)
        length = fill_string(value, text, path)
        declared = node.get(el.LENGTH)
        set_string_length(value, int(declared) if declared else length)
        return value

    # -- Structures ----------------------------------------------------------

    def _instance(self, data_type: str, path: str) -> LogixType:
        definition = self.registry.resolve(data_type)
        if isinstance(definition, Undefined):
            if self.config.strict_types:
                raise TypeUnresolvedError(data_type, path)
            logger.warning("Data type %r at %s is not defined; decoding as Undefined", data_type, path or "<root>")
            return definition
        if definition.is_atomic:
            return Atomic(data_type=definition.kind)
        return self.registry.builder.build(definition)

    def _structure(self, node: Any, path: str, fallback: str | None = None) -> LogixType:
        data_type = node.get(el.DATA_TYPE_ATTR) or fallback
        if not data_type:
            data_type = _required(node, el.DATA_TYPE_ATTR, path)
        value = self._instance(data_type, path)
        if isinstance(value, Undefined):
            return value
        if not isinstance(value, Structure):
            raise DecodeMalformedError(path, f"{data_type} is not a structure type")

        is_string = value.family is DataTypeFamily.STRING
        explicit: set[str] = set()
        for child in el.child_elements(node):
            name = _required(child, el.NAME, path)
            child_path = _join(path, name)
            entry = value.member(name)
            if entry is None:
                if self.config.strict_members:
                    raise DecodeMalformedError(child_path, f"{data_type} has no member {name!r}")
                logger.warning("Skipping %s: %s has no member %r", child_path, data_type, name)
                continue

            if (
                is_string
                and child.tag in el.ATOMIC_ELEMENTS
                and isinstance(entry.value, Array)
            ):
                fill_string(value, child.text if child.text is not None else child.get(el.VALUE), child_path)
            else:
                decoded = self.decode(child, child_path, entry.member.radix)
                _check_member(entry, decoded, child_path)
                entry.value = decoded
            explicit.add(name_key(entry.name))

        unpack = {
            name_key(entry.name) for entry in value.members
            if entry.member.target is not None
        } - explicit
        if unpack:
            value.unpack_backing(unpack)
        value.sync_backing()
        return value

    # -- Arrays --------------------------------------------------------------

    def _array(self, node: Any, path: str, declared: Radix | None = None) -> LogixType:
        data_type = _required(node, el.DATA_TYPE_ATTR, path)
        try:
            sizes = el.parse_dimensions(_required(node, el.DIMENSIONS, path))
        except ValueError as exc:
            raise DecodeMalformedError(path, str(exc)) from None
        length = math.prod(sizes) if sizes else 0
        radix = self._radix(node, data_type, declared)

        elements: list[LogixType | None] = [None] * length
        for child in el.child_elements(node, el.ELEMENT):
            index = _required(child, el.INDEX, path)
            position = flat_index(index, sizes, f"{path}{index}")
            if elements[position] is not None:
                raise DecodeMalformedError(f"{path}{index}", "duplicate element index")
            elements[position] = self._element(child, f"{path}{index}", data_type, radix)

        missing = [p for p, e in enumerate(elements) if e is None]
        if missing:
            raise DecodeMalformedError(
                f"{path}[{missing[0]}]", f"array of {length} elements is missing index {missing[0]}"
            )
        try:
            return Array(
                element_type=data_type,
                length=length,
                dimensions=sizes if len(sizes) > 1 else [],
                elements=elements,
            )
        except ValidationError as exc:
            raise DecodeMalformedError(path, str(exc)) from None

    def _element(
        self,
        node: Any,
        path: str,
        data_type: str | None,
        radix: Radix | None,
    ) -> LogixType:
        text = node.get(el.VALUE)
        if text is not None:
            kind = AtomicKind.lookup(data_type) if data_type else None
            if kind is None:
                raise DecodeMalformedError(path, f"valued element of non-atomic type {data_type!r}")
            radix = radix or default_radix(kind.value)
            return _atomic_value(kind, self._parse(text, radix, kind, path), radix, path)

        child = next(el.child_elements(node), None)
        if child is None:
            raise DecodeMalformedError(path, "element has neither a Value nor a nested value")
        if child.tag in el.STRUCTURE_ELEMENTS:
            return self._structure(child, path, data_type)
        return self.decode(child, path)

    # -- Helpers -------------------------------------------------------------

    def _select_data(self, owner: Any) -> Any:
        candidates = list(el.child_elements(owner, el.DATA, el.DEFAULT_DATA))
        for form in (el.DECORATED, el.STRING_FORMAT):
            for candidate in candidates:
                if candidate.get(el.FORMAT) == form:
                    return candidate
        if candidates:
            return candidates[0]
        raise DecodeMalformedError(owner.get(el.NAME) or owner.tag, "no Data element")
