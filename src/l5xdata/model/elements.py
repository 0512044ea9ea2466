"""Element and attribute names of the L5X interchange grammar.

Definitions use ``Dimension`` on members; value containers and instruction
parameters use ``Dimensions``.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Definition-bearing regions
# ---------------------------------------------------------------------------

DATA_TYPE = "DataType"
MEMBERS = "Members"
MEMBER = "Member"
DESCRIPTION = "Description"
MODULE = "Module"
ADD_ON_INSTRUCTION = "AddOnInstructionDefinition"
PARAMETERS = "Parameters"
PARAMETER = "Parameter"
LOCAL_TAGS = "LocalTags"
LOCAL_TAG = "LocalTag"

# ---------------------------------------------------------------------------
# Value containers
# ---------------------------------------------------------------------------

DATA = "Data"
DEFAULT_DATA = "DefaultData"
DATA_VALUE = "DataValue"
DATA_VALUE_MEMBER = "DataValueMember"
STRUCTURE = "Structure"
STRUCTURE_MEMBER = "StructureMember"
ARRAY = "Array"
ARRAY_MEMBER = "ArrayMember"
ELEMENT = "Element"

ATOMIC_ELEMENTS = frozenset({DATA_VALUE, DATA_VALUE_MEMBER})
STRUCTURE_ELEMENTS = frozenset({STRUCTURE, STRUCTURE_MEMBER})
ARRAY_ELEMENTS = frozenset({ARRAY, ARRAY_MEMBER})
DATA_WRAPPERS = frozenset({DATA, DEFAULT_DATA})

# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

NAME = "Name"
DATA_TYPE_ATTR = "DataType"
FAMILY = "Family"
CLASS = "Class"
DIMENSION = "Dimension"
DIMENSIONS = "Dimensions"
RADIX = "Radix"
VALUE = "Value"
INDEX = "Index"
HIDDEN = "Hidden"
TARGET = "Target"
BIT_NUMBER = "BitNumber"
EXTERNAL_ACCESS = "ExternalAccess"
USAGE = "Usage"
FORMAT = "Format"
LENGTH = "Length"

# Data formats
DECORATED = "Decorated"
STRING_FORMAT = "String"

# Parameter usage excluded from an instruction's data structure
IN_OUT = "InOut"


def child_elements(element, *tags: str):
    """Element children of *element* (comments and processing instructions
    skipped), optionally limited to the given tag names."""
    for child in element:
        if not isinstance(child.tag, str):
            continue
        if tags and child.tag not in tags:
            continue
        yield child


def find_child(element, tag: str):
    """First element child named *tag*, or ``None``."""
    return next(child_elements(element, tag), None)


def parse_dimensions(text: str | None) -> list[int]:
    """``"4"``, ``"2,3"`` or ``"2 3"`` -> list of sizes; empty/``"0"`` -> ``[]``."""
    if text is None:
        return []
    parts = [p for p in re.split(r"[,\s]+", text.strip()) if p]
    sizes = [int(p) for p in parts]
    if any(size < 0 for size in sizes):
        raise ValueError(f"negative dimension in {text!r}")
    if sizes == [0]:
        return []
    return sizes


def format_dimensions(sizes: list[int]) -> str:
    return ",".join(str(size) for size in sizes)
