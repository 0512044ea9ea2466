"""l5xdata registry: type-name resolution for one document.

Public API::

    from l5xdata.registry import TypeRegistry

    registry = TypeRegistry.for_document(root)
    motor = registry.resolve("MOTOR")        # TypeDefinition or Undefined
    value = registry.instantiate("MOTOR")    # fresh Structure
"""

from ._builder import BACKING_PREFIX, StructureBuilder, backing_name
from ._index import ComponentIndex, IndexEntry, SourceKind
from ._predefined import (
    ALARM_ANALOG,
    ALARM_DIGITAL,
    CONTROL,
    COUNTER,
    MESSAGE,
    PID,
    STRING,
    STRING_LENGTH,
    TIMER,
    builtin,
)
from ._registry import TypeRegistry
from ._sources import read_data_type, read_instruction, read_module_structure

__all__ = [
    "ALARM_ANALOG",
    "ALARM_DIGITAL",
    "BACKING_PREFIX",
    "COUNTER",
    "CONTROL",
    "ComponentIndex",
    "IndexEntry",
    "MESSAGE",
    "PID",
    "STRING",
    "STRING_LENGTH",
    "SourceKind",
    "StructureBuilder",
    "TIMER",
    "TypeRegistry",
    "backing_name",
    "builtin",
    "read_data_type",
    "read_instruction",
    "read_module_structure",
]
