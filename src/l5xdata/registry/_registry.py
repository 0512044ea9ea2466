"""Per-document type registry.

``resolve(name)`` looks a type name up in priority order, first match wins:

1. built-in atomic types
2. predefined structures (TIMER, COUNTER, CONTROL, STRING, MESSAGE, PID, ...)
3. definitions registered with ``register`` and the document's ``DataType``
   entries
4. structures embedded in module connection data
5. Add-On Instruction definitions

Unknown names resolve to ``Undefined``. Definitions are expanded (backing
members synthesized) once, memoized by case-folded name and shared
read-only. Every structure is checked for self-containment before it is
handed out.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from l5xdata.model.errors import CircularReferenceError, NameCollisionError
from l5xdata.model.types import Radix, TypeDefinition, name_key
from l5xdata.model.values import LogixType, Undefined

from ._builder import StructureBuilder
from ._index import ComponentIndex, SourceKind
from ._predefined import builtin
from ._sources import read_data_type, read_instruction, read_module_structure

logger = logging.getLogger(__name__)

_READERS: dict[SourceKind, Callable[[Any], TypeDefinition]] = {
    SourceKind.DATA_TYPE: read_data_type,
    SourceKind.MODULE: read_module_structure,
    SourceKind.INSTRUCTION: read_instruction,
}


class TypeRegistry:
    """Resolves type names for one document.

    Safe to share between threads: the first resolution of a name runs
    under a lock with a double-checked lookup, so exactly one definition is
    built per name.
    """

    def __init__(self, index: ComponentIndex | None = None) -> None:
        self._index = index if index is not None else ComponentIndex()
        self._builder = StructureBuilder(self.resolve)
        self._lock = threading.RLock()
        self._cache: dict[str, TypeDefinition] = {}
        self._registered: dict[str, TypeDefinition] = {}
        self._verified: set[str] = set()

    @classmethod
    def for_document(cls, root: Any) -> TypeRegistry:
        return cls(ComponentIndex(root))

    @property
    def index(self) -> ComponentIndex:
        return self._index

    @property
    def builder(self) -> StructureBuilder:
        return self._builder

    # -- Resolution ----------------------------------------------------------

    def resolve(self, name: str) -> TypeDefinition | Undefined:
        definition = self._lookup(name)
        if definition is None:
            logger.debug("Data type %r is not defined", name)
            return Undefined(name=name)
        if definition.is_structure:
            self._check_cycles(definition)
        return definition

    def is_defined(self, name: str) -> bool:
        return self._lookup(name) is not None

    def definitions(self) -> list[TypeDefinition]:
        """Registered and document definitions, in registration then scan order."""
        names = [d.name for d in self._registered.values()]
        names.extend(self._index.names())
        seen: set[str] = set()
        result = []
        for name in names:
            key = name_key(name)
            if key in seen:
                continue
            seen.add(key)
            definition = self.resolve(name)
            if isinstance(definition, TypeDefinition):
                result.append(definition)
        return result

    def instantiate(
        self,
        name: str,
        dimension: int = 0,
        radix: Radix | None = None,
    ) -> LogixType:
        """Fresh default value of *name*: zeroed atomics, default members."""
        return self._builder.instantiate(name, dimension, radix)

    # -- Registration --------------------------------------------------------

    def register(self, definition: TypeDefinition) -> TypeDefinition:
        """Add a caller-supplied definition and return its expanded form.

        Raises ``NameCollisionError`` if the name is built in, already
        registered or defined by the document, and
        ``CircularReferenceError`` if the definition contains itself.
        """
        key = name_key(definition.name)
        with self._lock:
            if (
                builtin(definition.name) is not None
                or key in self._registered
                or definition.name in self._index
            ):
                raise NameCollisionError(definition.name, "type registry")
            expanded = self._builder.expand(definition)
            # a new name can close a cycle through previously verified types
            self._verified.clear()
            self._check_cycles(expanded)
            self._cache[key] = expanded
            self._registered[key] = expanded
        logger.debug("Registered data type %s", expanded.name)
        return expanded

    # -- Internals -----------------------------------------------------------

    def _lookup(self, name: str) -> TypeDefinition | None:
        """Expanded definition for *name* without the containment check."""
        definition = builtin(name)
        if definition is not None:
            return definition
        key = name_key(name)
        definition = self._cache.get(key)
        if definition is not None:
            return definition
        with self._lock:
            definition = self._cache.get(key)
            if definition is None:
                definition = self._load(name)
                if definition is not None:
                    self._cache[key] = definition
        return definition

    def _load(self, name: str) -> TypeDefinition | None:
        entry = self._index.lookup(name)
        if entry is None:
            return None
        definition = _READERS[entry.source](entry.node)
        logger.debug("Loaded data type %s from %s", definition.name, entry.source.value)
        return self._builder.expand(definition)

    def _check_cycles(self, root: TypeDefinition) -> None:
        """Walk member types depth-first without recursion.

        Names on the current path detect containment; names whose whole
        subtree has been walked are remembered and never walked again.
        """
        root_key = name_key(root.name)
        if root_key in self._verified:
            return
        with self._lock:
            path = [root.name]
            path_keys = [root_key]
            stack = [iter(root.dependencies())]
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    path.pop()
                    self._verified.add(path_keys.pop())
                    continue
                key = name_key(child)
                if key in path_keys:
                    cycle = path[path_keys.index(key):] + [child]
                    raise CircularReferenceError(root.name, cycle)
                if key in self._verified:
                    continue
                definition = self._lookup(child)
                if definition is None or not definition.is_structure:
                    continue
                path.append(definition.name)
                path_keys.append(key)
                stack.append(iter(definition.dependencies()))
