"""Name index over the definition-bearing regions of a document.

One pass over the document, in priority order:

1. ``DataType`` entries
2. ``Structure`` / ``StructureMember`` elements carrying a ``DataType``
   inside ``Module`` connection data
3. ``AddOnInstructionDefinition`` entries

The first element seen for a name wins; later duplicates are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from l5xdata.model import elements as el
from l5xdata.model.types import name_key

logger = logging.getLogger(__name__)


class SourceKind(str, Enum):
    """Where in a document a definition was found, in resolution priority order."""

    DATA_TYPE = "DataType"
    MODULE = "Module"
    INSTRUCTION = "AddOnInstruction"


@dataclass(frozen=True)
class IndexEntry:
    name: str
    source: SourceKind
    node: Any


class ComponentIndex:
    """Case-insensitive ``name -> IndexEntry`` map built from a document root."""

    def __init__(self, root: Any = None) -> None:
        self._entries: dict[str, IndexEntry] = {}
        if root is not None:
            self._scan(root)

    @classmethod
    def build(cls, root: Any) -> ComponentIndex:
        return cls(root)

    # -- Scanning ------------------------------------------------------------

    def _scan(self, root: Any) -> None:
        for node in root.iter(el.DATA_TYPE):
            self._add(node.get(el.NAME), SourceKind.DATA_TYPE, node)

        for module in root.iter(el.MODULE):
            for node in module.iter(el.STRUCTURE, el.STRUCTURE_MEMBER):
                self._add(node.get(el.DATA_TYPE_ATTR), SourceKind.MODULE, node)

        for node in root.iter(el.ADD_ON_INSTRUCTION):
            self._add(node.get(el.NAME), SourceKind.INSTRUCTION, node)

        logger.debug("Indexed %d definitions", len(self._entries))

    def _add(self, name: str | None, source: SourceKind, node: Any) -> None:
        if not name:
            return
        key = name_key(name)
        existing = self._entries.get(key)
        if existing is not None:
            logger.debug(
                "Ignoring duplicate %s definition %r (already indexed from %s)",
                source.value, name, existing.source.value,
            )
            return
        self._entries[key] = IndexEntry(name=name, source=source, node=node)

    # -- Lookup --------------------------------------------------------------

    def lookup(self, name: str) -> IndexEntry | None:
        return self._entries.get(name_key(name))

    def names(self, source: SourceKind | None = None) -> list[str]:
        """Indexed names in scan order, optionally limited to one source."""
        return [
            entry.name for entry in self._entries.values()
            if source is None or entry.source is source
        ]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name_key(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries.values())
