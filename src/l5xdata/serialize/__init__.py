"""l5xdata serialize: value elements <-> LogixType values.

Entry point::

    from l5xdata.registry import TypeRegistry
    from l5xdata.serialize import Serializer

    serializer = Serializer(TypeRegistry.for_document(root))
    value = serializer.decode(structure_element)
    element = serializer.encode(value)
"""

from __future__ import annotations

from typing import Any

from l5xdata.config import SerializerConfig
from l5xdata.model.types import TypeDefinition
from l5xdata.model.values import LogixType
from l5xdata.registry import TypeRegistry

from ._decode import Decoder, flat_index
from ._definitions import write_definition
from ._encode import Encoder, string_text


class Serializer:
    """Bidirectional codec between value elements and ``LogixType`` values.

    Parameters
    ----------
    registry
        Resolves the type names found while decoding. Defaults to an
        empty registry (built-in and predefined types only).
    config
        Decoding strictness and encoding options. Defaults to
        ``SerializerConfig()``.
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        config: SerializerConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else TypeRegistry()
        self.config = config if config is not None else SerializerConfig()
        self._decoder = Decoder(self.registry, self.config)
        self._encoder = Encoder(self.config)

    def decode(self, element: Any) -> LogixType:
        return self._decoder.decode(element)

    def encode(self, value: LogixType, parent: Any = None) -> Any:
        return self._encoder.encode(value, parent)

    def decode_data(self, element: Any, data_type: str | None = None) -> LogixType:
        return self._decoder.decode_data(element, data_type)

    def encode_data(self, value: LogixType, parent: Any = None) -> Any:
        return self._encoder.encode_data(value, parent)

    def write_definition(self, definition: TypeDefinition, parent: Any = None) -> Any:
        return write_definition(definition, parent, cdata=self.config.string_cdata)


__all__ = [
    "Serializer",
    "SerializerConfig",
    "flat_index",
    "string_text",
    "write_definition",
]
