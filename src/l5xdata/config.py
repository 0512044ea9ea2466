"""Serializer configuration."""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict

ENV_PREFIX = "L5XDATA_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class SerializerConfig(BaseModel):
    """Options controlling how values are decoded and encoded.

    - ``emit_hidden_members``: write hidden backing members (``Hidden="true"``)
      when encoding structures. Disable to write only public members.
    - ``strict_members``: raise ``DecodeMalformedError`` for a child element
      that matches no member of its structure instead of skipping it.
    - ``strict_types``: raise ``TypeUnresolvedError`` for an unresolved type
      instead of decoding it as ``Undefined``.
    - ``string_cdata``: wrap string text in CDATA sections when encoding.
    """

    model_config = ConfigDict(frozen=True)

    emit_hidden_members: bool = True
    strict_members: bool = False
    strict_types: bool = False
    string_cdata: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SerializerConfig:
        """Read ``L5XDATA_<FIELD>`` variables, e.g. ``L5XDATA_STRICT_TYPES=1``."""
        if environ is None:
            environ = os.environ
        values: dict[str, bool] = {}
        for field in cls.model_fields:
            raw = environ.get(ENV_PREFIX + field.upper())
            if raw is None:
                continue
            token = raw.strip().lower()
            if token in _TRUE:
                values[field] = True
            elif token in _FALSE:
                values[field] = False
            else:
                raise ValueError(f"{ENV_PREFIX}{field.upper()}={raw!r} is not a boolean")
        return cls(**values)
