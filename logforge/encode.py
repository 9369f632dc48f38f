"""Styles, the writer interface and the encoder interface."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from logforge.record import Record

NEWLINE = "\r\n" if os.name == "nt" else "\n"


class Color(Enum):
    """A text or background color."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


@dataclass(frozen=True)
class Style:
    """The style applied to text output; ``None`` fields use the writer's default."""

    text: Optional[Color] = None
    background: Optional[Color] = None
    intense: Optional[bool] = None


class Writer(ABC):
    """Something an encoder writes bytes to, optionally with styling."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes consumed."""

    def set_style(self, style: Style) -> None:
        """Set the output style; writers without styling ignore it."""
        return None

    def flush(self) -> None:
        """Flush buffered output."""
        return None


class Encoder(ABC):
    """Turns a record into bytes written to a writer."""

    @abstractmethod
    def encode(self, writer: Writer, record: Record) -> None:
        """Encode ``record`` into ``writer``."""


@dataclass
class EncoderConfig:
    """The kind of an encoder and the rest of its configuration."""

    kind: str
    config: dict[Any, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> EncoderConfig:
        """Split a configuration mapping into its kind, defaulting to ``pattern``."""
        if not isinstance(mapping, Mapping):
            raise TypeError(
                f"invalid type: expected a map, got {type(mapping).__name__}"
            )
        config = dict(mapping)
        kind = config.pop("kind", "pattern")
        if not isinstance(kind, str):
            raise TypeError(
                f"invalid type for `kind`: expected a string, got {type(kind).__name__}"
            )
        return cls(kind=kind, config=config)