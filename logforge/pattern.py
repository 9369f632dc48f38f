"""An encoder configured by a format string."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from logforge.chunks import Chunk, ErrorChunk, chunk_from_piece
from logforge.encode import Encoder, Writer
from logforge.parser import Parser
from logforge.record import Record

DEFAULT_PATTERN = "{d} {l} {t} - {m}{n}"


@dataclass(frozen=True)
class PatternEncoder(Encoder):
    """Formats records by following a pattern string."""

    pattern: str = DEFAULT_PATTERN
    chunks: tuple[Chunk, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = tuple(chunk_from_piece(piece) for piece in Parser(self.pattern))
        object.__setattr__(self, "chunks", compiled)

    def encode(self, writer: Writer, record: Record) -> None:
        for chunk in self.chunks:
            chunk.encode(writer, record)

    def errors(self) -> list[str]:
        """Return the messages of the pattern's top-level chunks that failed to compile."""
        return [chunk.message for chunk in self.chunks if isinstance(chunk, ErrorChunk)]

    @classmethod
    def from_config(cls, mapping: Optional[Mapping[Any, Any]] = None) -> PatternEncoder:
        """Build an encoder from a mapping with an optional ``pattern`` field."""
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise TypeError(
                f"invalid type: expected a map, got {type(mapping).__name__}"
            )
        for key in mapping:
            if key not in ("kind", "pattern"):
                raise ValueError(f"unknown field `{key}`, expected `pattern`")
        pattern = mapping.get("pattern")
        if pattern is None:
            return cls()
        if not isinstance(pattern, str):
            raise TypeError(
                f"invalid type for `pattern`: expected a string, "
                f"got {type(pattern).__name__}"
            )
        return cls(pattern)