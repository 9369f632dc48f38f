"""Filters that decide whether an appender sees a record."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from logforge.record import LevelFilter, Record


class Response(Enum):
    """A filter's verdict on a record."""

    ACCEPT = "accept"
    NEUTRAL = "neutral"
    REJECT = "reject"


class Filter(ABC):
    """Limits the records sent to an appender."""

    @abstractmethod
    def filter(self, record: Record) -> Response:
        """Judge ``record``."""


def _require_mapping(mapping: object) -> Mapping[Any, Any]:
    if not isinstance(mapping, Mapping):
        raise TypeError(f"invalid type: expected a map, got {type(mapping).__name__}")
    return mapping


@dataclass
class FilterConfig:
    """The kind of a filter and the rest of its configuration."""

    kind: str
    config: dict[Any, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> FilterConfig:
        """Split a configuration mapping into its required kind and the rest."""
        config = dict(_require_mapping(mapping))
        if "kind" not in config:
            raise ValueError("missing field `kind`")
        kind = config.pop("kind")
        if not isinstance(kind, str):
            raise TypeError(
                f"invalid type for `kind`: expected a string, got {type(kind).__name__}"
            )
        return cls(kind=kind, config=config)


@dataclass(frozen=True)
class ThresholdFilterConfig:
    """Configuration of a threshold filter."""

    level: LevelFilter

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> ThresholdFilterConfig:
        """Read the required ``level`` field."""
        mapping = _require_mapping(mapping)
        if "level" not in mapping:
            raise ValueError("missing field `level`")
        return cls(level=LevelFilter.parse(mapping["level"]))


@dataclass(frozen=True)
class ThresholdFilter(Filter):
    """Rejects every record more verbose than a threshold."""

    level: LevelFilter

    def filter(self, record: Record) -> Response:
        if record.level > self.level:
            return Response.REJECT
        return Response.NEUTRAL

    @classmethod
    def from_config(
        cls, config: Union[ThresholdFilterConfig, Mapping[Any, Any]]
    ) -> ThresholdFilter:
        """Build a filter from its configuration object or mapping."""
        if not isinstance(config, ThresholdFilterConfig):
            config = ThresholdFilterConfig.from_mapping(config)
        return cls(config.level)