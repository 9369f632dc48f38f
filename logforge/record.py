"""Log levels, log records and the thread-local mapped diagnostic context."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, TypeVar

_L = TypeVar("_L", bound=IntEnum)


def _parse_named(cls: type[_L], text: object) -> _L:
    if isinstance(text, cls):
        return text
    if not isinstance(text, str):
        raise TypeError(f"invalid type: expected a string, got {type(text).__name__}")
    try:
        return cls[text.upper()]
    except KeyError:
        expected = ", ".join(f"`{member.name}`" for member in cls)
        raise ValueError(
            f"unknown variant `{text}`, expected one of {expected}"
        ) from None


class Level(IntEnum):
    """The severity of a log record; more verbose levels compare greater."""

    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    def __str__(self) -> str:
        return self.name

    def __format__(self, spec: str) -> str:
        return format(self.name, spec)

    @classmethod
    def parse(cls, text: object) -> Level:
        """Parse a level name, ignoring case."""
        return _parse_named(cls, text)


class LevelFilter(IntEnum):
    """The most verbose level let through; ``OFF`` lets nothing through."""

    OFF = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    def __str__(self) -> str:
        return self.name

    def __format__(self, spec: str) -> str:
        return format(self.name, spec)

    @classmethod
    def parse(cls, text: object) -> LevelFilter:
        """Parse a level filter name, ignoring case."""
        return _parse_named(cls, text)


@dataclass(frozen=True)
class Record:
    """A single log event."""

    level: Level = Level.INFO
    target: str = ""
    message: str = ""
    module_path: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None


_mdc = threading.local()


def _context() -> dict[str, str]:
    try:
        return _mdc.values
    except AttributeError:
        _mdc.values = {}
        return _mdc.values


def insert_mdc(key: str, value: str) -> None:
    """Set ``key`` to ``value`` in the current thread's context."""
    _context()[key] = value


def get_mdc(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value of ``key`` in the current thread's context."""
    return _context().get(key, default)


def remove_mdc(key: str) -> Optional[str]:
    """Remove ``key`` from the current thread's context, returning its value."""
    return _context().pop(key, None)


def clear_mdc() -> None:
    """Remove every entry from the current thread's context."""
    _context().clear()


def mdc_items() -> list[tuple[str, str]]:
    """Return the current thread's context entries in insertion order."""
    return list(_context().items())