"""The logger: a hierarchy of named loggers routing records to appenders."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from logforge.filter import Filter, Response
from logforge.record import Level, LevelFilter, Record

ErrorHandler = Callable[[BaseException], None]


def handle_error(error: BaseException) -> None:
    """Report an appender error on standard error."""
    try:
        print(f"logforge: {error}", file=sys.stderr)
    except Exception:
        pass


@dataclass
class AppenderEntry:
    """A named appender and the filters in front of it."""

    name: str
    appender: Any
    filters: Sequence[Filter] = ()

    def append(self, record: Record) -> None:
        """Run the filters, then pass the record on unless one rejected it."""
        for flt in self.filters:
            response = flt.filter(record)
            if response is Response.ACCEPT:
                break
            if response is Response.REJECT:
                return
        self.appender.append(record)

    def flush(self) -> None:
        """Flush the appender."""
        self.appender.flush()


@dataclass
class LoggerConfig:
    """Configuration of one named logger."""

    name: str
    level: Union[LevelFilter, str]
    appenders: Sequence[str] = ()
    additive: bool = True

    def __post_init__(self) -> None:
        self.level = LevelFilter.parse(self.level)
        self.appenders = tuple(self.appenders)


@dataclass
class _Node:
    level: LevelFilter
    appenders: list[int]
    children: dict[str, _Node] = field(default_factory=dict)

    def add(
        self, path: str, appenders: list[int], additive: bool, level: LevelFilter
    ) -> None:
        part, _, rest = path.partition("::")
        existing = self.children.get(part)
        if existing is not None:
            existing.add(rest, appenders, additive, level)
            return
        if not rest:
            if additive:
                appenders = appenders + self.appenders
            child = _Node(level, appenders)
        else:
            child = _Node(self.level, list(self.appenders))
            child.add(rest, appenders, additive, level)
        self.children[part] = child

    def max_log_level(self) -> LevelFilter:
        return max(
            [self.level, *(child.max_log_level() for child in self.children.values())]
        )

    def find(self, path: str) -> _Node:
        node = self
        for part in path.split("::"):
            child = node.children.get(part)
            if child is None:
                break
            node = child
        return node

    def enabled(self, level: Level) -> bool:
        return self.level >= level


@dataclass
class _Shared:
    root: _Node
    appenders: list[AppenderEntry]
    err_handler: ErrorHandler


class Logger:
    """Routes records to appenders according to a logger hierarchy."""

    def __init__(
        self,
        root_level: Union[LevelFilter, str],
        root_appenders: Iterable[str] = (),
        appenders: Iterable[AppenderEntry] = (),
        loggers: Iterable[LoggerConfig] = (),
        err_handler: Optional[ErrorHandler] = None,
    ) -> None:
        entries = list(appenders)
        index = {entry.name: position for position, entry in enumerate(entries)}

        def resolve(names: Iterable[str]) -> list[int]:
            resolved = []
            for name in names:
                if name not in index:
                    raise ValueError(f"unknown appender `{name}`")
                resolved.append(index[name])
            return resolved

        root = _Node(LevelFilter.parse(root_level), resolve(root_appenders))
        # parents must exist before their children are added
        for logger in sorted(loggers, key=lambda config: len(config.name)):
            root.add(
                logger.name, resolve(logger.appenders), logger.additive, logger.level
            )
        self._shared = _Shared(root, entries, err_handler or handle_error)

    def enabled(self, target: str, level: Level) -> bool:
        """Return whether a record at ``level`` for ``target`` would be logged."""
        return self._shared.root.find(target).enabled(level)

    def log(self, record: Record) -> None:
        """Send ``record`` to its logger's appenders, reporting any errors."""
        shared = self._shared
        node = shared.root.find(record.target)
        if not node.enabled(record.level):
            return
        errors = []
        for position in node.appenders:
            try:
                shared.appenders[position].append(record)
            except Exception as err:
                errors.append(err)
        for err in errors:
            shared.err_handler(err)

    def flush(self) -> None:
        """Flush every appender."""
        for entry in self._shared.appenders:
            entry.flush()

    def max_log_level(self) -> LevelFilter:
        """Return the most verbose level any logger lets through."""
        return self._shared.root.max_log_level()


class Handle:
    """Lets the active logger's configuration be replaced while it is in use."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger
        self.max_level = logger.max_log_level()

    def set_logger(self, logger: Logger) -> None:
        """Make the active logger behave as ``logger`` from now on."""
        self.logger._shared = logger._shared
        self.max_level = logger.max_log_level()