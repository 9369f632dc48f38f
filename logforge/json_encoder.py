"""An encoder that writes each record as a JSON object on its own line."""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from logforge.chunks import _rfc3339, _write_all
from logforge.encode import NEWLINE, Encoder, Writer
from logforge.record import Record, mdc_items


@dataclass(frozen=True)
class JsonEncoder(Encoder):
    """Writes a JSON object per record, followed by a newline."""

    def encode(self, writer: Writer, record: Record) -> None:
        self.encode_at(writer, datetime.now().astimezone(), record)

    def encode_at(self, writer: Writer, time: datetime, record: Record) -> None:
        """Encode ``record`` as if it had been logged at ``time``."""
        if time.tzinfo is None:
            time = time.astimezone()
        thread = threading.current_thread()
        message: dict[str, Any] = {
            "time": _rfc3339(time),
            "level": str(record.level),
            "message": record.message,
        }
        if record.module_path is not None:
            message["module_path"] = record.module_path
        if record.file is not None:
            message["file"] = record.file
        if record.line is not None:
            message["line"] = record.line
        message["target"] = record.target
        message["thread"] = thread.name
        message["thread_id"] = threading.get_ident()
        message["mdc"] = dict(mdc_items())
        text = json.dumps(message, ensure_ascii=False, separators=(",", ":"))
        _write_all(writer, (text + NEWLINE).encode("utf-8"))

    @classmethod
    def from_config(cls, mapping: Optional[Mapping[Any, Any]] = None) -> JsonEncoder:
        """Build an encoder from its configuration, which has no fields."""
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise TypeError(
                f"invalid type: expected a map, got {type(mapping).__name__}"
            )
        for key in mapping:
            if key != "kind":
                raise ValueError(f"unknown field `{key}`, there are no fields")
        return cls()