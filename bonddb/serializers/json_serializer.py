"""JSON serialization of records."""

from __future__ import annotations

import dataclasses
import json
from typing import Any


def _default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonSerializer:
    """Serializes values as compact UTF-8 JSON; dataclasses become objects."""

    def serialize(self, value: Any) -> bytes:
        return json.dumps(
            value, separators=(",", ":"), ensure_ascii=False, default=_default
        ).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data)