"""Protocol Buffers serialization of records.

Messages that provide ``marshal_vt``/``unmarshal_vt`` are encoded with those
methods directly. Otherwise standard messages (with ``SerializeToString`` and
``ParseFromString``) are handed to the configured encoder and decoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


def _is_message(value: Any) -> bool:
    return callable(getattr(value, "SerializeToString", None)) and callable(
        getattr(value, "ParseFromString", None)
    )


@dataclass
class ProtobufSerializer:
    """Serializer for protobuf messages with optional fast-path methods."""

    encoder: Optional[Callable[[Any], bytes]] = None
    decoder: Optional[Callable[[bytes, Any], Any]] = None
    skip_vt: bool = False

    def serialize(self, message: Any) -> bytes:
        if not self.skip_vt:
            marshal_vt = getattr(message, "marshal_vt", None)
            if callable(marshal_vt):
                return marshal_vt()
        if self.encoder is not None and _is_message(message):
            return self.encoder(message)
        raise TypeError(f"{type(message).__name__} does not implement protobuf marshaler")

    def deserialize(self, data: bytes, message: Any) -> Any:
        """Fill ``message`` from ``data`` and return it."""
        if not self.skip_vt:
            unmarshal_vt = getattr(message, "unmarshal_vt", None)
            if callable(unmarshal_vt):
                unmarshal_vt(data)
                return message
        if self.decoder is not None and _is_message(message):
            self.decoder(data, message)
            return message
        raise TypeError(f"{type(message).__name__} does not implement protobuf unmarshaler")