"""CBOR serialization of records."""

from __future__ import annotations

import dataclasses
import io
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

import cbor2
from cbor2 import CBOREncodeTypeError


def _encode_dataclass(encoder: Any, value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        encoder.encode(dataclasses.asdict(value))
        return
    raise CBOREncodeTypeError(f"cannot serialize type {type(value).__name__}")


@dataclass
class CBORSerializer:
    """Serializes values as CBOR; dataclass instances are written as maps.

    ``enc_options`` and ``dec_options`` are passed to the CBOR encoder and decoder.
    """

    enc_options: Dict[str, Any] = field(default_factory=dict)
    dec_options: Dict[str, Any] = field(default_factory=dict)

    def _encode_kwargs(self) -> Dict[str, Any]:
        return {"default": _encode_dataclass, **self.enc_options}

    def serialize(self, value: Any) -> bytes:
        return cbor2.dumps(value, **self._encode_kwargs())

    def deserialize(self, data: bytes) -> Any:
        return cbor2.loads(data, **self.dec_options)

    def serialize_func_with_buffer(self, buff: io.BytesIO) -> Callable[[Any], bytes]:
        """Serializer that reuses ``buff``, emptying it before each value."""
        kwargs = self._encode_kwargs()

        def serialize(value: Any) -> bytes:
            buff.seek(0)
            buff.truncate()
            cbor2.dump(value, buff, **kwargs)
            return buff.getvalue()

        return serialize