"""Binary key layout: field builders, key encoding, decoding and prefix splitting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

PRIMARY_INDEX_ID = 0

SIGN_NEGATIVE = 0x00
SIGN_ZERO = 0x01
SIGN_POSITIVE = 0x02

# TableID (1 byte) + IndexID (1 byte) + index length (4 bytes)
_KEY_PREFIX_SPLIT_INDEX_OFFSET = 6

BufferFunc = Callable[[bytearray], bytes]


def _u32(value: int) -> bytes:
    return value.to_bytes(4, "big")


def _read_u32(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 4], "big")


class KeyBuilder:
    """Builds order-preserving binary keys out of typed fields.

    Every field is preceded by a one-byte field number starting at 1.
    All ``add_*`` methods return the builder so calls can be chained.
    """

    def __init__(self, buff: bytes = b"") -> None:
        self._buff = bytearray(buff)
        self._fid = 0

    def reset(self) -> "KeyBuilder":
        self._buff.clear()
        self._fid = 0
        return self

    def _put_field_id(self) -> None:
        self._buff.append((self._fid + 1) & 0xFF)
        self._fid = (self._fid + 1) & 0xFF

    def _add_signed(self, value: int, width: int) -> "KeyBuilder":
        bits = width * 8
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if not low <= value <= high:
            raise ValueError(f"value {value} does not fit in int{bits}")
        mask = (1 << bits) - 1
        if value > 0:
            sign, unsigned = SIGN_POSITIVE, value
        elif value == 0:
            sign, unsigned = SIGN_ZERO, 0
        else:
            sign, unsigned = SIGN_NEGATIVE, ~(-value) & mask
        self._put_field_id()
        self._buff.append(sign)
        self._buff += unsigned.to_bytes(width, "big")
        return self

    def _add_unsigned(self, value: int, width: int) -> "KeyBuilder":
        if not 0 <= value < (1 << (width * 8)):
            raise ValueError(f"value {value} does not fit in uint{width * 8}")
        self._put_field_id()
        self._buff += value.to_bytes(width, "big")
        return self

    def add_int64_field(self, i: int) -> "KeyBuilder":
        return self._add_signed(i, 8)

    def add_int32_field(self, i: int) -> "KeyBuilder":
        return self._add_signed(i, 4)

    def add_int16_field(self, i: int) -> "KeyBuilder":
        return self._add_signed(i, 2)

    def add_uint64_field(self, i: int) -> "KeyBuilder":
        return self._add_unsigned(i, 8)

    def add_uint32_field(self, i: int) -> "KeyBuilder":
        return self._add_unsigned(i, 4)

    def add_uint16_field(self, i: int) -> "KeyBuilder":
        return self._add_unsigned(i, 2)

    def add_byte_field(self, b: int) -> "KeyBuilder":
        return self._add_unsigned(b, 1)

    def add_string_field(self, s: str) -> "KeyBuilder":
        self._put_field_id()
        self._buff += s.encode("utf-8")
        return self

    def add_bytes_field(self, bs: bytes) -> "KeyBuilder":
        self._put_field_id()
        self._buff += bs
        return self

    def add_big_int_field(self, bi: int, bits: int) -> "KeyBuilder":
        """Append a signed integer stored in ``bits`` bits, sign byte first.

        Negative values are stored as the bitwise complement of their magnitude.
        """
        length = bits >> 3
        magnitude = -bi if bi < 0 else bi
        try:
            body = bytearray(magnitude.to_bytes(length, "big"))
        except OverflowError as exc:
            raise ValueError(f"value {bi} does not fit in {bits} bits") from exc
        sign = SIGN_NEGATIVE if bi < 0 else SIGN_ZERO if bi == 0 else SIGN_POSITIVE
        if bi < 0:
            body = bytearray(~b & 0xFF for b in body)
        self._put_field_id()
        self._buff.append(sign)
        self._buff += body
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buff)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


@dataclass(frozen=True)
class Key:
    """Decoded key: table, index, index value, index order and primary key."""

    table_id: int
    index_id: int
    index: bytes = b""
    index_order: bytes = b""
    primary_key: bytes = b""

    def to_data_key(self) -> "Key":
        return Key(self.table_id, PRIMARY_INDEX_ID, b"", b"", self.primary_key)

    def to_key_prefix(self) -> "Key":
        return Key(self.table_id, self.index_id, self.index, b"", b"")

    def is_data_key(self) -> bool:
        return self.index_id == PRIMARY_INDEX_ID and len(self.index) == 0

    def is_index_key(self) -> bool:
        return self.index_id != PRIMARY_INDEX_ID and len(self.index) != 0

    def is_key_prefix(self) -> bool:
        return len(self.primary_key) == 0


def key_encode(key: Key) -> bytes:
    """Encode a key; a key without primary key is encoded as a prefix."""
    out = bytearray((key.table_id, key.index_id))
    out += _u32(len(key.index))
    out += key.index
    if not key.is_key_prefix():
        out += _u32(len(key.index_order))
        out += key.index_order
        out += key.primary_key
    return bytes(out)


def key_encode_raw(
    table_id: int,
    index_id: int,
    index_func: Optional[BufferFunc],
    index_order_func: Optional[BufferFunc],
    primary_key_func: Optional[BufferFunc],
) -> bytes:
    """Encode a key by letting callbacks extend the buffer part by part.

    Each callback receives the buffer built so far and returns it extended.
    Without ``primary_key_func`` only the prefix is produced.
    """
    buff = bytearray((table_id, index_id))
    buff += b"\x00\x00\x00\x00"
    len_pos = len(buff) - 4

    if index_func is not None:
        buff = bytearray(index_func(buff))
        buff[len_pos:len_pos + 4] = _u32(len(buff) - (len_pos + 4))

    if primary_key_func is not None:
        buff += b"\x00\x00\x00\x00"
        len_pos = len(buff) - 4
        if index_order_func is not None:
            buff = bytearray(index_order_func(buff))
            buff[len_pos:len_pos + 4] = _u32(len(buff) - (len_pos + 4))
        buff = bytearray(primary_key_func(buff))

    return bytes(buff)


def key_decode(key_bytes: bytes) -> Key:
    """Decode bytes into a Key; raises ValueError on malformed input."""
    if len(key_bytes) < 6:
        raise ValueError("malformed key")
    table_id, index_id = key_bytes[0], key_bytes[1]
    off = 6 + _read_u32(key_bytes, 2)
    if len(key_bytes) < off:
        raise ValueError("malformed key")
    index = bytes(key_bytes[6:off])

    if len(key_bytes) == off:
        return Key(table_id, index_id, index)

    if len(key_bytes) < off + 4:
        raise ValueError("malformed key")
    order_len = _read_u32(key_bytes, off)
    off += 4
    if len(key_bytes) < off + order_len:
        raise ValueError("malformed key")
    return Key(
        table_id,
        index_id,
        index,
        bytes(key_bytes[off:off + order_len]),
        bytes(key_bytes[off + order_len:]),
    )


class KeyBytes(bytes):
    """Encoded key with accessors for its parts."""

    def to_data_key_bytes(self) -> "KeyBytes":
        index_len = _read_u32(self, 2)
        order_len = _read_u32(self, 6 + index_len)
        primary_key = self[10 + index_len + order_len:]
        return KeyBytes(
            bytes((self[0], PRIMARY_INDEX_ID)) + _u32(0) + _u32(0) + primary_key
        )

    def table_id(self) -> int:
        return self[0]

    def index_id(self) -> int:
        return self[1]

    def index(self) -> bytes:
        return bytes(self[6:6 + _read_u32(self, 2)])

    def is_data_key(self) -> bool:
        return self.index_id() == PRIMARY_INDEX_ID

    def is_index_key(self) -> bool:
        return self.index_id() != PRIMARY_INDEX_ID

    def to_key(self) -> Key:
        return key_decode(self)


def key_prefix_split(raw_key: bytes) -> int:
    """Length of the prefix used for prefix filtering; data keys are whole."""
    if len(raw_key) < _KEY_PREFIX_SPLIT_INDEX_OFFSET:
        return len(raw_key)
    if raw_key[1] != PRIMARY_INDEX_ID:
        return _KEY_PREFIX_SPLIT_INDEX_OFFSET + _read_u32(raw_key, 2)
    return len(raw_key)


def key_prefix(raw_key: bytes) -> int:
    """Length of the table, index and index value part of a key."""
    if len(raw_key) < _KEY_PREFIX_SPLIT_INDEX_OFFSET:
        return len(raw_key)
    return _KEY_PREFIX_SPLIT_INDEX_OFFSET + _read_u32(raw_key, 2)