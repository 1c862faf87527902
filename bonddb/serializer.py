"""Serializer interface and a typed wrapper around a general serializer."""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar, cast

T = TypeVar("T")


class Serializer(Protocol[T]):
    """Turns values into bytes and back."""

    def serialize(self, value: T) -> bytes:
        ...

    def deserialize(self, data: bytes) -> T:
        ...


class SerializerAnyWrapper(Generic[T]):
    """Presents a serializer of arbitrary values as a serializer of ``T``."""

    def __init__(self, serializer: Serializer[Any]) -> None:
        self.serializer = serializer

    def serialize(self, value: T) -> bytes:
        return self.serializer.serialize(value)

    def deserialize(self, data: bytes) -> T:
        return cast(T, self.serializer.deserialize(data))