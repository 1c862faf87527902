"""Deferred value retrieval."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Lazy(Generic[T]):
    """Wraps a function that produces a value only when asked for it."""

    get_func: Callable[[], T]

    def get(self) -> T:
        return self.get_func()