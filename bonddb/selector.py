"""Selectors describing which index entries a query starts from or covers."""

from __future__ import annotations

from enum import IntEnum
from typing import Generic, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


class SelectorType(IntEnum):
    POINT = 0
    POINTS = 1
    RANGE = 2
    RANGES = 3


class SelectorPoint(Generic[T]):
    """Selects entries starting at a single point."""

    type = SelectorType.POINT

    def __init__(self, point: T) -> None:
        self.point = point

    def __repr__(self) -> str:
        return f"SelectorPoint({self.point!r})"


class SelectorPoints(Generic[T]):
    """Selects entries at several points."""

    type = SelectorType.POINTS

    def __init__(self, *points: T) -> None:
        self.points: List[T] = list(points)

    def __repr__(self) -> str:
        return f"SelectorPoints({self.points!r})"


class SelectorRange(Generic[T]):
    """Selects entries between start and end, both inclusive."""

    type = SelectorType.RANGE

    def __init__(self, start: T, end: T) -> None:
        self.start = start
        self.end = end

    @property
    def range(self) -> Tuple[T, T]:
        return self.start, self.end

    @range.setter
    def range(self, bounds: Tuple[T, T]) -> None:
        self.start, self.end = bounds

    def __repr__(self) -> str:
        return f"SelectorRange({self.start!r}, {self.end!r})"


class SelectorRanges(Generic[T]):
    """Selects entries within several inclusive [start, end] ranges."""

    type = SelectorType.RANGES

    def __init__(self, *ranges: Sequence[T]) -> None:
        self.ranges: List[Sequence[T]] = list(ranges)

    def __repr__(self) -> str:
        return f"SelectorRanges({self.ranges!r})"