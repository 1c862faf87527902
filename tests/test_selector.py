from bonddb.selector import (
    SelectorPoint,
    SelectorPoints,
    SelectorRange,
    SelectorRanges,
    SelectorType,
)


def test_selectors():
    selector = SelectorPoint(1)
    assert selector.type == SelectorType.POINT
    assert selector.point == 1

    points = SelectorPoints(*[1, 2, 3])
    assert points.type == SelectorType.POINTS
    assert points.points == [1, 2, 3]

    rng = SelectorRange(1, 2)
    start, end = rng.range
    assert rng.type == SelectorType.RANGE
    assert start == 1
    assert end == 2

    ranges = SelectorRanges(*[[1, 2], [3, 4]])
    assert ranges.type == SelectorType.RANGES
    assert ranges.ranges == [[1, 2], [3, 4]]


def test_selector_type_values():
    selectors = [
        SelectorPoint(0),
        SelectorPoints(0, 1),
        SelectorRange(0, 1),
        SelectorRanges([0, 1]),
    ]
    assert [s.type.value for s in selectors] == [0, 1, 2, 3]


def test_selectors_can_be_updated():
    selector = SelectorPoint(1)
    selector.point = 5
    assert selector.point == 5

    points = SelectorPoints(1)
    points.points = [7, 8]
    assert points.points == [7, 8]

    rng = SelectorRange(1, 2)
    rng.range = (3, 9)
    assert (rng.start, rng.end) == (3, 9)

    ranges = SelectorRanges([1, 2])
    ranges.ranges = [[5, 6]]
    assert ranges.ranges == [[5, 6]]