import bisect

import pytest

from bonddb.iter import (
    ErrorIterator,
    IterOptions,
    MultiIterator,
    ReleasingIterator,
    child_iterator_options,
)

DATA = {
    b"a": b"1",
    b"b": b"2",
    b"c": b"3",
    b"d": b"4",
    b"e": b"5",
    b"f": b"6",
}


class ListIterator:
    def __init__(self, items, opts):
        self.opts = opts
        self.items = [
            (k, v)
            for k, v in sorted(items.items())
            if (opts.lower_bound is None or k >= opts.lower_bound)
            and (opts.upper_bound is None or k < opts.upper_bound)
        ]
        self.pos = -1
        self.closed = False
        self.fail_close = False

    def first(self):
        self.pos = 0
        return self.valid()

    def last(self):
        self.pos = len(self.items) - 1
        return self.valid()

    def next(self):
        self.pos += 1
        return self.valid()

    def prev(self):
        self.pos -= 1
        return self.valid()

    def valid(self):
        return 0 <= self.pos < len(self.items)

    def error(self):
        return None

    def seek_ge(self, key):
        self.pos = bisect.bisect_left([k for k, _ in self.items], key)
        return self.valid()

    def seek_prefix_ge(self, key):
        return self.seek_ge(key)

    def seek_lt(self, key):
        self.pos = bisect.bisect_left([k for k, _ in self.items], key) - 1
        return self.valid()

    def key(self):
        return self.items[self.pos][0] if self.valid() else None

    def value(self):
        return self.items[self.pos][1] if self.valid() else None

    def close(self):
        self.closed = True
        if self.fail_close:
            raise OSError("close failed")


class Store:
    def __init__(self, items=DATA):
        self.items = items
        self.iterators = []

    def new_iter(self, opts):
        it = ListIterator(self.items, opts)
        self.iterators.append(it)
        return it


def collect_forward(it):
    keys = []
    if it.first():
        keys.append(it.key())
        while it.next():
            keys.append(it.key())
    return keys


def collect_backward(it):
    keys = []
    if it.last():
        keys.append(it.key())
        while it.prev():
            keys.append(it.key())
    return keys


def test_error_iterator_reports_error_and_is_empty():
    exc = RuntimeError("boom")
    it = ErrorIterator(exc)
    assert it.error() is exc
    assert not it.first()
    assert not it.last()
    assert not it.next()
    assert not it.prev()
    assert not it.valid()
    assert not it.seek_ge(b"a")
    assert not it.seek_prefix_ge(b"a")
    assert not it.seek_lt(b"a")
    assert it.key() is None
    assert it.value() is None
    assert it.close() is None


def test_releasing_iterator_delegates_and_releases_once():
    store = Store()
    released = []
    opts = IterOptions(lower_bound=b"b", upper_bound=b"d",
                       release_buffer_on_close=lambda: released.append(True))
    it = ReleasingIterator(store.new_iter, opts)
    assert collect_forward(it) == [b"b", b"c"]
    assert it.seek_ge(b"c")
    assert it.value() == b"3"
    assert store.iterators[0].opts.release_buffer_on_close is None
    it.close()
    it.close()
    assert released == [True]
    assert opts.release_buffer_on_close is None
    assert store.iterators[0].closed


def test_releasing_iterator_releases_when_inner_close_fails():
    store = Store()
    released = []
    opts = IterOptions(release_buffer_on_close=lambda: released.append(True))
    it = ReleasingIterator(store.new_iter, opts)
    store.iterators[0].fail_close = True
    with pytest.raises(OSError):
        it.close()
    assert released == [True]


def test_releasing_iterator_wraps_constructor_error():
    exc = ValueError("cannot open")

    def failing(_opts):
        raise exc

    it = ReleasingIterator(failing, IterOptions())
    assert it.error() is exc
    assert not it.first()
    assert it.key() is None


def test_releasing_iterator_as_context_manager():
    store = Store()
    released = []
    opts = IterOptions(release_buffer_on_close=lambda: released.append(True))
    with ReleasingIterator(store.new_iter, opts) as it:
        assert it.first()
    assert released == [True]
    assert store.iterators[0].closed


def test_multi_iterator_forward_and_backward():
    ranges = [
        IterOptions(upper_bound=b"c"),
        IterOptions(lower_bound=b"c", upper_bound=b"e"),
        IterOptions(lower_bound=b"e"),
    ]
    it = MultiIterator(Store().new_iter, ranges)
    assert collect_forward(it) == sorted(DATA)
    assert collect_backward(it) == sorted(DATA, reverse=True)


def test_multi_iterator_skips_empty_ranges():
    ranges = [
        IterOptions(lower_bound=b"a", upper_bound=b"b"),
        IterOptions(lower_bound=b"x", upper_bound=b"y"),
        IterOptions(lower_bound=b"f"),
    ]
    it = MultiIterator(Store().new_iter, ranges)
    assert collect_forward(it) == [b"a", b"f"]
    assert collect_backward(it) == [b"f", b"a"]


def test_multi_iterator_all_empty():
    ranges = [IterOptions(lower_bound=b"x"), IterOptions(lower_bound=b"y")]
    it = MultiIterator(Store().new_iter, ranges)
    assert not it.first()
    assert not it.last()
    assert not it.valid()


def test_multi_iterator_close_releases_all_options():
    released = []
    ranges = [
        IterOptions(upper_bound=b"c", release_buffer_on_close=lambda: released.append(1)),
        IterOptions(lower_bound=b"c", release_buffer_on_close=lambda: released.append(2)),
    ]
    store = Store()
    it = MultiIterator(store.new_iter, ranges)
    assert collect_forward(it) == sorted(DATA)
    assert all(i.opts.release_buffer_on_close is None for i in store.iterators)
    it.close()
    assert released == [1, 2]
    assert all(o.release_buffer_on_close is None for o in ranges)
    assert store.iterators[-1].closed


def test_multi_iterator_requires_options():
    with pytest.raises(ValueError):
        MultiIterator(Store().new_iter, [])


def test_child_iterator_options_drops_release_only():
    opts = IterOptions(lower_bound=b"a", upper_bound=b"z",
                       release_buffer_on_close=lambda: None)
    child = child_iterator_options(opts)
    assert child.lower_bound == b"a"
    assert child.upper_bound == b"z"
    assert child.release_buffer_on_close is None
    assert opts.release_buffer_on_close is not None