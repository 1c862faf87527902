"""Iterator interface, an iterator that frees buffers on close, and one spanning several ranges."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol, Sequence


@dataclass
class IterOptions:
    """Bounds of an iteration and an optional hook run when the iterator closes."""

    lower_bound: Optional[bytes] = None
    upper_bound: Optional[bytes] = None
    release_buffer_on_close: Optional[Callable[[], None]] = None


class Iterator(Protocol):
    """Positional cursor over ordered key/value pairs."""

    def first(self) -> bool: ...

    def last(self) -> bool: ...

    def prev(self) -> bool: ...

    def next(self) -> bool: ...

    def valid(self) -> bool: ...

    def error(self) -> Optional[BaseException]: ...

    def seek_ge(self, key: bytes) -> bool: ...

    def seek_prefix_ge(self, key: bytes) -> bool: ...

    def seek_lt(self, key: bytes) -> bool: ...

    def key(self) -> Optional[bytes]: ...

    def value(self) -> Optional[bytes]: ...

    def close(self) -> None: ...


IterConstructor = Callable[[IterOptions], Iterator]


def child_iterator_options(opts: IterOptions) -> IterOptions:
    """Copy of ``opts`` without the release hook, for use by inner iterators."""
    return replace(opts, release_buffer_on_close=None)


def _open(new_iter: IterConstructor, opts: IterOptions) -> Iterator:
    try:
        return new_iter(opts)
    except Exception as exc:  # a failed open yields an iterator reporting the error
        return ErrorIterator(exc)


def _close_quietly(iterator: Iterator) -> None:
    with contextlib.suppress(Exception):
        iterator.close()


def _release(opts: IterOptions) -> None:
    release = opts.release_buffer_on_close
    if release is not None:
        opts.release_buffer_on_close = None
        release()


class _Closing:
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ErrorIterator(_Closing):
    """Empty iterator that only reports the error it was created with."""

    def __init__(self, err: BaseException) -> None:
        self.err = err

    def first(self) -> bool:
        return False

    def last(self) -> bool:
        return False

    def prev(self) -> bool:
        return False

    def next(self) -> bool:
        return False

    def valid(self) -> bool:
        return False

    def error(self) -> Optional[BaseException]:
        return self.err

    def seek_ge(self, key: bytes) -> bool:
        return False

    def seek_prefix_ge(self, key: bytes) -> bool:
        return False

    def seek_lt(self, key: bytes) -> bool:
        return False

    def key(self) -> Optional[bytes]:
        return None

    def value(self) -> Optional[bytes]:
        return None

    def close(self) -> None:
        return None


class ReleasingIterator(_Closing):
    """Wraps an iterator and runs the options' release hook when closed."""

    def __init__(self, new_iter: IterConstructor, opts: IterOptions) -> None:
        self._opts = opts
        self._iterator = _open(new_iter, child_iterator_options(opts))

    def first(self) -> bool:
        return self._iterator.first()

    def last(self) -> bool:
        return self._iterator.last()

    def prev(self) -> bool:
        return self._iterator.prev()

    def next(self) -> bool:
        return self._iterator.next()

    def valid(self) -> bool:
        return self._iterator.valid()

    def error(self) -> Optional[BaseException]:
        return self._iterator.error()

    def seek_ge(self, key: bytes) -> bool:
        return self._iterator.seek_ge(key)

    def seek_prefix_ge(self, key: bytes) -> bool:
        return self._iterator.seek_prefix_ge(key)

    def seek_lt(self, key: bytes) -> bool:
        return self._iterator.seek_lt(key)

    def key(self) -> Optional[bytes]:
        return self._iterator.key()

    def value(self) -> Optional[bytes]:
        return self._iterator.value()

    def close(self) -> None:
        try:
            self._iterator.close()
        finally:
            _release(self._opts)


class MultiIterator(_Closing):
    """Iterates over several option sets in turn, as one continuous sequence."""

    def __init__(self, iterable: IterConstructor, options: Sequence[IterOptions]) -> None:
        self._options: List[IterOptions] = list(options)
        if not self._options:
            raise ValueError("at least one set of iterator options is required")
        self._new_iter = iterable
        self._index = 0
        self._iterator = _open(iterable, child_iterator_options(self._options[0]))

    def _switch(self, index: int) -> None:
        _close_quietly(self._iterator)
        self._index = index
        self._iterator = _open(
            self._new_iter, child_iterator_options(self._options[index])
        )

    def first(self) -> bool:
        for index, _ in enumerate(self._options):
            self._switch(index)
            if self._iterator.first():
                return True
        return False

    def last(self) -> bool:
        for index, _ in reversed(list(enumerate(self._options))):
            self._switch(index)
            if self._iterator.last():
                return True
        return False

    def prev(self) -> bool:
        while not self._iterator.prev():
            if self._index == 0:
                return False
            self._switch(self._index - 1)
            if self._iterator.last():
                break
        return True

    def next(self) -> bool:
        while not self._iterator.next():
            if self._index == len(self._options) - 1:
                return False
            self._switch(self._index + 1)
            if self._iterator.first():
                break
        return True

    def valid(self) -> bool:
        return self._iterator.valid()

    def error(self) -> Optional[BaseException]:
        return self._iterator.error()

    def key(self) -> Optional[bytes]:
        return self._iterator.key()

    def value(self) -> Optional[bytes]:
        return self._iterator.value()

    def close(self) -> None:
        try:
            self._iterator.close()
        finally:
            for opts in self._options:
                _release(opts)