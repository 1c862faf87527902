"""Mutual exclusion around a shared batch."""

from __future__ import annotations

import threading
from typing import Any, Callable, TypeVar

R = TypeVar("R")


class SyncBatch:
    """Serialises access to a batch shared between threads."""

    def __init__(self, batch: Any) -> None:
        self._batch = batch
        self._lock = threading.Lock()

    def with_sync(self, func: Callable[[Any], R]) -> R:
        """Run ``func`` with the batch while holding the lock; return its result."""
        with self._lock:
            return func(self._batch)

    def locked(self) -> bool:
        """Whether the batch is currently held by a caller."""
        return self._lock.locked()