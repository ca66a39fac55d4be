"""In-process mutual exclusion keyed by dedup scope.

ChromaDB offers no conditional write, so "at most one active chunk per key"
is kept by serializing the read-diff-write of each key. Locks live only in
this process: every writer for a collection must go through one process.
"""

import threading
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator


class KeyedLock:
    """A registry of per-key locks that are dropped once no one holds them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._refs: dict[str, int] = {}

    def _acquire_ref(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._refs[key] = self._refs.get(key, 0) + 1
            return lock

    def _release_ref(self, key: str) -> None:
        with self._guard:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._acquire_ref(key)
        try:
            with lock:
                yield
        finally:
            self._release_ref(key)

    @contextmanager
    def hold_all(self, keys: Iterable[str]) -> Iterator[None]:
        """Hold every key's lock, acquired in sorted order to avoid deadlock."""
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self.hold(key))
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
