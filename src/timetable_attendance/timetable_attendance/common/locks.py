from __future__ import annotations

import threading
from collections.abc import Hashable
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """Per-key mutual exclusion.

    Callers holding different keys never block each other. Entries are dropped
    once no thread holds or waits on the key.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]
