import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Hashable


class KeyedLockRegistry:
    """Process-local mutexes keyed by an arbitrary hashable, e.g. ``("supplier", 7)``."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks = defaultdict(threading.Lock)
        self._holders = defaultdict(int)

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks[key]
            self._holders[key] += 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if not self._holders[key]:
                    del self._holders[key]
                    del self._locks[key]
