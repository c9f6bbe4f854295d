"""Short-TTL read cache for effective store settings.

The cache is an explicit object handed to the service that uses it, so each
app instance (and each test) owns its own state. Writers must call
``invalidate`` synchronously after a successful commit; there is no window in
which a stale entry survives a write made through the same service.
"""

import copy
import threading
import time
from collections.abc import Callable, Hashable
from typing import Any


class SettingsCache:
    """In-process TTL cache keyed by tenant id.

    ``ttl_seconds <= 0`` disables caching entirely. Values are deep-copied on
    the way in and out so callers can mutate what they get back.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._generations: dict[Hashable, int] = {}
        self._lock = threading.Lock()

    def generation(self, key: Hashable) -> int:
        """Counter bumped by every ``invalidate`` of ``key``.

        Readers capture it before loading and pass it to ``set``; a load that
        raced with a write is then discarded instead of cached.
        """
        with self._lock:
            return self._generations.get(key, 0)

    def get(self, key: Hashable) -> Any | None:
        if self.ttl_seconds <= 0:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
        return copy.deepcopy(value)

    def set(self, key: Hashable, value: Any, generation: int | None = None) -> None:
        if self.ttl_seconds <= 0:
            return
        stored = copy.deepcopy(value)
        with self._lock:
            if generation is not None and generation != self._generations.get(key, 0):
                return
            self._entries[key] = (self._clock() + self.ttl_seconds, stored)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
