from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """In-memory cache whose entries expire after ``ttl_s`` seconds.

    When full, the entry that was stored first is dropped.
    """

    def __init__(self, *, ttl_s: float, max_size: int) -> None:
        self.ttl_s = ttl_s
        self.max_size = max_size
        self._store: "OrderedDict[str, Tuple[float, T]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Optional[T]:
        now = time.monotonic()
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= now:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: T) -> None:
        if self.max_size <= 0:
            return
        now = time.monotonic()
        with self._lock:
            self._store.pop(key, None)
            for stale in [k for k, (expires_at, _) in self._store.items() if expires_at <= now]:
                del self._store[stale]
            while len(self._store) >= self.max_size:
                self._store.popitem(last=False)
            self._store[key] = (now + self.ttl_s, value)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


def make_cache_key(*parts: object) -> str:
    return "|".join(str(part) for part in parts)
