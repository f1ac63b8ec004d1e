from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TTLCache:
    """In-process key/value store whose entries go stale after a fixed TTL.

    Stale entries are evicted lazily on read. There is no capacity bound, so a
    long-running process keeps one entry per distinct key it has ever stored
    until that key is read again after expiry or invalidated.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, _Entry] = {}

    def set(self, key: str, value: Any) -> None:
        self._store[key] = _Entry(value=value, stored_at=self._clock())

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > self.ttl_seconds:
            self._store.pop(key, None)
            return None
        return entry.value

    def invalidate(self, key: str) -> None:
        self._store.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)
