"""Small in-memory TTL cache with an injectable clock."""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class _CacheItem(Generic[T]):
    value: T
    expires_at: float


class TTLCache:
    """Thread-safe TTL cache keyed by any hashable value.

    ``ttl_seconds=None`` on ``set`` uses the default lifetime; a default of
    ``0`` or less never expires entries.
    """

    def __init__(self, default_ttl_seconds: float = 3600, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._data: dict[Hashable, _CacheItem[object]] = {}
        self._lock = Lock()

    def _expiry(self, ttl_seconds: float | None) -> float:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return float("inf")
        return self._clock() + ttl

    def get(self, key: Hashable) -> object | None:
        now = self._clock()
        with self._lock:
            item = self._data.get(key)
            if not item:
                return None
            if item.expires_at <= now:
                self._data.pop(key, None)
                return None
            return item.value

    def set(self, key: Hashable, value: object, ttl_seconds: float | None = None) -> None:
        expires_at = self._expiry(ttl_seconds)
        with self._lock:
            self._data[key] = _CacheItem(value=value, expires_at=expires_at)

    def get_or_set(self, key: Hashable, factory: Callable[[], T], ttl_seconds: float | None = None) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[return-value]
        value = factory()
        if value is not None:
            self.set(key, value, ttl_seconds=ttl_seconds)
        return value
