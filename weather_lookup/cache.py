"""
Response cache for reshaped weather payloads with TTL support.
"""
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .clock import Clock, system_clock

CACHE_TTL = timedelta(minutes=5)


class ResponseCache:
    def __init__(
        self,
        ttl: timedelta = CACHE_TTL,
        max_entries: Optional[int] = None,
        clock: Optional[Clock] = None,
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock or system_clock
        self._lock = threading.Lock()
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _is_fresh(self, entry: Dict[str, Any], now: datetime) -> bool:
        return now - entry["stored_at"] < self.ttl

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Get cached payload if not expired. Expired entries stay in place."""
        now = self._clock()
        with self._lock:
            entry = self._cache.get(key)
            if entry is None or not self._is_fresh(entry, now):
                return None
            return entry["payload"]

    def put(self, key: str, payload: Dict[str, Any]) -> None:
        """Cache payload with current timestamp, overwriting any previous entry."""
        now = self._clock()
        with self._lock:
            if (
                self.max_entries is not None
                and key not in self._cache
                and len(self._cache) >= self.max_entries
            ):
                self._purge_expired(now)
                while len(self._cache) >= self.max_entries:
                    oldest = min(self._cache, key=lambda k: self._cache[k]["stored_at"])
                    del self._cache[oldest]

            self._cache[key] = {"payload": payload, "stored_at": now}

    def size(self) -> int:
        """Number of entries held, including logically expired ones."""
        with self._lock:
            return len(self._cache)

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            return self._purge_expired(now)

    def _purge_expired(self, now: datetime) -> int:
        expired = [k for k, entry in self._cache.items() if not self._is_fresh(entry, now)]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def clear(self) -> None:
        """Clear all cached data."""
        with self._lock:
            self._cache.clear()
