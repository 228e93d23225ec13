"""In-memory TTL cache owned by whoever needs one (no module-level instance)."""

from __future__ import annotations

import base64
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    expires_at: float


class CacheKeys:
    NFL_DATA = "nfl-data"

    @staticmethod
    def standings(config_hash: str) -> str:
        return f"standings-{config_hash}"

    @staticmethod
    def achievements(config_hash: str, week: int) -> str:
        return f"achievements-{config_hash}-{week}"

    @staticmethod
    def narratives(week: int) -> str:
        return f"narratives-{week}"

    @staticmethod
    def projections(config_hash: str, week: int) -> str:
        return f"projections-{config_hash}-{week}"


def config_hash(obj: Any) -> str:
    """Short stable key fragment for a JSON-serialisable object."""
    raw = json.dumps(obj, sort_keys=True, default=str).encode()
    return base64.b64encode(raw).decode()[:8]

class TTLCache:
    """Key-value store with per-entry expiry.

    Expired entries are dropped on read, and swept whenever the cache grows
    past ``max_entries``. One instance is shared by the TUI's thread workers,
    so every access to the entry table goes through ``_lock``.
    """

    def __init__(
        self,
        default_ttl_minutes: float = 60,
        max_entries: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl_minutes
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.RLock()
        self._fetch_lock = threading.RLock()

    def set(self, key: str, data: Any, ttl_minutes: float | None = None) -> None:
        ttl = self._default_ttl if ttl_minutes is None else ttl_minutes
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(data=data, timestamp=now, expires_at=now + ttl * 60)
            if len(self._entries) > self._max_entries:
                self._cleanup()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                self._entries.pop(key, None)
                return None
            return entry.data

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() <= entry.expires_at

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Any],
        ttl_minutes: float | None = None,
    ) -> Any:
        """Return the cached value, or call ``fetch_fn`` and cache its result.

        Fetches are serialised, so a worker that waited on another worker's
        fetch gets that result instead of fetching again.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache HIT: %s", key)
            return cached
        with self._fetch_lock:
            cached = self.get(key)
            if cached is not None:
                logger.debug("Cache HIT after wait: %s", key)
                return cached
            logger.debug("Cache MISS: %s", key)
            data = fetch_fn()
            self.set(key, data, ttl_minutes)
            return data

    def _cleanup(self) -> None:
        with self._lock:
            now = self._clock()
            for key in [k for k, e in self._entries.items() if now > e.expires_at]:
                self._entries.pop(key, None)

    def stats(self) -> dict:
        with self._lock:
            now = self._clock()
            entries = list(self._entries.items())
        expired = sum(1 for _, e in entries if now > e.expires_at)
        return {
            "total": len(entries),
            "active": len(entries) - expired,
            "expired": expired,
            "keys": [k for k, _ in entries[:10]],
        }
