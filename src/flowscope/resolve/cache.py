"""Thread-safe TTL cache of hostname lookups."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverCacheEntry:
    """Outcome of one lookup.

    ``name`` is None for a negative entry: the address was looked up and
    nothing usable came back.
    """

    address: str
    name: str | None
    recorded_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.recorded_at < self.ttl


@dataclass
class ResolverCacheStats:
    """Statistics for the resolver cache."""

    hits: int = 0
    misses: int = 0
    size: int = 0
    hit_rate: float = 0.0


class ResolverCache:
    """Address to hostname cache with per-entry TTL.

    Expired entries are never purged in the background; they are simply
    ignored by :meth:`get` and overwritten by the next :meth:`put`.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ResolverCacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, address: str, now: float) -> ResolverCacheEntry | None:
        """Return the fresh entry for ``address``, if any.

        Args:
            address: Address to look up.
            now: Current time in epoch seconds.

        Returns:
            The entry if it was recorded less than ``ttl`` seconds ago.
        """
        with self._lock:
            entry = self._entries.get(address)
            if entry is not None and entry.is_fresh(now):
                self._hits += 1
                return entry
            self._misses += 1
            return None

    def put(self, address: str, name: str | None, now: float, ttl: float) -> ResolverCacheEntry:
        entry = ResolverCacheEntry(address=address, name=name, recorded_at=now, ttl=ttl)
        with self._lock:
            self._entries[address] = entry
        return entry

    def entries(self) -> list[ResolverCacheEntry]:
        """Snapshot of every stored entry, expired ones included."""
        with self._lock:
            return list(self._entries.values())

    def clear(self) -> None:
        """Clear all entries and counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.debug("Resolver cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> ResolverCacheStats:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return ResolverCacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                hit_rate=(self._hits / total * 100) if total > 0 else 0.0,
            )
