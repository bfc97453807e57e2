"""Cached address to hostname resolution."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, Mapping

from ..core.errors import LookupFailed
from .cache import ResolverCache, ResolverCacheEntry, ResolverCacheStats
from .providers import HostnameProvider, default_provider

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0  # seconds


class NameResolver:
    """Resolves addresses to hostnames through a provider and a TTL cache.

    Both outcomes are cached for ``ttl`` seconds: a name when the provider
    returns one, and a negative entry when it returns nothing or fails. A
    failing address is therefore not retried until its entry expires.

    Example:
        >>> resolver = NameResolver(StaticHostProvider())
        >>> asyncio.run(resolver.resolve("8.8.8.8"))
        'dns.google'
    """

    def __init__(
        self,
        provider: HostnameProvider | None = None,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the resolver.

        Args:
            provider: Hostname source. Defaults to well-known hosts plus
                reverse DNS.
            ttl: Seconds an entry stays fresh.
            clock: Time source in epoch seconds.
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.provider = provider if provider is not None else default_provider()
        self.ttl = ttl
        self.clock = clock
        self.cache = ResolverCache()

    async def resolve(self, address: str) -> str | None:
        """Return the hostname for ``address``, or None if it has none."""
        entry = self.cache.get(address, self.clock())
        if entry is not None:
            logger.debug("Resolver cache hit for %s", address)
            return entry.name

        try:
            name = await self.provider.lookup(address)
        except LookupFailed as e:
            logger.warning("Hostname lookup failed for %s: %s", address, e.cause or e)
            name = None
        except Exception as e:
            logger.warning("Unexpected error resolving %s: %r", address, e)
            name = None

        self.cache.put(address, name or None, self.clock(), self.ttl)
        return name or None

    async def resolve_batch(self, addresses: Iterable[str]) -> dict[str, str | None]:
        """Resolve many addresses concurrently.

        Duplicates are looked up once. Lookup errors are handled by
        :meth:`resolve`, so an address whose lookup fails maps to None.

        Returns:
            Mapping of every distinct input address to its hostname or None.
        """
        unique = list(dict.fromkeys(addresses))
        results = await asyncio.gather(*(self.resolve(address) for address in unique))
        return dict(zip(unique, results))

    @staticmethod
    def display_name(address: str, name: str | None) -> str:
        """Format an address for display: ``"name (address)"`` or the address."""
        if name:
            return f"{name} ({address})"
        return address

    def preload(self, mapping: Mapping[str, str | None]) -> None:
        """Seed the cache with known answers, fresh as of now."""
        now = self.clock()
        for address, name in mapping.items():
            self.cache.put(address, name, now, self.ttl)
        logger.debug("Preloaded %d resolver entries", len(mapping))

    def reset(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> ResolverCacheStats:
        return self.cache.stats

    def cache_entries(self) -> list[ResolverCacheEntry]:
        return self.cache.entries()
