"""Address to hostname resolution with TTL caching."""

from __future__ import annotations

from .cache import ResolverCache, ResolverCacheEntry, ResolverCacheStats
from .providers import (
    KNOWN_HOSTS,
    ChainedProvider,
    HostnameProvider,
    ReverseDnsProvider,
    StaticHostProvider,
    default_provider,
)
from .resolver import DEFAULT_TTL, NameResolver

__all__ = [
    "ChainedProvider",
    "DEFAULT_TTL",
    "HostnameProvider",
    "KNOWN_HOSTS",
    "NameResolver",
    "ResolverCache",
    "ResolverCacheEntry",
    "ResolverCacheStats",
    "ReverseDnsProvider",
    "StaticHostProvider",
    "default_provider",
]
