"""Hostname providers used by the name resolver."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from typing import Mapping, Protocol, Sequence, runtime_checkable

from ..core.errors import LookupFailed

logger = logging.getLogger(__name__)

# Public resolvers every deployment sees; answered without touching the network
KNOWN_HOSTS: dict[str, str] = {
    "8.8.8.8": "dns.google",
    "8.8.4.4": "dns.google",
    "1.1.1.1": "one.one.one.one",
    "1.0.0.1": "one.one.one.one",
}


@runtime_checkable
class HostnameProvider(Protocol):
    """Source of hostnames for addresses.

    ``lookup`` returns the hostname, or None when the provider has no
    answer. Errors are reported by raising :class:`LookupFailed`.
    """

    async def lookup(self, address: str) -> str | None: ...


def is_private_address(address: str) -> bool:
    """Check whether an address is private, loopback or link-local.

    Raises:
        ValueError: If ``address`` is not an IP address.
    """
    ip = ipaddress.ip_address(address)
    return ip.is_private or ip.is_loopback or ip.is_link_local


class StaticHostProvider:
    """Provider backed by a fixed address to hostname mapping."""

    def __init__(self, hosts: Mapping[str, str] | None = None) -> None:
        self.hosts = dict(KNOWN_HOSTS if hosts is None else hosts)

    async def lookup(self, address: str) -> str | None:
        return self.hosts.get(address)


class ReverseDnsProvider:
    """Provider performing PTR lookups through the system resolver.

    ``socket.gethostbyaddr`` blocks, so each lookup runs in a worker thread.
    Private addresses have no public PTR records and are answered with None
    without a lookup.
    """

    def __init__(self, skip_private: bool = True) -> None:
        self.skip_private = skip_private

    def _lookup_blocking(self, address: str) -> str | None:
        try:
            return socket.gethostbyaddr(address)[0] or None
        except socket.herror:
            # No PTR record
            return None
        except (socket.gaierror, OSError) as e:
            raise LookupFailed(address, e) from e

    async def lookup(self, address: str) -> str | None:
        try:
            private = is_private_address(address)
        except ValueError as e:
            raise LookupFailed(address, e) from e
        if private and self.skip_private:
            return None
        return await asyncio.to_thread(self._lookup_blocking, address)


class ChainedProvider:
    """Asks each provider in turn and returns the first hostname found.

    A provider that raises :class:`LookupFailed` is skipped. If every
    provider that answered failed, the last failure is raised.
    """

    def __init__(self, providers: Sequence[HostnameProvider]) -> None:
        if not providers:
            raise ValueError("ChainedProvider needs at least one provider")
        self.providers = list(providers)

    async def lookup(self, address: str) -> str | None:
        failure: LookupFailed | None = None
        answered = False
        for provider in self.providers:
            try:
                name = await provider.lookup(address)
            except LookupFailed as e:
                logger.debug("%s failed for %s: %s", type(provider).__name__, address, e)
                failure = e
                continue
            answered = True
            if name:
                return name
        if failure is not None and not answered:
            raise failure
        return None


def default_provider() -> HostnameProvider:
    """Static well-known hosts first, then reverse DNS."""
    return ChainedProvider([StaticHostProvider(), ReverseDnsProvider()])
