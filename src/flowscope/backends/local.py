"""In-memory aggregation backend over a bounded record set."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Iterable

from ..analysis.graph import DEFAULT_MAX_EDGES, aggregate_edges, build_graph
from ..core.filter import FlowFilter
from ..core.records import Action, FlowRecord
from ..core.results import (
    ActionSummary,
    NetworkGraph,
    PortTraffic,
    ProtocolStats,
    RejectedConnectionSummary,
    TimeSeriesPoint,
    TopAddress,
    TopTalker,
    bucket_start,
    check_limit,
)
from .base import AggregationBackend

logger = logging.getLogger(__name__)


@dataclass
class _Group:
    """Per-key accumulator. One instance per group per call."""

    total_bytes: int = 0
    total_packets: int = 0
    count: int = 0
    peers: set[str] = field(default_factory=set)


class LocalBackend(AggregationBackend):
    """Aggregation backend that scans records held in memory.

    The record set is snapshotted into a tuple at construction and never
    mutated, so concurrent calls need no locking: every call builds its own
    accumulators.

    Example:
        >>> backend = LocalBackend(records)
        >>> rows = asyncio.run(backend.top_talkers(FlowFilter(), limit=10))
    """

    name = "local"

    def __init__(self, records: Iterable[FlowRecord]) -> None:
        """Initialize the backend.

        Args:
            records: Flow records in any order.
        """
        self._records: tuple[FlowRecord, ...] = tuple(records)
        logger.info("Local backend holds %d records", len(self._records))

    @property
    def record_count(self) -> int:
        return len(self._records)

    def _scan(
        self,
        flt: FlowFilter,
        key: Callable[[FlowRecord], Hashable],
        peer: Callable[[FlowRecord], str] | None = None,
        where: Callable[[FlowRecord], bool] | None = None,
    ) -> dict[Hashable, _Group]:
        """Filter and group the record set.

        Args:
            flt: Caller filter.
            key: Grouping key for a record.
            peer: Distinct-peer value for a record, when the view counts peers.
            where: Extra view-specific predicate.

        Returns:
            Groups keyed in first-encountered order.
        """
        groups: dict[Hashable, _Group] = {}
        for record in self._records:
            if not flt.matches(record):
                continue
            if where is not None and not where(record):
                continue
            k = key(record)
            group = groups.get(k)
            if group is None:
                group = groups[k] = _Group()
            group.total_bytes += record.bytes
            group.total_packets += record.packets
            group.count += 1
            if peer is not None:
                group.peers.add(peer(record))
        return groups

    async def top_talkers(self, flt: FlowFilter, limit: int) -> list[TopTalker]:
        check_limit(limit)
        groups = self._scan(flt, key=lambda r: (r.srcaddr, r.dstaddr))
        rows = [
            TopTalker(
                srcaddr=src,
                dstaddr=dst,
                total_bytes=g.total_bytes,
                total_packets=g.total_packets,
                connection_count=g.count,
            )
            for (src, dst), g in groups.items()
        ]
        rows.sort(key=lambda r: r.total_bytes, reverse=True)
        return rows[:limit]

    def _top_addresses(
        self,
        flt: FlowFilter,
        limit: int,
        key: Callable[[FlowRecord], str],
        peer: Callable[[FlowRecord], str],
    ) -> list[TopAddress]:
        check_limit(limit)
        groups = self._scan(flt, key=key, peer=peer)
        rows = [
            TopAddress(
                address=str(address),
                total_bytes=g.total_bytes,
                total_packets=g.total_packets,
                unique_peers=len(g.peers),
            )
            for address, g in groups.items()
        ]
        rows.sort(key=lambda r: r.total_bytes, reverse=True)
        return rows[:limit]

    async def top_source_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        return self._top_addresses(flt, limit, key=lambda r: r.srcaddr, peer=lambda r: r.dstaddr)

    async def top_destination_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        return self._top_addresses(flt, limit, key=lambda r: r.dstaddr, peer=lambda r: r.srcaddr)

    def _top_ports(
        self,
        flt: FlowFilter,
        limit: int,
        key: Callable[[FlowRecord], int],
        peer: Callable[[FlowRecord], str],
    ) -> list[PortTraffic]:
        check_limit(limit)
        # Port 0 means "no port" (ICMP and friends) and is left out of port rankings.
        groups = self._scan(flt, key=key, peer=peer, where=lambda r: key(r) > 0)
        rows = [
            PortTraffic(
                port=int(port),
                total_bytes=g.total_bytes,
                connection_count=g.count,
                unique_peers=len(g.peers),
            )
            for port, g in groups.items()
        ]
        rows.sort(key=lambda r: r.total_bytes, reverse=True)
        return rows[:limit]

    async def top_source_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        return self._top_ports(flt, limit, key=lambda r: r.srcport, peer=lambda r: r.dstaddr)

    async def top_destination_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        return self._top_ports(flt, limit, key=lambda r: r.dstport, peer=lambda r: r.srcaddr)

    async def protocol_distribution(self, flt: FlowFilter) -> list[ProtocolStats]:
        groups = self._scan(flt, key=lambda r: r.protocol)
        rows = [
            ProtocolStats(
                protocol=int(protocol),
                total_bytes=g.total_bytes,
                total_packets=g.total_packets,
                flow_count=g.count,
            )
            for protocol, g in groups.items()
        ]
        rows.sort(key=lambda r: r.total_bytes, reverse=True)
        return rows

    async def traffic_timeline(self, flt: FlowFilter) -> list[TimeSeriesPoint]:
        groups = self._scan(flt, key=lambda r: bucket_start(r.start))
        rows = [
            TimeSeriesPoint(
                bucket_start=int(bucket),
                total_bytes=g.total_bytes,
                total_packets=g.total_packets,
                connection_count=g.count,
            )
            for bucket, g in groups.items()
        ]
        rows.sort(key=lambda r: r.bucket_start)
        return rows

    async def accept_reject(self, flt: FlowFilter) -> list[ActionSummary]:
        groups = self._scan(flt, key=lambda r: r.action.value)
        rows = [
            ActionSummary(action=str(action), count=g.count, bytes=g.total_bytes)
            for action, g in groups.items()
        ]
        rows.sort(key=lambda r: r.count, reverse=True)
        return rows

    async def rejected_connections(
        self, flt: FlowFilter, limit: int
    ) -> list[RejectedConnectionSummary]:
        check_limit(limit)
        groups = self._scan(
            flt,
            key=lambda r: (r.srcaddr, r.dstaddr, r.dstport, r.protocol),
            where=lambda r: r.action is Action.REJECT,
        )
        rows = [
            RejectedConnectionSummary(
                srcaddr=src,
                dstaddr=dst,
                dstport=dstport,
                protocol=protocol,
                reject_count=g.count,
            )
            for (src, dst, dstport, protocol), g in groups.items()
        ]
        rows.sort(key=lambda r: r.reject_count, reverse=True)
        return rows[:limit]

    async def network_graph(
        self, flt: FlowFilter, min_bytes: int, max_edges: int = DEFAULT_MAX_EDGES
    ) -> NetworkGraph:
        check_limit(max_edges)
        edges = aggregate_edges(r for r in self._records if flt.matches(r))
        return build_graph(edges, min_bytes=min_bytes, max_edges=max_edges)
