"""Abstract base class for aggregation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.filter import FlowFilter
    from ..core.results import (
        ActionSummary,
        NetworkGraph,
        PortTraffic,
        ProtocolStats,
        RejectedConnectionSummary,
        TimeSeriesPoint,
        TopAddress,
        TopTalker,
    )


class AggregationBackend(ABC):
    """Abstract interface for flow aggregation engines.

    Implementations compute every aggregate view for a filter and must be
    observably equivalent: same row types, same ordering rules, same
    truncation. Ranked views sort descending by their metric with ties kept
    in first-encountered order; the timeline is chronological; the protocol
    distribution and the timeline are never truncated.
    """

    name: str = "backend"

    @abstractmethod
    async def top_talkers(self, flt: FlowFilter, limit: int) -> list[TopTalker]:
        """Source/destination pairs ranked by total bytes.

        Args:
            flt: Filter applied before grouping.
            limit: Maximum number of rows returned.

        Returns:
            Rows sorted by ``total_bytes`` descending.
        """

    @abstractmethod
    async def top_source_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        """Source addresses ranked by bytes; peers are distinct destinations."""

    @abstractmethod
    async def top_destination_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        """Destination addresses ranked by bytes; peers are distinct sources."""

    @abstractmethod
    async def top_source_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        """Non-zero source ports ranked by bytes; peers are distinct destinations."""

    @abstractmethod
    async def top_destination_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        """Non-zero destination ports ranked by bytes; peers are distinct sources."""

    @abstractmethod
    async def protocol_distribution(self, flt: FlowFilter) -> list[ProtocolStats]:
        """Per-protocol totals sorted by bytes descending."""

    @abstractmethod
    async def traffic_timeline(self, flt: FlowFilter) -> list[TimeSeriesPoint]:
        """Five minute buckets in chronological order."""

    @abstractmethod
    async def accept_reject(self, flt: FlowFilter) -> list[ActionSummary]:
        """Per-action flow counts and bytes sorted by count descending."""

    @abstractmethod
    async def rejected_connections(
        self, flt: FlowFilter, limit: int
    ) -> list[RejectedConnectionSummary]:
        """Rejected flows grouped by (src, dst, dstport, protocol), by count descending."""

    @abstractmethod
    async def network_graph(
        self, flt: FlowFilter, min_bytes: int, max_edges: int = 200
    ) -> NetworkGraph:
        """Weighted connectivity graph.

        Args:
            flt: Filter applied before grouping.
            min_bytes: Edges below this byte total are dropped.
            max_edges: Maximum number of edges, heaviest first.
        """
