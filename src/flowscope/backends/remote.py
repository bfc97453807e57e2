"""Aggregation backend that delegates to a remote query engine."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from ..analysis.graph import DEFAULT_MAX_EDGES, build_graph
from ..core.filter import FlowFilter
from ..core.results import (
    ActionSummary,
    GraphEdge,
    NetworkGraph,
    PortTraffic,
    ProtocolStats,
    RejectedConnectionSummary,
    TimeSeriesPoint,
    TopAddress,
    TopTalker,
)
from ..query.compiler import QueryCompiler
from ..query.executor import QueryExecutor
from ..query.parsing import coerce_rows, parse_rows
from .base import AggregationBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteBackend(AggregationBackend):
    """Backend that compiles each view to SQL and runs it remotely.

    Every call compiles the filter with :class:`QueryCompiler`, runs the
    query through :class:`QueryExecutor` and validates the rows against the
    view's declared column types. Errors from the executor (timeout, failed
    or cancelled job, malformed rows) propagate unchanged; there is no retry.
    """

    name = "remote"

    def __init__(self, compiler: QueryCompiler, executor: QueryExecutor) -> None:
        """Initialize the backend.

        Args:
            compiler: Builds query text for each view.
            executor: Runs query text against the remote service.
        """
        self.compiler = compiler
        self.executor = executor

    async def _run(self, sql: str, row_type: type[T]) -> list[T]:
        rows = await self.executor.execute(sql)
        parsed = parse_rows(rows, row_type)
        logger.debug("Parsed %d %s rows", len(parsed), row_type.__name__)
        return parsed

    async def top_talkers(self, flt: FlowFilter, limit: int) -> list[TopTalker]:
        return await self._run(self.compiler.top_talkers(flt, limit), TopTalker)

    async def top_source_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        return await self._run(self.compiler.top_source_addresses(flt, limit), TopAddress)

    async def top_destination_addresses(self, flt: FlowFilter, limit: int) -> list[TopAddress]:
        return await self._run(self.compiler.top_destination_addresses(flt, limit), TopAddress)

    async def top_source_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        return await self._run(self.compiler.top_source_ports(flt, limit), PortTraffic)

    async def top_destination_ports(self, flt: FlowFilter, limit: int) -> list[PortTraffic]:
        return await self._run(self.compiler.top_destination_ports(flt, limit), PortTraffic)

    async def protocol_distribution(self, flt: FlowFilter) -> list[ProtocolStats]:
        return await self._run(self.compiler.protocol_distribution(flt), ProtocolStats)

    async def traffic_timeline(self, flt: FlowFilter) -> list[TimeSeriesPoint]:
        return await self._run(self.compiler.traffic_timeline(flt), TimeSeriesPoint)

    async def accept_reject(self, flt: FlowFilter) -> list[ActionSummary]:
        return await self._run(self.compiler.accept_reject(flt), ActionSummary)

    async def rejected_connections(
        self, flt: FlowFilter, limit: int
    ) -> list[RejectedConnectionSummary]:
        return await self._run(
            self.compiler.rejected_connections(flt, limit), RejectedConnectionSummary
        )

    async def network_graph(
        self, flt: FlowFilter, min_bytes: int, max_edges: int = DEFAULT_MAX_EDGES
    ) -> NetworkGraph:
        edges = await self._run(self.compiler.network_graph(flt, min_bytes, max_edges), GraphEdge)
        return build_graph(edges, min_bytes=min_bytes, max_edges=max_edges)

    async def raw_query(self, sql: str) -> list[dict[str, Any]]:
        """Run arbitrary SQL and type its values by best-effort coercion."""
        return coerce_rows(await self.executor.execute(sql))
