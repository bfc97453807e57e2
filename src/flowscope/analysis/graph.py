"""Connectivity graph construction from aggregated flow edges.

Both backends produce a list of (source, target) edges and hand it to
:func:`build_graph`, so thresholding, capping and node totals are computed by
one implementation.

Node totals are computed from the surviving edges only: after the threshold
and the edge cap have been applied, each node's ``total_bytes`` and
``connection_count`` are the sums over the edges it is an endpoint of. Traffic
on dropped edges does not contribute. A self-loop edge counts once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from ..core.results import GraphEdge, GraphNode, NetworkGraph

if TYPE_CHECKING:
    from ..core.records import FlowRecord

logger = logging.getLogger(__name__)

# Optional NetworkX import
try:
    import networkx as nx
    NETWORKX_AVAILABLE = True
except ImportError:
    nx = None  # type: ignore
    NETWORKX_AVAILABLE = False

DEFAULT_MAX_EDGES = 200


def is_networkx_available() -> bool:
    """Check if NetworkX is available."""
    return NETWORKX_AVAILABLE


@dataclass
class EdgeStats:
    """Running totals for one (source, target) pair."""

    total_bytes: int = 0
    total_packets: int = 0
    flow_count: int = 0


@dataclass
class NodeStats:
    """Running totals for one address."""

    total_bytes: int = 0
    connection_count: int = 0


def aggregate_edges(records: Iterable[FlowRecord]) -> list[GraphEdge]:
    """Group records by (srcaddr, dstaddr) in first-seen order.

    Args:
        records: Records that already passed the filter.

    Returns:
        One edge per distinct pair, unsorted.
    """
    stats: dict[tuple[str, str], EdgeStats] = {}
    for record in records:
        key = (record.srcaddr, record.dstaddr)
        edge = stats.get(key)
        if edge is None:
            edge = stats[key] = EdgeStats()
        edge.total_bytes += record.bytes
        edge.total_packets += record.packets
        edge.flow_count += 1

    return [
        GraphEdge(
            source=src,
            target=dst,
            total_bytes=s.total_bytes,
            total_packets=s.total_packets,
            connection_count=s.flow_count,
        )
        for (src, dst), s in stats.items()
    ]


def build_graph(
    edges: Iterable[GraphEdge],
    min_bytes: int,
    max_edges: int = DEFAULT_MAX_EDGES,
) -> NetworkGraph:
    """Build a weighted graph from aggregated edges.

    Args:
        edges: Aggregated edges, in the order they were produced.
        min_bytes: Edges carrying fewer bytes are dropped entirely.
        max_edges: Maximum number of edges kept, heaviest first.

    Returns:
        Graph whose nodes are exactly the endpoints of the kept edges.
    """
    if max_edges < 0:
        raise ValueError("max_edges must be non-negative")

    kept = [e for e in edges if e.total_bytes >= min_bytes]
    kept.sort(key=lambda e: e.total_bytes, reverse=True)
    kept = kept[:max_edges]

    node_stats: dict[str, NodeStats] = {}
    for edge in kept:
        endpoints = (edge.source,) if edge.source == edge.target else (edge.source, edge.target)
        for address in endpoints:
            stats = node_stats.get(address)
            if stats is None:
                stats = node_stats[address] = NodeStats()
            stats.total_bytes += edge.total_bytes
            stats.connection_count += edge.connection_count

    nodes = tuple(
        GraphNode(id=address, total_bytes=s.total_bytes, connection_count=s.connection_count)
        for address, s in node_stats.items()
    )

    logger.debug("Built graph with %d nodes, %d edges (min_bytes=%d)", len(nodes), len(kept), min_bytes)
    return NetworkGraph(nodes=nodes, edges=tuple(kept))


def to_networkx(graph: NetworkGraph) -> Any:
    """Convert a graph to a ``networkx.DiGraph``.

    Raises:
        ImportError: If NetworkX is not installed.
    """
    if not NETWORKX_AVAILABLE:
        raise ImportError(
            "NetworkX is required for graph export. "
            "Install with: pip install flowscope[graphs]"
        )

    g = nx.DiGraph()
    for node in graph.nodes:
        g.add_node(
            node.id,
            total_bytes=node.total_bytes,
            connection_count=node.connection_count,
        )
    for edge in graph.edges:
        g.add_edge(
            edge.source,
            edge.target,
            bytes=edge.total_bytes,
            packets=edge.total_packets,
            connections=edge.connection_count,
            weight=edge.total_bytes,
        )
    return g
