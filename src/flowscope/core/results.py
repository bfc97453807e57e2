"""Aggregate result rows returned by every backend.

Each row type declares ``COLUMNS``: the result-set column names and their
Python types. Remote results are validated against it when parsed, and the
local backend fills the same fields, so callers see identical shapes and
types regardless of the backend that produced a row.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from ..utils.port_names import port_name, protocol_name

ColumnTypes = dict[str, type]

# Timeline resolution in seconds, fixed for every backend
BUCKET_SECONDS = 300


def bucket_start(timestamp: int) -> int:
    """Floor an epoch timestamp to its five minute bucket."""
    return int(timestamp) - int(timestamp) % BUCKET_SECONDS


@dataclass(frozen=True)
class TopTalker:
    """Traffic between one source/destination pair."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "srcaddr": str,
        "dstaddr": str,
        "total_bytes": int,
        "total_packets": int,
        "connection_count": int,
    }

    srcaddr: str
    dstaddr: str
    total_bytes: int
    total_packets: int
    connection_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TopAddress:
    """Traffic for a single address seen on one side of the flows."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "address": str,
        "total_bytes": int,
        "total_packets": int,
        "unique_peers": int,
    }

    address: str
    total_bytes: int
    total_packets: int
    unique_peers: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PortTraffic:
    """Traffic for a single port seen on one side of the flows."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "port": int,
        "total_bytes": int,
        "connection_count": int,
        "unique_peers": int,
    }

    port: int
    total_bytes: int
    connection_count: int
    unique_peers: int

    @property
    def port_name(self) -> str:
        return port_name(self.port)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["port_name"] = self.port_name
        return data


@dataclass(frozen=True)
class ProtocolStats:
    """Traffic for a single IP protocol."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "protocol": int,
        "total_bytes": int,
        "total_packets": int,
        "flow_count": int,
    }

    protocol: int
    total_bytes: int
    total_packets: int
    flow_count: int

    @property
    def protocol_name(self) -> str:
        return protocol_name(self.protocol)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["protocol_name"] = self.protocol_name
        return data


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Traffic within one five minute bucket."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "bucket_start": int,
        "total_bytes": int,
        "total_packets": int,
        "connection_count": int,
    }

    bucket_start: int
    total_bytes: int
    total_packets: int
    connection_count: int

    @property
    def timestamp(self) -> str:
        """Bucket start as ``YYYY-MM-DD HH:MM`` in UTC."""
        return datetime.fromtimestamp(self.bucket_start, tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M"
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True)
class ActionSummary:
    """Flow count and bytes for one action (ACCEPT or REJECT)."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "action": str,
        "count": int,
        "bytes": int,
    }

    action: str
    count: int
    bytes: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RejectedConnectionSummary:
    """Rejected attempts grouped by source, destination, port and protocol."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "srcaddr": str,
        "dstaddr": str,
        "dstport": int,
        "protocol": int,
        "reject_count": int,
    }

    srcaddr: str
    dstaddr: str
    dstport: int
    protocol: int
    reject_count: int

    @property
    def port_name(self) -> str:
        return port_name(self.dstport)

    @property
    def protocol_name(self) -> str:
        return protocol_name(self.protocol)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["port_name"] = self.port_name
        data["protocol_name"] = self.protocol_name
        return data


@dataclass(frozen=True)
class GraphEdge:
    """Aggregated traffic from ``source`` to ``target``."""

    COLUMNS: ClassVar[ColumnTypes] = {
        "source": str,
        "target": str,
        "total_bytes": int,
        "total_packets": int,
        "connection_count": int,
    }

    source: str
    target: str
    total_bytes: int
    total_packets: int
    connection_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GraphNode:
    """An address in the connectivity graph."""

    id: str
    total_bytes: int
    connection_count: int

    @property
    def label(self) -> str:
        return self.id

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["label"] = self.label
        return data


@dataclass(frozen=True)
class NetworkGraph:
    """Weighted directed graph derived from aggregated edges."""

    nodes: tuple[GraphNode, ...] = field(default_factory=tuple)
    edges: tuple[GraphEdge, ...] = field(default_factory=tuple)

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


AggregateRow = (
    TopTalker
    | TopAddress
    | PortTraffic
    | ProtocolStats
    | TimeSeriesPoint
    | ActionSummary
    | RejectedConnectionSummary
    | GraphEdge
)


def check_limit(limit: int) -> int:
    """Validate the row limit of a ranked view.

    Raises:
        ValueError: If ``limit`` is not a positive integer.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return limit
