"""Core data structures: records, filters, results and errors."""

from __future__ import annotations

from .errors import (
    FlowScopeError,
    InvalidFilter,
    LookupFailed,
    MalformedResult,
    QueryCancelled,
    QueryError,
    QueryFailed,
    QueryTimeout,
)
from .filter import DEFAULT_WINDOW_SECONDS, FlowFilter
from .records import Action, FlowRecord
from .results import (
    BUCKET_SECONDS,
    ActionSummary,
    GraphEdge,
    GraphNode,
    NetworkGraph,
    PortTraffic,
    ProtocolStats,
    RejectedConnectionSummary,
    TimeSeriesPoint,
    TopAddress,
    TopTalker,
)

__all__ = [
    "Action",
    "ActionSummary",
    "BUCKET_SECONDS",
    "DEFAULT_WINDOW_SECONDS",
    "FlowFilter",
    "FlowRecord",
    "FlowScopeError",
    "GraphEdge",
    "GraphNode",
    "InvalidFilter",
    "LookupFailed",
    "MalformedResult",
    "NetworkGraph",
    "PortTraffic",
    "ProtocolStats",
    "QueryCancelled",
    "QueryError",
    "QueryFailed",
    "QueryTimeout",
    "RejectedConnectionSummary",
    "TimeSeriesPoint",
    "TopAddress",
    "TopTalker",
]
