"""Analysis helpers built on aggregated flows."""

from __future__ import annotations

from .graph import (
    DEFAULT_MAX_EDGES,
    aggregate_edges,
    build_graph,
    is_networkx_available,
    to_networkx,
)

__all__ = [
    "DEFAULT_MAX_EDGES",
    "aggregate_edges",
    "build_graph",
    "is_networkx_available",
    "to_networkx",
]
