"""Utility functions for flowscope."""

from __future__ import annotations

from .port_names import (
    PROTOCOL_NAMES,
    WELL_KNOWN_PORTS,
    is_well_known_port,
    port_category,
    port_display,
    port_name,
    protocol_name,
    search_by_service_name,
)

__all__ = [
    "PROTOCOL_NAMES",
    "WELL_KNOWN_PORTS",
    "is_well_known_port",
    "port_category",
    "port_display",
    "port_name",
    "protocol_name",
    "search_by_service_name",
]
