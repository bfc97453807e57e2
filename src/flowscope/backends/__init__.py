"""Aggregation backends sharing one interface."""

from __future__ import annotations

from .base import AggregationBackend
from .local import LocalBackend
from .remote import RemoteBackend

__all__ = ["AggregationBackend", "LocalBackend", "RemoteBackend"]
