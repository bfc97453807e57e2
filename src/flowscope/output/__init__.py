"""Output formatting for aggregate results."""

from __future__ import annotations

from .formats import (
    frame_records,
    graph_to_dict,
    is_rich_available,
    rows_to_dataframe,
    to_csv_string,
    to_json_string,
    to_table_string,
)

__all__ = [
    "frame_records",
    "graph_to_dict",
    "is_rich_available",
    "rows_to_dataframe",
    "to_csv_string",
    "to_json_string",
    "to_table_string",
]
