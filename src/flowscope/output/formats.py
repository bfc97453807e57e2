"""Output helpers for aggregate rows."""

from __future__ import annotations

import io
import json
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from ..core.results import NetworkGraph

# Optional rich import for terminal tables
try:
    from rich.console import Console
    from rich.table import Table

    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False


def is_rich_available() -> bool:
    """Check if rich is available for table rendering."""
    return RICH_AVAILABLE


def _as_dict(row: Any) -> dict[str, Any]:
    if isinstance(row, Mapping):
        return dict(row)
    return row.to_dict()


def rows_to_dataframe(rows: Iterable[Any] | pd.DataFrame) -> pd.DataFrame:
    """Convert aggregate rows (or plain dictionaries) to a DataFrame.

    Args:
        rows: Result dataclasses exposing ``to_dict()``, mappings, or a
            DataFrame, which is returned unchanged.

    Returns:
        DataFrame with one row per result, columns in field order.
    """
    if isinstance(rows, pd.DataFrame):
        return rows
    records = [_as_dict(r) for r in rows]
    if not records:
        return pd.DataFrame()
    return pd.DataFrame.from_records(records)


def _serialize_value(value: Any) -> Any:
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (np.floating, float)):
        # Missing values in numeric columns come back from pandas as NaN
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    if value is None or isinstance(value, (str, int, float, bool, list, dict)):
        return value
    return str(value)


def _serialize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Serialize a row to JSON-compatible types."""
    return {key: _serialize_value(value) for key, value in row.items()}


def frame_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Rows of a DataFrame as dictionaries of its column values.

    Values keep their numpy types; see :func:`_serialize_row`.
    """
    columns = [df[column].to_numpy() for column in df.columns]
    return [dict(zip(df.columns, values)) for values in zip(*columns)]


def to_csv_string(rows: Iterable[Any] | pd.DataFrame) -> str:
    """Render rows as CSV with a header line. Empty input gives ''."""
    df = rows_to_dataframe(rows)
    if df.empty:
        return ""
    return df.to_csv(index=False)


def to_json_string(rows: Iterable[Any] | pd.DataFrame, indent: int | None = 2) -> str:
    """Render rows as a JSON array.

    Rows pass through a DataFrame, so numpy scalars become plain numbers
    and missing numeric values become null.
    """
    records = [_serialize_row(r) for r in frame_records(rows_to_dataframe(rows))]
    return json.dumps(records, indent=indent)


def graph_to_dict(graph: NetworkGraph) -> dict[str, Any]:
    """JSON-ready node-link representation of a graph."""
    data = graph.to_dict()
    return {
        "nodes": [_serialize_row(n) for n in data["nodes"]],
        "edges": [_serialize_row(e) for e in data["edges"]],
    }


def to_table_string(rows: Iterable[Any] | pd.DataFrame, title: str | None = None) -> str:
    """Render rows as a text table for the terminal.

    Uses rich when it is installed, else pandas' plain text rendering.
    """
    df = rows_to_dataframe(rows)
    if df.empty:
        return "(no rows)"

    if not RICH_AVAILABLE:
        text = df.to_string(index=False)
        return f"{title}\n{text}" if title else text

    table = Table(title=title)
    for column in df.columns:
        numeric = pd.api.types.is_numeric_dtype(df[column])
        table.add_column(str(column), justify="right" if numeric else "left")
    for values in df.itertuples(index=False):
        table.add_row(*("" if pd.isna(v) else str(v) for v in values))

    buffer = io.StringIO()
    Console(file=buffer, width=200, force_terminal=False).print(table)
    return buffer.getvalue().rstrip("\n")
