"""Conversion of raw result rows into typed aggregate rows."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

from ..core.errors import MalformedResult

T = TypeVar("T")


def coerce_value(raw: str | None) -> int | float | str | None:
    """Best-effort typing of a raw result value.

    Numeric text becomes ``int`` (or ``float`` when it is not integral);
    anything else is returned unchanged. Used for ad-hoc queries that have
    no declared schema.
    """
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def _convert(column: str, raw: Any, expected: type, job_id: str | None) -> Any:
    if raw is None:
        raise MalformedResult(column, raw, expected.__name__, job_id=job_id)

    if expected is str:
        return str(raw)

    text = str(raw).strip()
    if expected is int:
        try:
            return int(text)
        except ValueError:
            pass
        # Engines sometimes render SUM() results as "350.0"
        try:
            number = float(text)
        except ValueError:
            raise MalformedResult(column, raw, "int", job_id=job_id) from None
        if not number.is_integer():
            raise MalformedResult(column, raw, "int", job_id=job_id)
        return int(number)

    if expected is float:
        try:
            return float(text)
        except ValueError:
            raise MalformedResult(column, raw, "float", job_id=job_id) from None

    raise TypeError(f"Unsupported column type {expected!r} for {column!r}")


def parse_row(row: Mapping[str, Any], row_type: type[T], job_id: str | None = None) -> T:
    """Validate one raw row against ``row_type.COLUMNS`` and build it.

    Raises:
        MalformedResult: A declared column is missing, null, or has text
            that does not parse as the declared type.
    """
    columns: Mapping[str, type] = row_type.COLUMNS  # type: ignore[attr-defined]
    values: dict[str, Any] = {}
    for column, expected in columns.items():
        if column not in row:
            raise MalformedResult(column, None, f"{expected.__name__} (missing column)", job_id=job_id)
        values[column] = _convert(column, row[column], expected, job_id)
    return row_type(**values)


def parse_rows(
    rows: Iterable[Mapping[str, Any]], row_type: type[T], job_id: str | None = None
) -> list[T]:
    """Parse every row, failing as a whole on the first malformed one."""
    return [parse_row(row, row_type, job_id=job_id) for row in rows]


def coerce_rows(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Apply :func:`coerce_value` to every value of every row."""
    return [{k: coerce_value(v) for k, v in row.items()} for row in rows]
