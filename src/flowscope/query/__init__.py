"""Remote query compilation, execution and result parsing."""

from __future__ import annotations

from .athena import AthenaQueryClient, is_athena_available
from .client import (
    CancellableQueryClient,
    JobState,
    JobStatus,
    QueryClient,
    QueryContext,
    ResultRow,
)
from .compiler import QueryCompiler, quote_literal
from .executor import QueryExecutor
from .parsing import coerce_rows, coerce_value, parse_row, parse_rows

__all__ = [
    "AthenaQueryClient",
    "CancellableQueryClient",
    "JobState",
    "JobStatus",
    "QueryClient",
    "QueryCompiler",
    "QueryContext",
    "QueryExecutor",
    "ResultRow",
    "coerce_rows",
    "coerce_value",
    "is_athena_available",
    "parse_row",
    "parse_rows",
    "quote_literal",
]
