"""Exception hierarchy for flowscope."""

from __future__ import annotations

from typing import Any


class FlowScopeError(Exception):
    """Base class for all flowscope errors."""


class InvalidFilter(FlowScopeError, ValueError):
    """A filter has malformed or contradictory bounds."""


class QueryError(FlowScopeError):
    """Base class for failures of a remote query job.

    Attributes:
        job_id: Identifier of the remote job, if one was assigned.
    """

    def __init__(self, message: str, job_id: str | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id


class QueryTimeout(QueryError):
    """The caller's wait for a remote job exceeded its timeout."""

    def __init__(self, job_id: str | None, timeout: float) -> None:
        super().__init__(
            f"Query {job_id} did not finish within {timeout:g} seconds", job_id=job_id
        )
        self.timeout = timeout


class QueryFailed(QueryError):
    """The remote engine reported the job as failed."""

    def __init__(self, job_id: str | None, reason: str | None) -> None:
        super().__init__(f"Query failed: {reason or 'no reason given'}", job_id=job_id)
        self.reason = reason


class QueryCancelled(QueryError):
    """The remote job was cancelled outside of this process."""

    def __init__(self, job_id: str | None, reason: str | None = None) -> None:
        super().__init__("Query was cancelled", job_id=job_id)
        self.reason = reason


class MalformedResult(QueryError):
    """A result row does not conform to the declared column types."""

    def __init__(self, column: str, value: Any, expected: str, job_id: str | None = None) -> None:
        super().__init__(
            f"Column {column!r} expected {expected}, got {value!r}", job_id=job_id
        )
        self.column = column
        self.value = value
        self.expected = expected


class LookupFailed(FlowScopeError):
    """A single hostname lookup failed.

    Raised by providers and caught by the resolver, which caches the
    address as unresolved instead of propagating the error.
    """

    def __init__(self, address: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Hostname lookup failed for {address}")
        self.address = address
        self.cause = cause
