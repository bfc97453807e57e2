"""Interface to an external asynchronous query service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

ResultRow = dict[str, str | None]


class JobState(str, Enum):
    """Lifecycle states of a remote query job."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class JobStatus:
    """Status reported by the query service for one job."""

    state: JobState
    reason: str | None = None

    @property
    def is_active(self) -> bool:
        """True while the job is queued or running."""
        return self.state in (JobState.PENDING, JobState.RUNNING)


@dataclass(frozen=True)
class QueryContext:
    """Where a query runs and where its results are written."""

    database: str
    workgroup: str | None = None
    output_location: str | None = None


@runtime_checkable
class QueryClient(Protocol):
    """Submit/poll/fetch interface of a remote query engine.

    Implementations wrap a concrete service (see ``AthenaQueryClient``).
    Rows returned by ``fetch_results`` map column names to the raw text
    value the service reported, or ``None`` for SQL NULL; the header row,
    if the service returns one, is already stripped.
    """

    async def submit(self, query: str, context: QueryContext) -> str:
        """Start a query and return its job identifier."""
        ...

    async def poll_status(self, job_id: str) -> JobStatus:
        """Return the current status of a job."""
        ...

    async def fetch_results(self, job_id: str, max_rows: int) -> list[ResultRow]:
        """Return at most ``max_rows`` data rows of a finished job."""
        ...


@runtime_checkable
class CancellableQueryClient(QueryClient, Protocol):
    """A query client that can also stop a running job."""

    async def cancel(self, job_id: str) -> None:
        """Request cancellation of a job."""
        ...
