"""Submit/poll/fetch execution of remote query jobs."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from ..core.errors import FlowScopeError, QueryCancelled, QueryFailed, QueryTimeout
from .client import CancellableQueryClient, JobState, QueryClient, QueryContext, ResultRow

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Defaults mirror the service limits the dashboards were built against
DEFAULT_POLL_INTERVAL = 1.0  # seconds
DEFAULT_TIMEOUT = 300.0  # seconds
DEFAULT_MAX_ROWS = 1000


class QueryExecutor:
    """Runs one query to completion against a :class:`QueryClient`.

    The executor submits the query, then polls the job at a fixed interval,
    yielding to the event loop between polls. The wait ends when the job
    leaves the pending/running states or when the caller's timeout elapses.

    A timeout only ends the caller's wait. The remote job keeps running
    unless ``cancel_on_timeout`` is enabled, in which case a best-effort
    cancellation is requested before ``QueryTimeout`` is raised.
    """

    def __init__(
        self,
        client: QueryClient,
        context: QueryContext,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        max_rows: int = DEFAULT_MAX_ROWS,
        cancel_on_timeout: bool = False,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Remote query client.
            context: Database/workgroup the queries run in.
            poll_interval: Seconds to wait between status polls.
            timeout: Seconds the caller is willing to wait for a job.
            max_rows: Maximum number of result rows fetched.
            cancel_on_timeout: Ask the service to stop a job that timed out.
        """
        if poll_interval < 0:
            raise ValueError("poll_interval must be non-negative")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if max_rows <= 0:
            raise ValueError("max_rows must be positive")

        self.client = client
        self.context = context
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.max_rows = max_rows
        self.cancel_on_timeout = cancel_on_timeout

    async def execute(self, query: str) -> list[ResultRow]:
        """Run a query and return its raw result rows.

        Args:
            query: Query text.

        Returns:
            At most ``max_rows`` rows of column name to raw value.

        Raises:
            QueryFailed: The service reported the job as failed, or the client
                raised; the client exception is chained as ``__cause__``.
            QueryCancelled: The job was cancelled by someone else.
            QueryTimeout: The job was still pending or running at the deadline.
        """
        loop = asyncio.get_running_loop()
        logger.debug("Submitting query: %s", query)
        job_id = await self._call(self.client.submit(query, self.context), None)
        started = loop.time()
        polls = 0

        while True:
            status = await self._call(self.client.poll_status(job_id), job_id)
            polls += 1

            if status.state is JobState.SUCCEEDED:
                break
            if status.state is JobState.FAILED:
                raise QueryFailed(job_id, status.reason)
            if status.state is JobState.CANCELLED:
                raise QueryCancelled(job_id, status.reason)

            if loop.time() - started >= self.timeout:
                await self._handle_timeout(job_id)
                raise QueryTimeout(job_id, self.timeout)

            await asyncio.sleep(self.poll_interval)

        logger.debug("Query %s succeeded after %d polls", job_id, polls)
        rows = await self._call(self.client.fetch_results(job_id, self.max_rows), job_id)
        return rows[: self.max_rows]

    async def _call(self, call: Awaitable[T], job_id: str | None) -> T:
        try:
            return await call
        except FlowScopeError:
            raise
        except Exception as e:
            logger.warning("Query client error for job %s: %r", job_id, e)
            raise QueryFailed(job_id, str(e) or type(e).__name__) from e

    async def _handle_timeout(self, job_id: str) -> None:
        if not self.cancel_on_timeout:
            logger.debug("Query %s timed out; leaving remote job running", job_id)
            return
        if not isinstance(self.client, CancellableQueryClient):
            logger.warning("Query %s timed out but the client cannot cancel jobs", job_id)
            return
        try:
            await self.client.cancel(job_id)
        except Exception as e:
            logger.warning("Failed to cancel timed out query %s: %s", job_id, e)
