"""Amazon Athena implementation of the query client interface."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

try:
    import boto3
except ImportError:
    boto3 = None  # type: ignore[assignment]

from .client import JobState, JobStatus, QueryContext, ResultRow

logger = logging.getLogger(__name__)

# Athena caps a single GetQueryResults page at 1000 rows
_PAGE_SIZE = 1000

_STATE_MAP = {
    "QUEUED": JobState.PENDING,
    "RUNNING": JobState.RUNNING,
    "SUCCEEDED": JobState.SUCCEEDED,
    "FAILED": JobState.FAILED,
    "CANCELLED": JobState.CANCELLED,
}


def _require_boto3() -> Any:
    if boto3 is None:
        raise ImportError(
            "The Athena client requires boto3. Install with: pip install flowscope[aws]"
        )
    return boto3


def is_athena_available() -> bool:
    """Check if the Athena client dependencies are available."""
    return boto3 is not None


class AthenaQueryClient:
    """Query client backed by Amazon Athena.

    boto3 calls block, so each one runs in a worker thread via
    ``asyncio.to_thread`` and the event loop stays free while Athena works.
    Credentials come from the usual boto3 chain (environment, shared
    credentials file, instance role).

    Example:
        >>> client = AthenaQueryClient(region="us-west-1")
        >>> job_id = await client.submit("SELECT 1", QueryContext(database="vpc_flow_logs"))
    """

    def __init__(self, region: str | None = None, client: Any | None = None) -> None:
        """Initialize the client.

        Args:
            region: AWS region name. Ignored when ``client`` is given.
            client: Pre-built boto3 Athena client (mainly for tests).
        """
        if client is None:
            client = _require_boto3().client("athena", region_name=region)
        self._client = client

    async def submit(self, query: str, context: QueryContext) -> str:
        kwargs: dict[str, Any] = {
            "QueryString": query,
            "QueryExecutionContext": {"Database": context.database},
        }
        if context.workgroup:
            kwargs["WorkGroup"] = context.workgroup
        if context.output_location:
            kwargs["ResultConfiguration"] = {"OutputLocation": context.output_location}

        response = await asyncio.to_thread(self._client.start_query_execution, **kwargs)
        job_id = response["QueryExecutionId"]
        logger.debug("Started Athena query %s", job_id)
        return job_id

    async def poll_status(self, job_id: str) -> JobStatus:
        response = await asyncio.to_thread(
            self._client.get_query_execution, QueryExecutionId=job_id
        )
        status = response.get("QueryExecution", {}).get("Status", {})
        raw_state = status.get("State", "QUEUED")
        try:
            state = _STATE_MAP[raw_state]
        except KeyError:
            raise ValueError(f"Unknown Athena query state: {raw_state}") from None
        return JobStatus(state=state, reason=status.get("StateChangeReason"))

    async def fetch_results(self, job_id: str, max_rows: int) -> list[ResultRow]:
        if max_rows <= 0:
            return []
        rows: list[ResultRow] = []
        headers: list[str] | None = None
        next_token: str | None = None

        while True:
            kwargs: dict[str, Any] = {
                "QueryExecutionId": job_id,
                # One extra row for the header on the first page
                "MaxResults": min(_PAGE_SIZE, max_rows - len(rows) + (1 if headers is None else 0)),
            }
            if next_token:
                kwargs["NextToken"] = next_token

            response = await asyncio.to_thread(self._client.get_query_results, **kwargs)
            raw_rows = response.get("ResultSet", {}).get("Rows", [])

            for raw in raw_rows:
                values = [col.get("VarCharValue") for col in raw.get("Data", [])]
                if headers is None:
                    headers = [v or "" for v in values]
                    continue
                rows.append(dict(zip(headers, values)))
                if len(rows) >= max_rows:
                    return rows

            next_token = response.get("NextToken")
            if not next_token:
                return rows

    async def cancel(self, job_id: str) -> None:
        await asyncio.to_thread(self._client.stop_query_execution, QueryExecutionId=job_id)
        logger.debug("Requested stop of Athena query %s", job_id)
