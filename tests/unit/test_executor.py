"""Tests for remote query execution."""

from __future__ import annotations

import asyncio

import pytest

from flowscope.core.errors import QueryCancelled, QueryError, QueryFailed, QueryTimeout
from flowscope.query.client import JobState, JobStatus, QueryContext
from flowscope.query.executor import QueryExecutor

from tests.fixtures.records import CancellableScriptedClient, ScriptedQueryClient

RUNNING = JobStatus(JobState.RUNNING)
PENDING = JobStatus(JobState.PENDING)
SUCCEEDED = JobStatus(JobState.SUCCEEDED)


def make_executor(client: ScriptedQueryClient, **kwargs: object) -> QueryExecutor:
    kwargs.setdefault("poll_interval", 0)
    return QueryExecutor(client, QueryContext(database="db"), **kwargs)  # type: ignore[arg-type]


class TestExecute:
    """Tests for the submit/poll/fetch cycle."""

    def test_polls_until_success(self) -> None:
        client = ScriptedQueryClient(
            rows=[{"a": "1"}, {"a": "2"}],
            states=(PENDING, RUNNING, RUNNING, SUCCEEDED),
        )
        rows = asyncio.run(make_executor(client).execute("SELECT a"))
        assert rows == [{"a": "1"}, {"a": "2"}]
        assert client.polls == 4
        assert client.submitted[0][0] == "SELECT a"
        assert client.submitted[0][1].database == "db"

    def test_fetch_is_bounded(self) -> None:
        client = ScriptedQueryClient(rows=[{"a": str(i)} for i in range(10)])
        rows = asyncio.run(make_executor(client, max_rows=3).execute("SELECT a"))
        assert len(rows) == 3
        assert client.fetches == [("job-1", 3)]

    def test_failed_job_carries_reason(self) -> None:
        client = ScriptedQueryClient(
            states=(RUNNING, JobStatus(JobState.FAILED, "SYNTAX_ERROR: line 1"))
        )
        with pytest.raises(QueryFailed) as excinfo:
            asyncio.run(make_executor(client).execute("SELEC"))
        assert excinfo.value.reason == "SYNTAX_ERROR: line 1"
        assert excinfo.value.job_id == "job-1"
        assert client.fetches == []

    def test_cancelled_job(self) -> None:
        client = ScriptedQueryClient(states=(JobStatus(JobState.CANCELLED, "stopped by user"),))
        with pytest.raises(QueryCancelled):
            asyncio.run(make_executor(client).execute("SELECT 1"))


class FailingClient(ScriptedQueryClient):
    """Scripted client whose calls raise at a chosen step."""

    def __init__(self, step: str, error: Exception) -> None:
        super().__init__()
        self.step = step
        self.error = error

    async def submit(self, query: str, context: QueryContext) -> str:
        if self.step == "submit":
            raise self.error
        return await super().submit(query, context)

    async def poll_status(self, job_id: str) -> JobStatus:
        if self.step == "poll":
            raise self.error
        return await super().poll_status(job_id)

    async def fetch_results(self, job_id: str, max_rows: int) -> list[dict[str, str | None]]:
        if self.step == "fetch":
            raise self.error
        return await super().fetch_results(job_id, max_rows)


class TestClientErrors:
    """Tests for errors raised by the query client itself."""

    def test_submit_error_becomes_query_failed(self) -> None:
        error = RuntimeError("AccessDeniedException: not authorized")
        client = FailingClient("submit", error)
        with pytest.raises(QueryError) as excinfo:
            asyncio.run(make_executor(client).execute("SELECT 1"))
        assert isinstance(excinfo.value, QueryFailed)
        assert excinfo.value.job_id is None
        assert "AccessDeniedException" in str(excinfo.value)
        assert excinfo.value.__cause__ is error

    @pytest.mark.parametrize("step", ["poll", "fetch"])
    def test_later_errors_carry_job_id(self, step: str) -> None:
        client = FailingClient(step, ValueError("Unknown Athena query state: EXPLODED"))
        with pytest.raises(QueryFailed) as excinfo:
            asyncio.run(make_executor(client).execute("SELECT 1"))
        assert excinfo.value.job_id == "job-1"
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_library_errors_pass_through(self) -> None:
        client = FailingClient("poll", QueryCancelled("job-1"))
        with pytest.raises(QueryCancelled):
            asyncio.run(make_executor(client).execute("SELECT 1"))


class TestTimeout:
    """Tests for the caller timeout."""

    def test_running_forever_times_out(self) -> None:
        """Test a job stuck in RUNNING raises instead of hanging."""
        client = ScriptedQueryClient(states=(RUNNING,))
        executor = make_executor(client, timeout=0.05, poll_interval=0.01)
        with pytest.raises(QueryTimeout) as excinfo:
            asyncio.run(asyncio.wait_for(executor.execute("SELECT 1"), timeout=5))
        assert excinfo.value.timeout == 0.05
        assert client.polls >= 1

    def test_no_cancel_by_default(self) -> None:
        client = CancellableScriptedClient(states=(RUNNING,))
        with pytest.raises(QueryTimeout):
            asyncio.run(make_executor(client, timeout=0.02).execute("SELECT 1"))
        assert client.cancelled == []

    def test_cancel_on_timeout(self) -> None:
        client = CancellableScriptedClient(states=(RUNNING,))
        executor = make_executor(client, timeout=0.02, cancel_on_timeout=True)
        with pytest.raises(QueryTimeout):
            asyncio.run(executor.execute("SELECT 1"))
        assert client.cancelled == ["job-1"]

    def test_cancel_failure_still_raises_timeout(self) -> None:
        client = CancellableScriptedClient(states=(RUNNING,), cancel_error=RuntimeError("denied"))
        executor = make_executor(client, timeout=0.02, cancel_on_timeout=True)
        with pytest.raises(QueryTimeout):
            asyncio.run(executor.execute("SELECT 1"))
        assert client.cancelled == ["job-1"]

    def test_cancel_requested_on_client_without_cancel(self) -> None:
        client = ScriptedQueryClient(states=(RUNNING,))
        executor = make_executor(client, timeout=0.02, cancel_on_timeout=True)
        with pytest.raises(QueryTimeout):
            asyncio.run(executor.execute("SELECT 1"))


class TestValidation:
    """Tests for executor arguments."""

    @pytest.mark.parametrize(
        "kwargs",
        [{"poll_interval": -1}, {"timeout": 0}, {"max_rows": 0}],
    )
    def test_invalid_arguments(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            make_executor(ScriptedQueryClient(), **kwargs)
