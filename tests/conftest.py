"""Pytest fixtures and configuration for flowscope tests."""

from __future__ import annotations

import pytest

from flowscope.backends.local import LocalBackend
from flowscope.core.config import Config
from flowscope.core.records import FlowRecord
from flowscope.query.client import QueryContext

from tests.fixtures.records import ScriptedQueryClient, mixed_records


@pytest.fixture
def records() -> list[FlowRecord]:
    """A small dataset touching every aggregate view."""
    return mixed_records()


@pytest.fixture
def local_backend(records: list[FlowRecord]) -> LocalBackend:
    """Local backend over the mixed dataset."""
    return LocalBackend(records)


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def query_context() -> QueryContext:
    """Query context used by remote tests."""
    return QueryContext(database="vpc_flow_logs", workgroup="primary")


@pytest.fixture
def scripted_client() -> ScriptedQueryClient:
    """A query client that succeeds immediately with no rows."""
    return ScriptedQueryClient()
