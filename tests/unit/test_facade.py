"""Tests for the analytics facade."""

from __future__ import annotations

import asyncio

import pytest

from flowscope.backends.local import LocalBackend
from flowscope.backends.remote import RemoteBackend
from flowscope.core.config import Config
from flowscope.core.records import FlowRecord
from flowscope.facade import DataSource, FlowAnalytics

from tests.fixtures.records import ScriptedQueryClient, all_time, make_record


class GatedBackend(LocalBackend):
    """Local backend whose top_talkers waits on an event."""

    def __init__(self, records: list[FlowRecord]) -> None:
        super().__init__(records)
        self.gate = asyncio.Event()
        self.started = asyncio.Event()

    async def top_talkers(self, flt, limit):  # type: ignore[no-untyped-def]
        self.started.set()
        await self.gate.wait()
        return await super().top_talkers(flt, limit)


class TestSourceSelection:
    """Tests for switching data sources."""

    def test_defaults_to_initial_source(self, local_backend: LocalBackend) -> None:
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend})
        assert analytics.data_source is DataSource.LOCAL
        assert analytics.backend() is local_backend

    def test_switch_and_reset(self, local_backend: LocalBackend) -> None:
        other = LocalBackend([make_record(nbytes=1)])
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend, DataSource.REMOTE: other})
        analytics.set_data_source("remote")
        assert analytics.data_source is DataSource.REMOTE
        assert analytics.backend() is other
        analytics.reset()
        assert analytics.data_source is DataSource.LOCAL

    def test_unregistered_source(self, local_backend: LocalBackend) -> None:
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend})
        with pytest.raises(ValueError, match="remote"):
            analytics.set_data_source(DataSource.REMOTE)
        with pytest.raises(ValueError):
            analytics.set_data_source("nowhere")

    def test_initial_source_needs_backend(self, local_backend: LocalBackend) -> None:
        with pytest.raises(ValueError):
            FlowAnalytics({DataSource.LOCAL: local_backend}, source=DataSource.REMOTE)

    def test_in_flight_call_keeps_its_backend(self) -> None:
        """Test a switch during a call only affects calls started afterwards."""
        first = GatedBackend([make_record("a", "b", nbytes=10)])
        second = LocalBackend([make_record("c", "d", nbytes=20)])
        analytics = FlowAnalytics({DataSource.LOCAL: first, DataSource.REMOTE: second})

        async def scenario() -> tuple[list, list]:
            pending = asyncio.create_task(analytics.top_talkers(all_time()))
            await first.started.wait()
            analytics.set_data_source(DataSource.REMOTE)
            after = await analytics.top_talkers(all_time())
            first.gate.set()
            return await pending, after

        during, after = asyncio.run(scenario())
        assert during[0].srcaddr == "a"
        assert after[0].srcaddr == "c"


class TestDefaults:
    """Tests for limits taken from configuration."""

    def test_config_limits(self) -> None:
        records = [make_record(f"10.0.0.{i}", "10.0.1.1", nbytes=i) for i in range(1, 10)]
        config = Config(top_talkers_limit=3, top_addresses_limit=2, rejected_limit=1)
        analytics = FlowAnalytics({DataSource.LOCAL: LocalBackend(records)}, config=config)
        assert len(asyncio.run(analytics.top_talkers(all_time()))) == 3
        assert len(asyncio.run(analytics.top_source_addresses(all_time()))) == 2
        assert len(asyncio.run(analytics.top_talkers(all_time(), limit=5))) == 5

    def test_explicit_zero_limit_is_rejected(self, local_backend: LocalBackend) -> None:
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend})
        with pytest.raises(ValueError):
            asyncio.run(analytics.top_talkers(all_time(), limit=0))

    def test_graph_defaults(self, local_backend: LocalBackend) -> None:
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend})
        graph = asyncio.run(analytics.network_graph(all_time()))
        assert graph.edges == ()
        graph = asyncio.run(analytics.network_graph(all_time(), min_bytes=0, max_edges=2))
        assert len(graph.edges) == 2

    def test_every_view_routes(self, local_backend: LocalBackend) -> None:
        analytics = FlowAnalytics({DataSource.LOCAL: local_backend})
        flt = all_time()
        assert asyncio.run(analytics.top_destination_addresses(flt))
        assert asyncio.run(analytics.top_source_ports(flt))
        assert asyncio.run(analytics.top_destination_ports(flt))
        assert asyncio.run(analytics.protocol_distribution(flt))
        assert asyncio.run(analytics.traffic_timeline(flt))
        assert asyncio.run(analytics.accept_reject(flt))
        assert asyncio.run(analytics.rejected_connections(flt))


class TestFromConfig:
    """Tests for building the facade from configuration."""

    def test_local_and_remote(self, records: list[FlowRecord]) -> None:
        config = Config(database="db", table="t", max_results=5, query_timeout=10, poll_interval=0)
        client = ScriptedQueryClient()
        analytics = FlowAnalytics.from_config(config, records=records, client=client)
        assert analytics.data_source is DataSource.LOCAL
        assert set(analytics.available_sources) == {DataSource.LOCAL, DataSource.REMOTE}

        remote = analytics.backend(DataSource.REMOTE)
        assert isinstance(remote, RemoteBackend)
        assert remote.compiler.table_ref == "db.t"
        assert remote.executor.max_rows == 5
        assert remote.executor.timeout == 10
        assert remote.executor.context.database == "db"

    def test_remote_only(self) -> None:
        analytics = FlowAnalytics.from_config(Config(), client=ScriptedQueryClient())
        assert analytics.data_source is DataSource.REMOTE

    def test_needs_a_backend(self) -> None:
        with pytest.raises(ValueError):
            FlowAnalytics.from_config(Config())
