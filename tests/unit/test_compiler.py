"""Tests for query compilation."""

from __future__ import annotations

import pytest

from flowscope.core.filter import FlowFilter
from flowscope.core.records import Action
from flowscope.query.compiler import QueryCompiler, day_of, quote_literal

from tests.fixtures.records import at


@pytest.fixture
def compiler() -> QueryCompiler:
    return QueryCompiler("vpc_flow_logs", "flow_logs")


class TestLiterals:
    """Tests for literal helpers."""

    def test_quote_doubles_single_quotes(self) -> None:
        assert quote_literal("o'brien") == "'o''brien'"

    def test_injection_stays_inside_literal(self) -> None:
        assert quote_literal("x' OR '1'='1") == "'x'' OR ''1''=''1'"

    def test_day_of_uses_utc(self) -> None:
        assert day_of(at(23, 59, 59)) == "2024-01-01"
        assert day_of(at(0, 0, 0, day=2)) == "2024-01-02"


class TestWhereClause:
    """Tests for filter compilation."""

    def test_day_level_bounds(self, compiler: QueryCompiler) -> None:
        """Test that sub-day bounds widen to whole days."""
        where = compiler.where_clause(FlowFilter(start=at(10, 30), end=at(14, 0, day=3)))
        assert where == "date >= DATE '2024-01-01' AND date <= DATE '2024-01-03'"

    def test_open_bound_is_omitted(self, compiler: QueryCompiler) -> None:
        where = compiler.where_clause(FlowFilter(start=at(10, 0)))
        assert "date >=" in where
        assert "date <=" not in where

    def test_all_fields(self, compiler: QueryCompiler) -> None:
        flt = FlowFilter(
            start=at(0, 0),
            end=at(1, 0),
            srcaddr="10.0.0.1",
            dstaddr="10.0.0.2",
            srcport=0,
            dstport=443,
            protocol=0,
            action=Action.REJECT,
            vpc_id="vpc-1",
            instance_id="i-1",
            min_bytes=0,
            max_bytes=100,
        )
        where = compiler.where_clause(flt)
        for clause in (
            "srcaddr = '10.0.0.1'",
            "dstaddr = '10.0.0.2'",
            "srcport = 0",
            "dstport = 443",
            "protocol = 0",
            "action = 'REJECT'",
            "vpc_id = 'vpc-1'",
            "instance_id = 'i-1'",
            "bytes >= 0",
            "bytes <= 100",
        ):
            assert clause in where

    def test_address_is_escaped(self, compiler: QueryCompiler) -> None:
        where = compiler.where_clause(FlowFilter(start=0, srcaddr="a'b"))
        assert "srcaddr = 'a''b'" in where


class TestTemplates:
    """Tests for per-view templates."""

    def test_top_talkers(self, compiler: QueryCompiler) -> None:
        sql = compiler.top_talkers(FlowFilter(start=at(0, 0)), limit=25)
        assert sql.startswith("SELECT srcaddr, dstaddr, SUM(bytes) AS total_bytes")
        assert "FROM vpc_flow_logs.flow_logs" in sql
        assert "GROUP BY srcaddr, dstaddr" in sql
        assert sql.endswith("ORDER BY total_bytes DESC LIMIT 25")

    def test_address_views_count_distinct_peers(self, compiler: QueryCompiler) -> None:
        src = compiler.top_source_addresses(FlowFilter(start=0), limit=5)
        dst = compiler.top_destination_addresses(FlowFilter(start=0), limit=5)
        assert "srcaddr AS address" in src and "COUNT(DISTINCT dstaddr) AS unique_peers" in src
        assert "dstaddr AS address" in dst and "COUNT(DISTINCT srcaddr) AS unique_peers" in dst

    def test_port_views_exclude_zero(self, compiler: QueryCompiler) -> None:
        assert "AND dstport > 0" in compiler.top_destination_ports(FlowFilter(start=0), limit=5)
        assert "AND srcport > 0" in compiler.top_source_ports(FlowFilter(start=0), limit=5)

    def test_untruncated_views_have_no_limit(self, compiler: QueryCompiler) -> None:
        assert "LIMIT" not in compiler.protocol_distribution(FlowFilter(start=0))
        timeline = compiler.traffic_timeline(FlowFilter(start=0))
        assert "LIMIT" not in timeline
        assert "(start - (start % 300)) AS bucket_start" in timeline
        assert timeline.endswith("ORDER BY bucket_start ASC")

    def test_accept_reject(self, compiler: QueryCompiler) -> None:
        sql = compiler.accept_reject(FlowFilter(start=0))
        assert "GROUP BY action" in sql
        assert sql.endswith("ORDER BY count DESC")

    def test_rejected_connections(self, compiler: QueryCompiler) -> None:
        sql = compiler.rejected_connections(FlowFilter(start=0), limit=100)
        assert "AND action = 'REJECT'" in sql
        assert "GROUP BY srcaddr, dstaddr, dstport, protocol" in sql
        assert sql.endswith("LIMIT 100")

    def test_network_graph(self, compiler: QueryCompiler) -> None:
        sql = compiler.network_graph(FlowFilter(start=0), min_bytes=100000, max_edges=200)
        assert "srcaddr AS source, dstaddr AS target" in sql
        assert "HAVING SUM(bytes) >= 100000" in sql
        assert sql.endswith("LIMIT 200")

    @pytest.mark.parametrize("limit", [0, -3, 1.5])
    def test_invalid_limit(self, compiler: QueryCompiler, limit: object) -> None:
        with pytest.raises(ValueError):
            compiler.top_talkers(FlowFilter(start=0), limit=limit)  # type: ignore[arg-type]
