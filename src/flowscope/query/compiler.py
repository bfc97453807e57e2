"""Compilation of filters into SQL for the remote query engine.

Each aggregate view has one fixed template. Aggregations, grouping keys,
ordering and limits mirror the in-memory backend so both backends return the
same rows for the same data.

Time bounds are compiled against the table's ``date`` partition column with
day precision: a filter from 10:30 to 14:00 on one day selects that whole
day remotely. Finer bounds are only honoured by the local backend.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..core.filter import FlowFilter
from ..core.results import BUCKET_SECONDS, check_limit

logger = logging.getLogger(__name__)


def quote_literal(value: str) -> str:
    """Quote a string as a SQL literal, doubling embedded quotes."""
    return "'" + str(value).replace("'", "''") + "'"


def day_of(timestamp: float) -> str:
    """UTC calendar day of an epoch timestamp, as ``YYYY-MM-DD``."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


class QueryCompiler:
    """Builds one query string per aggregate view.

    Example:
        >>> compiler = QueryCompiler("vpc_flow_logs", "flow_logs")
        >>> sql = compiler.top_talkers(FlowFilter(), limit=10)
    """

    def __init__(self, database: str, table: str) -> None:
        self.database = database
        self.table = table

    @property
    def table_ref(self) -> str:
        return f"{self.database}.{self.table}"

    def where_clause(self, flt: FlowFilter) -> str:
        """Compile a filter into a conjunction of SQL predicates."""
        conditions: list[str] = []

        if flt.start is not None:
            conditions.append(f"date >= DATE '{day_of(flt.start)}'")
        if flt.end is not None:
            conditions.append(f"date <= DATE '{day_of(flt.end)}'")

        if flt.srcaddr is not None:
            conditions.append(f"srcaddr = {quote_literal(flt.srcaddr)}")
        if flt.dstaddr is not None:
            conditions.append(f"dstaddr = {quote_literal(flt.dstaddr)}")

        if flt.srcport is not None:
            conditions.append(f"srcport = {int(flt.srcport)}")
        if flt.dstport is not None:
            conditions.append(f"dstport = {int(flt.dstport)}")
        if flt.protocol is not None:
            conditions.append(f"protocol = {int(flt.protocol)}")

        if flt.action is not None:
            conditions.append(f"action = {quote_literal(flt.action.value)}")

        if flt.vpc_id is not None:
            conditions.append(f"vpc_id = {quote_literal(flt.vpc_id)}")
        if flt.instance_id is not None:
            conditions.append(f"instance_id = {quote_literal(flt.instance_id)}")

        if flt.min_bytes is not None:
            conditions.append(f"bytes >= {int(flt.min_bytes)}")
        if flt.max_bytes is not None:
            conditions.append(f"bytes <= {int(flt.max_bytes)}")

        if not conditions:
            return "TRUE"
        return " AND ".join(conditions)

    def _log(self, view: str, sql: str) -> str:
        logger.debug("Compiled %s query: %s", view, sql)
        return sql

    def top_talkers(self, flt: FlowFilter, limit: int) -> str:
        check_limit(limit)
        return self._log("top_talkers", (
            "SELECT srcaddr, dstaddr, "
            "SUM(bytes) AS total_bytes, "
            "SUM(packets) AS total_packets, "
            "COUNT(*) AS connection_count "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            "GROUP BY srcaddr, dstaddr "
            "ORDER BY total_bytes DESC "
            f"LIMIT {limit}"
        ))

    def _top_addresses(self, flt: FlowFilter, limit: int, key: str, peer: str) -> str:
        check_limit(limit)
        return self._log(f"top_{key}", (
            f"SELECT {key} AS address, "
            "SUM(bytes) AS total_bytes, "
            "SUM(packets) AS total_packets, "
            f"COUNT(DISTINCT {peer}) AS unique_peers "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            f"GROUP BY {key} "
            "ORDER BY total_bytes DESC "
            f"LIMIT {limit}"
        ))

    def top_source_addresses(self, flt: FlowFilter, limit: int) -> str:
        return self._top_addresses(flt, limit, key="srcaddr", peer="dstaddr")

    def top_destination_addresses(self, flt: FlowFilter, limit: int) -> str:
        return self._top_addresses(flt, limit, key="dstaddr", peer="srcaddr")

    def _top_ports(self, flt: FlowFilter, limit: int, key: str, peer: str) -> str:
        check_limit(limit)
        return self._log(f"top_{key}", (
            f"SELECT {key} AS port, "
            "SUM(bytes) AS total_bytes, "
            "COUNT(*) AS connection_count, "
            f"COUNT(DISTINCT {peer}) AS unique_peers "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} AND {key} > 0 "
            f"GROUP BY {key} "
            "ORDER BY total_bytes DESC "
            f"LIMIT {limit}"
        ))

    def top_source_ports(self, flt: FlowFilter, limit: int) -> str:
        return self._top_ports(flt, limit, key="srcport", peer="dstaddr")

    def top_destination_ports(self, flt: FlowFilter, limit: int) -> str:
        return self._top_ports(flt, limit, key="dstport", peer="srcaddr")

    def protocol_distribution(self, flt: FlowFilter) -> str:
        return self._log("protocol_distribution", (
            "SELECT protocol, "
            "SUM(bytes) AS total_bytes, "
            "SUM(packets) AS total_packets, "
            "COUNT(*) AS flow_count "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            "GROUP BY protocol "
            "ORDER BY total_bytes DESC"
        ))

    def traffic_timeline(self, flt: FlowFilter) -> str:
        bucket = f"(start - (start % {BUCKET_SECONDS}))"
        return self._log("traffic_timeline", (
            f"SELECT {bucket} AS bucket_start, "
            "SUM(bytes) AS total_bytes, "
            "SUM(packets) AS total_packets, "
            "COUNT(*) AS connection_count "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            f"GROUP BY {bucket} "
            "ORDER BY bucket_start ASC"
        ))

    def accept_reject(self, flt: FlowFilter) -> str:
        return self._log("accept_reject", (
            "SELECT action, "
            "COUNT(*) AS count, "
            "SUM(bytes) AS bytes "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            "GROUP BY action "
            "ORDER BY count DESC"
        ))

    def rejected_connections(self, flt: FlowFilter, limit: int) -> str:
        check_limit(limit)
        return self._log("rejected_connections", (
            "SELECT srcaddr, dstaddr, dstport, protocol, "
            "COUNT(*) AS reject_count "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} AND action = 'REJECT' "
            "GROUP BY srcaddr, dstaddr, dstport, protocol "
            "ORDER BY reject_count DESC "
            f"LIMIT {limit}"
        ))

    def network_graph(self, flt: FlowFilter, min_bytes: int, max_edges: int) -> str:
        check_limit(max_edges)
        return self._log("network_graph", (
            "SELECT srcaddr AS source, dstaddr AS target, "
            "SUM(bytes) AS total_bytes, "
            "SUM(packets) AS total_packets, "
            "COUNT(*) AS connection_count "
            f"FROM {self.table_ref} "
            f"WHERE {self.where_clause(flt)} "
            "GROUP BY srcaddr, dstaddr "
            f"HAVING SUM(bytes) >= {int(min_bytes)} "
            "ORDER BY total_bytes DESC "
            f"LIMIT {max_edges}"
        ))
