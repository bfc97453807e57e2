"""Single entry point over interchangeable aggregation backends."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping

from .backends.base import AggregationBackend
from .backends.local import LocalBackend
from .backends.remote import RemoteBackend
from .core.config import Config
from .core.filter import FlowFilter
from .core.results import (
    ActionSummary,
    NetworkGraph,
    PortTraffic,
    ProtocolStats,
    RejectedConnectionSummary,
    TimeSeriesPoint,
    TopAddress,
    TopTalker,
)
from .query.compiler import QueryCompiler
from .query.executor import QueryExecutor

if TYPE_CHECKING:
    from .core.records import FlowRecord
    from .query.client import QueryClient

logger = logging.getLogger(__name__)


class DataSource(str, Enum):
    """Backends the facade can route to."""

    LOCAL = "local"
    REMOTE = "remote"


class FlowAnalytics:
    """Routes every aggregate view to the currently selected backend.

    The active backend can be switched at any time. Each call reads the
    active backend exactly once on entry, so a call already in flight
    finishes on the backend it started with while new calls use the new
    one.

    Example:
        >>> analytics = FlowAnalytics({DataSource.LOCAL: LocalBackend(records)})
        >>> talkers = asyncio.run(analytics.top_talkers(FlowFilter()))
    """

    def __init__(
        self,
        backends: Mapping[DataSource, AggregationBackend],
        source: DataSource = DataSource.LOCAL,
        config: Config | None = None,
    ) -> None:
        """Initialize the facade.

        Args:
            backends: Available backends keyed by data source.
            source: Initially selected data source.
            config: Supplies default limits. Defaults to ``Config()``.

        Raises:
            ValueError: If ``source`` has no backend.
        """
        self._backends = {DataSource(k): v for k, v in backends.items()}
        self._initial = DataSource(source)
        if self._initial not in self._backends:
            raise ValueError(f"No backend registered for data source {self._initial.value!r}")
        self.config = config or Config()
        self._lock = threading.Lock()
        self._source = self._initial

    @property
    def data_source(self) -> DataSource:
        with self._lock:
            return self._source

    @property
    def available_sources(self) -> list[DataSource]:
        return list(self._backends)

    def set_data_source(self, source: DataSource | str) -> None:
        """Select the backend used by subsequent calls.

        Raises:
            ValueError: If the source is unknown or has no backend.
        """
        source = DataSource(source)
        if source not in self._backends:
            raise ValueError(f"No backend registered for data source {source.value!r}")
        with self._lock:
            previous, self._source = self._source, source
        if previous is not source:
            logger.info("Data source switched from %s to %s", previous.value, source.value)

    def reset(self) -> None:
        """Restore the data source selected at construction."""
        self.set_data_source(self._initial)

    def backend(self, source: DataSource | str | None = None) -> AggregationBackend:
        """Return the backend for ``source``, or the active one."""
        if source is None:
            with self._lock:
                return self._backends[self._source]
        return self._backends[DataSource(source)]

    @staticmethod
    def _limit(limit: int | None, default: int) -> int:
        return default if limit is None else limit

    async def top_talkers(self, flt: FlowFilter, limit: int | None = None) -> list[TopTalker]:
        backend = self.backend()
        return await backend.top_talkers(flt, self._limit(limit, self.config.top_talkers_limit))

    async def top_source_addresses(
        self, flt: FlowFilter, limit: int | None = None
    ) -> list[TopAddress]:
        backend = self.backend()
        return await backend.top_source_addresses(
            flt, self._limit(limit, self.config.top_addresses_limit)
        )

    async def top_destination_addresses(
        self, flt: FlowFilter, limit: int | None = None
    ) -> list[TopAddress]:
        backend = self.backend()
        return await backend.top_destination_addresses(
            flt, self._limit(limit, self.config.top_addresses_limit)
        )

    async def top_source_ports(self, flt: FlowFilter, limit: int | None = None) -> list[PortTraffic]:
        backend = self.backend()
        return await backend.top_source_ports(flt, self._limit(limit, self.config.top_ports_limit))

    async def top_destination_ports(
        self, flt: FlowFilter, limit: int | None = None
    ) -> list[PortTraffic]:
        backend = self.backend()
        return await backend.top_destination_ports(
            flt, self._limit(limit, self.config.top_ports_limit)
        )

    async def protocol_distribution(self, flt: FlowFilter) -> list[ProtocolStats]:
        backend = self.backend()
        return await backend.protocol_distribution(flt)

    async def traffic_timeline(self, flt: FlowFilter) -> list[TimeSeriesPoint]:
        backend = self.backend()
        return await backend.traffic_timeline(flt)

    async def accept_reject(self, flt: FlowFilter) -> list[ActionSummary]:
        backend = self.backend()
        return await backend.accept_reject(flt)

    async def rejected_connections(
        self, flt: FlowFilter, limit: int | None = None
    ) -> list[RejectedConnectionSummary]:
        backend = self.backend()
        return await backend.rejected_connections(
            flt, self._limit(limit, self.config.rejected_limit)
        )

    async def network_graph(
        self,
        flt: FlowFilter,
        min_bytes: int | None = None,
        max_edges: int | None = None,
    ) -> NetworkGraph:
        backend = self.backend()
        return await backend.network_graph(
            flt,
            self.config.graph_min_bytes if min_bytes is None else min_bytes,
            self._limit(max_edges, self.config.graph_max_edges),
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        records: Iterable[FlowRecord] | None = None,
        client: QueryClient | None = None,
        source: DataSource | str | None = None,
    ) -> FlowAnalytics:
        """Build a facade from configuration.

        A local backend is registered when ``records`` is given. A remote
        backend is registered when ``client`` is given; pass an
        :class:`~flowscope.query.athena.AthenaQueryClient` for Athena.

        Args:
            config: Configuration.
            records: Records for the local backend.
            client: Query client for the remote backend.
            source: Initial data source. Defaults to local when available.

        Raises:
            ValueError: If neither records nor client is given.
        """
        backends: dict[DataSource, AggregationBackend] = {}
        if records is not None:
            backends[DataSource.LOCAL] = LocalBackend(records)
        if client is not None:
            executor = QueryExecutor(
                client,
                config.query_context(),
                poll_interval=config.poll_interval,
                timeout=config.query_timeout,
                max_rows=config.max_results,
                cancel_on_timeout=config.cancel_on_timeout,
            )
            backends[DataSource.REMOTE] = RemoteBackend(
                QueryCompiler(config.database, config.table), executor
            )
        if not backends:
            raise ValueError("from_config needs records, a query client, or both")

        if source is None:
            source = DataSource.LOCAL if DataSource.LOCAL in backends else DataSource.REMOTE
        return cls(backends, source=DataSource(source), config=config)
