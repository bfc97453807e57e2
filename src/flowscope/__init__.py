"""flowscope - Flow Log Analytics.

flowscope aggregates VPC flow log records into the views an operator
dashboard needs: top talkers, address and port rankings, protocol mix,
a five minute timeline, accept/reject totals, rejected connections and a
connectivity graph. The same views run in memory over a record set or
remotely as SQL on Amazon Athena.

Example:
    >>> import asyncio
    >>> import flowscope as fs
    >>> records = fs.io.generate_sample_records(seed=1)
    >>> analytics = fs.FlowAnalytics({fs.DataSource.LOCAL: fs.LocalBackend(records)})
    >>> talkers = asyncio.run(analytics.top_talkers(fs.FlowFilter(), limit=5))

Switching to Athena:
    >>> config = fs.Config(database="vpc_flow_logs", table="flow_logs")
    >>> client = fs.query.AthenaQueryClient(region="us-west-1")
    >>> analytics = fs.FlowAnalytics.from_config(config, records=records, client=client)
    >>> analytics.set_data_source(fs.DataSource.REMOTE)
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version


def _resolve_version() -> str:
    """Resolve the installed package version."""
    try:
        return _pkg_version("flowscope")
    except PackageNotFoundError:
        # Source checkout without an installed distribution.
        return "0.0.0"


__version__ = _resolve_version()

from .backends import AggregationBackend, LocalBackend, RemoteBackend
from .core.config import Config
from .core.errors import FlowScopeError, InvalidFilter, QueryError
from .core.filter import FlowFilter
from .core.records import Action, FlowRecord
from .facade import DataSource, FlowAnalytics
from .resolve import NameResolver

from . import analysis
from . import backends
from . import core
from . import io
from . import output
from . import query
from . import resolve
from . import utils

__all__ = [
    "__version__",
    "Action",
    "AggregationBackend",
    "Config",
    "DataSource",
    "FlowAnalytics",
    "FlowFilter",
    "FlowRecord",
    "FlowScopeError",
    "InvalidFilter",
    "LocalBackend",
    "NameResolver",
    "QueryError",
    "RemoteBackend",
    "analysis",
    "backends",
    "core",
    "io",
    "output",
    "query",
    "resolve",
    "utils",
]
