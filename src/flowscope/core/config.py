"""Configuration for flowscope."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from ..query.client import QueryContext

ENV_PREFIX = "FLOWSCOPE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Configuration for the analytics facade and the remote backend.

    Attributes:
        region: AWS region of the query service. None uses the boto3 default chain.
        database: Database holding the flow log table.
        table: Flow log table name.
        workgroup: Query service workgroup.
        output_location: Where the service writes query results (``s3://...``).
        max_results: Maximum rows fetched per remote query.
        query_timeout: Seconds to wait for a remote query before giving up.
        poll_interval: Seconds between status polls of a remote query.
        cancel_on_timeout: Ask the service to stop queries that time out.
        resolver_ttl: Seconds a hostname lookup stays cached.
        graph_max_edges: Maximum edges kept in a network graph.
        graph_min_bytes: Minimum edge bytes for the network graph.
        top_talkers_limit: Default row limit of the top talkers view.
        top_addresses_limit: Default row limit of the top address views.
        top_ports_limit: Default row limit of the top port views.
        rejected_limit: Default row limit of the rejected connections view.
    """

    region: str | None = None
    database: str = "vpc_flow_logs"
    table: str = "flow_logs"
    workgroup: str | None = None
    output_location: str | None = None
    max_results: int = 1000
    query_timeout: float = 300.0
    poll_interval: float = 1.0
    cancel_on_timeout: bool = False
    resolver_ttl: float = 3600.0
    graph_max_edges: int = 200
    graph_min_bytes: int = 100_000
    top_talkers_limit: int = 100
    top_addresses_limit: int = 50
    top_ports_limit: int = 50
    rejected_limit: int = 100

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.database:
            raise ValueError("database must not be empty")
        if not self.table:
            raise ValueError("table must not be empty")
        if self.max_results <= 0:
            raise ValueError("max_results must be positive")
        if self.query_timeout <= 0:
            raise ValueError("query_timeout must be positive")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be non-negative")
        if self.resolver_ttl <= 0:
            raise ValueError("resolver_ttl must be positive")
        if self.graph_max_edges <= 0:
            raise ValueError("graph_max_edges must be positive")
        if self.graph_min_bytes < 0:
            raise ValueError("graph_min_bytes must be non-negative")
        for name in ("top_talkers_limit", "top_addresses_limit", "top_ports_limit", "rejected_limit"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def query_context(self) -> QueryContext:
        """Build the context remote queries run in."""
        return QueryContext(
            database=self.database,
            workgroup=self.workgroup,
            output_location=self.output_location,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_json(self, path: str | Path) -> None:
        """Save configuration to JSON file.

        Args:
            path: Path to output JSON file.
        """
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to output YAML file.

        Raises:
            ImportError: If PyYAML is not installed.
        """
        try:
            import yaml
        except ImportError as e:
            raise ImportError("PyYAML is required for YAML config files. Install with: pip install pyyaml") from e

        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos do not silently fall back
        to defaults.

        Args:
            data: Dictionary with configuration values.

        Returns:
            Config instance.

        Raises:
            ValueError: If ``data`` has keys that are not configuration fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_json(cls, path: str | Path) -> Config:
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file does not exist.
            json.JSONDecodeError: If file is not valid JSON.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load configuration from YAML file.

        Raises:
            FileNotFoundError: If file does not exist.
            ImportError: If PyYAML is not installed.
        """
        try:
            import yaml
        except ImportError as e:
            raise ImportError("PyYAML is required for YAML config files. Install with: pip install pyyaml") from e

        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from file (auto-detect format).

        Supports JSON (.json) and YAML (.yaml, .yml) files.

        Raises:
            ValueError: If file extension is not recognized.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".json":
            return cls.from_json(path)
        elif suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}. Use .json or .yaml/.yml")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, base: Config | None = None) -> Config:
        """Overlay ``FLOWSCOPE_*`` environment variables on a configuration.

        ``FLOWSCOPE_QUERY_TIMEOUT=60`` sets ``query_timeout``, and so on.
        Values are converted to the type of the field's current value.

        Args:
            environ: Environment to read. Defaults to ``os.environ``.
            base: Configuration to start from. Defaults to ``Config()``.

        Raises:
            ValueError: If a value cannot be converted.
        """
        environ = os.environ if environ is None else environ
        data = (base or cls()).to_dict()
        for name, current in list(data.items()):
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            data[name] = _convert_env(name, raw, current)
        return cls.from_dict(data)


def _convert_env(name: str, raw: str, current: Any) -> Any:
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}")
    try:
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
    except ValueError:
        raise ValueError(
            f"{ENV_PREFIX}{name.upper()} must be a {type(current).__name__}, got {raw!r}"
        ) from None
    return raw or None
