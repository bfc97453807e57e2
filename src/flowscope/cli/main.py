"""Command-line interface for flowscope."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click

from .. import __version__
from ..backends.local import LocalBackend
from ..core.config import Config
from ..core.errors import FlowScopeError
from ..core.filter import FlowFilter
from ..facade import DataSource, FlowAnalytics
from ..io.loader import RecordLoader
from ..io.sample import generate_sample_records
from ..output.formats import (
    graph_to_dict,
    rows_to_dataframe,
    to_csv_string,
    to_json_string,
    to_table_string,
)
from ..resolve.resolver import NameResolver

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

# Result columns holding addresses that --resolve annotates
ADDRESS_COLUMNS = ("srcaddr", "dstaddr", "address", "source", "target")


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_time(value: str | None) -> float | None:
    """Parse epoch seconds or an ISO 8601 timestamp (naive means UTC)."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(
            f"{value!r} is neither epoch seconds nor an ISO 8601 timestamp"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def analysis_options(func: F) -> F:
    """Options shared by every analysis command."""
    options = [
        click.option(
            "--source",
            type=click.Choice(["sample", "file", "remote"]),
            default="sample",
            show_default=True,
            help="Where flow records come from.",
        ),
        click.option(
            "--records",
            "records_path",
            type=click.Path(exists=True, dir_okay=False),
            help="Record file for --source file (CSV, JSON or flow log text).",
        ),
        click.option("--seed", type=int, default=0, show_default=True, help="Seed for --source sample."),
        click.option("--start", help="Window start (epoch seconds or ISO 8601)."),
        click.option("--end", help="Window end (epoch seconds or ISO 8601)."),
        click.option("--srcaddr", help="Only flows from this address."),
        click.option("--dstaddr", help="Only flows to this address."),
        click.option("--srcport", type=int, help="Only flows from this port."),
        click.option("--dstport", type=int, help="Only flows to this port."),
        click.option("--protocol", type=int, help="Only flows of this IANA protocol number."),
        click.option(
            "--action",
            type=click.Choice(["ACCEPT", "REJECT", "ALL"], case_sensitive=False),
            default="ALL",
            show_default=True,
            help="Only accepted or rejected flows.",
        ),
        click.option("--vpc-id", help="Only flows in this VPC."),
        click.option("--instance-id", help="Only flows of this instance."),
        click.option("--min-bytes", type=int, help="Only flows with at least this many bytes."),
        click.option("--max-bytes", type=int, help="Only flows with at most this many bytes."),
        click.option(
            "-f",
            "--format",
            "output_format",
            type=click.Choice(["table", "csv", "json"]),
            default="table",
            show_default=True,
            help="Output format.",
        ),
        click.option("--resolve", is_flag=True, help="Show hostnames next to addresses."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def limit_option(func: F) -> F:
    return click.option(
        "-n", "--limit", type=click.IntRange(min=1), help="Maximum rows (default from config)."
    )(func)


def direction_option(func: F) -> F:
    return click.option(
        "--direction",
        type=click.Choice(["src", "dst"]),
        default="dst",
        show_default=True,
        help="Rank source or destination side.",
    )(func)


def build_filter(params: dict[str, Any]) -> FlowFilter:
    try:
        return FlowFilter(
            start=parse_time(params.get("start")),
            end=parse_time(params.get("end")),
            srcaddr=params.get("srcaddr"),
            dstaddr=params.get("dstaddr"),
            srcport=params.get("srcport"),
            dstport=params.get("dstport"),
            protocol=params.get("protocol"),
            action=params.get("action"),
            vpc_id=params.get("vpc_id"),
            instance_id=params.get("instance_id"),
            min_bytes=params.get("min_bytes"),
            max_bytes=params.get("max_bytes"),
        )
    except FlowScopeError as e:
        raise click.BadParameter(str(e)) from e


def build_analytics(config: Config, params: dict[str, Any]) -> FlowAnalytics:
    """Create the facade for the selected record source."""
    source = params["source"]

    if source == "remote":
        try:
            from ..query.athena import AthenaQueryClient

            client = AthenaQueryClient(region=config.region)
        except ImportError as e:
            raise click.ClickException(str(e))
        return FlowAnalytics.from_config(config, client=client, source=DataSource.REMOTE)

    if source == "file":
        path = params.get("records_path")
        if not path:
            raise click.UsageError("--source file requires --records PATH")
        try:
            records = RecordLoader().load_auto(path)
        except (OSError, ValueError) as e:
            raise click.ClickException(f"Cannot load records from {path}: {e}")
    else:
        records = generate_sample_records(seed=params["seed"])

    return FlowAnalytics({DataSource.LOCAL: LocalBackend(records)}, config=config)


def run(coro: Awaitable[T]) -> T:
    """Run a coroutine, turning library errors into CLI errors."""
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except (FlowScopeError, ValueError) as e:
        raise click.ClickException(str(e))


async def annotate(rows: list[dict[str, Any]], resolver: NameResolver) -> list[dict[str, Any]]:
    """Replace address columns with ``"host (address)"`` where a name exists."""
    addresses = {row[c] for row in rows for c in ADDRESS_COLUMNS if row.get(c)}
    names = await resolver.resolve_batch(sorted(addresses))
    annotated = []
    for row in rows:
        row = dict(row)
        for column in ADDRESS_COLUMNS:
            if row.get(column):
                row[column] = resolver.display_name(row[column], names.get(row[column]))
        annotated.append(row)
    return annotated


def emit(ctx: click.Context, rows: list[Any], params: dict[str, Any], title: str) -> None:
    """Write rows to stdout in the requested format."""
    dicts = [r if isinstance(r, dict) else r.to_dict() for r in rows]
    if params.get("resolve") and dicts:
        resolver = NameResolver(ttl=ctx.obj["config"].resolver_ttl)
        dicts = run(annotate(dicts, resolver))

    frame = rows_to_dataframe(dicts)
    output_format = params["output_format"]
    if output_format == "json":
        click.echo(to_json_string(frame))
    elif output_format == "csv":
        click.echo(to_csv_string(frame), nl=False)
    else:
        click.echo(to_table_string(frame, title=title))


@click.group()
@click.version_option(version=__version__, prog_name="flowscope")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (JSON or YAML).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """flowscope: flow log analytics.

    Aggregate VPC flow logs into top talkers, port and protocol breakdowns,
    timelines, rejected connection reports and a connectivity graph, from
    a local file, a built-in sample dataset, or Amazon Athena.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)

    try:
        base = Config.from_file(config_path) if config_path else Config()
        ctx.obj["config"] = Config.from_env(base=base)
    except (OSError, ValueError, ImportError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")


@cli.command("top-talkers")
@analysis_options
@limit_option
@click.pass_context
def top_talkers(ctx: click.Context, limit: int | None, **params: Any) -> None:
    """Source/destination pairs ranked by bytes."""
    analytics = build_analytics(ctx.obj["config"], params)
    rows = run(analytics.top_talkers(build_filter(params), limit))
    emit(ctx, rows, params, "Top talkers")


@cli.command("top-addresses")
@analysis_options
@limit_option
@direction_option
@click.pass_context
def top_addresses(ctx: click.Context, limit: int | None, direction: str, **params: Any) -> None:
    """Source or destination addresses ranked by bytes."""
    analytics = build_analytics(ctx.obj["config"], params)
    flt = build_filter(params)
    if direction == "src":
        rows = run(analytics.top_source_addresses(flt, limit))
    else:
        rows = run(analytics.top_destination_addresses(flt, limit))
    emit(ctx, rows, params, f"Top {direction} addresses")


@cli.command("top-ports")
@analysis_options
@limit_option
@direction_option
@click.pass_context
def top_ports(ctx: click.Context, limit: int | None, direction: str, **params: Any) -> None:
    """Source or destination ports ranked by bytes (port 0 excluded)."""
    analytics = build_analytics(ctx.obj["config"], params)
    flt = build_filter(params)
    if direction == "src":
        rows = run(analytics.top_source_ports(flt, limit))
    else:
        rows = run(analytics.top_destination_ports(flt, limit))
    emit(ctx, rows, params, f"Top {direction} ports")


@cli.command()
@analysis_options
@click.pass_context
def protocols(ctx: click.Context, **params: Any) -> None:
    """Traffic per IP protocol."""
    analytics = build_analytics(ctx.obj["config"], params)
    rows = run(analytics.protocol_distribution(build_filter(params)))
    emit(ctx, rows, params, "Protocols")


@cli.command()
@analysis_options
@click.pass_context
def timeline(ctx: click.Context, **params: Any) -> None:
    """Traffic in five minute buckets."""
    analytics = build_analytics(ctx.obj["config"], params)
    rows = run(analytics.traffic_timeline(build_filter(params)))
    emit(ctx, rows, params, "Traffic timeline")


@cli.command("accept-reject")
@analysis_options
@click.pass_context
def accept_reject(ctx: click.Context, **params: Any) -> None:
    """Flow counts and bytes per action."""
    analytics = build_analytics(ctx.obj["config"], params)
    rows = run(analytics.accept_reject(build_filter(params)))
    emit(ctx, rows, params, "Accept / reject")


@cli.command()
@analysis_options
@limit_option
@click.pass_context
def rejected(ctx: click.Context, limit: int | None, **params: Any) -> None:
    """Rejected connection attempts ranked by count."""
    analytics = build_analytics(ctx.obj["config"], params)
    rows = run(analytics.rejected_connections(build_filter(params), limit))
    emit(ctx, rows, params, "Rejected connections")


@cli.command()
@analysis_options
@click.option(
    "--edge-min-bytes",
    type=click.IntRange(min=0),
    help="Drop edges carrying fewer bytes (default from config).",
)
@click.option(
    "--max-edges",
    type=click.IntRange(min=1),
    help="Keep at most this many edges (default from config).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the graph as JSON to this file.",
)
@click.pass_context
def graph(
    ctx: click.Context,
    edge_min_bytes: int | None,
    max_edges: int | None,
    output: str | None,
    **params: Any,
) -> None:
    """Connectivity graph of address pairs.

    Table and CSV formats list the edges; JSON gives nodes and edges.
    """
    analytics = build_analytics(ctx.obj["config"], params)
    result = run(analytics.network_graph(build_filter(params), edge_min_bytes, max_edges))

    if output:
        Path(output).write_text(json.dumps(graph_to_dict(result), indent=2))
        click.echo(
            f"Graph with {len(result.nodes)} nodes and {len(result.edges)} edges written to: {output}",
            err=True,
        )
        return

    if params["output_format"] == "json":
        data = graph_to_dict(result)
        if params.get("resolve"):
            resolver = NameResolver(ttl=ctx.obj["config"].resolver_ttl)
            names = run(resolver.resolve_batch(result.node_ids()))
            for node in data["nodes"]:
                node["label"] = resolver.display_name(node["id"], names.get(node["id"]))
        click.echo(json.dumps(data, indent=2))
    else:
        emit(ctx, list(result.edges), params, "Network graph edges")


@cli.command()
@click.argument("addresses", nargs=-1, required=True)
@click.pass_context
def resolve(ctx: click.Context, addresses: tuple[str, ...]) -> None:
    """Look up hostnames for addresses."""
    resolver = NameResolver(ttl=ctx.obj["config"].resolver_ttl)
    names = run(resolver.resolve_batch(addresses))
    for address, name in names.items():
        click.echo(resolver.display_name(address, name))


if __name__ == "__main__":
    cli()
