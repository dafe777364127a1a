"""Command-line interface for Replica Set Monitor."""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from replicaset_monitor import __version__
from replicaset_monitor.config import Config, SourceConfig, create_example_config
from replicaset_monitor.models import ClusterReport, EngineKind, FleetHealth, Severity, TopologyLayout
from replicaset_monitor.monitor import FleetMonitor

console = Console()

DEFAULT_CONFIG_PATHS = ["rsm.yaml", "rsm.yml", "config.yaml", "~/.config/rsm/config.yaml"]
ENGINE_CHOICES = click.Choice([e.value for e in EngineKind], case_sensitive=False)


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def severity_color(severity: Severity | str | None) -> str:
    """Get Rich color for a severity tier or fleet status."""
    if isinstance(severity, Severity):
        severity = severity.label
    colors = {
        "healthy": "green",
        "warning": "yellow",
        "critical": "red",
        "unknown": "dim",
    }
    return colors.get(severity or "unknown", "white")


def load_config(config: Optional[str], payload_file: Optional[str]) -> Config:
    """Load config from an explicit path or the default locations.

    A payload file given on the command line replaces the configured source.
    """
    cfg = None
    if config:
        cfg = Config.from_yaml(config)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            path = Path(default_path).expanduser()
            if path.exists():
                cfg = Config.from_yaml(path)
                break

    if cfg is None:
        if not payload_file:
            console.print("[red]No configuration file found.[/]")
            console.print("Create one with: [cyan]rsm init[/] or pass [cyan]--file[/]")
            sys.exit(1)
        cfg = Config()

    if payload_file:
        cfg.source = SourceConfig(type="file", path=payload_file)
    return cfg


def create_cluster_table(report: ClusterReport) -> Table:
    """Create a Rich table of one engine's clusters and nodes."""
    table = Table(title=f"{report.engine.display_name} Clusters", show_header=True, header_style="bold")

    table.add_column("Cluster", style="cyan", no_wrap=True)
    table.add_column("Node", no_wrap=True)
    table.add_column("Role", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Free Disk", justify="right")
    table.add_column("Lag", justify="right")
    table.add_column("Reason")

    for group in report.groups:
        for index, item in enumerate(group.nodes):
            node = item.node
            style = severity_color(item.severity)
            free = f"{node.free_disk_percent:.1f}%" if node.free_disk_percent is not None else "-"
            lag = f"{node.replication_lag_seconds:g}s" if node.replication_lag_seconds is not None else "-"
            table.add_row(
                Text(group.cluster_id, style=severity_color(group.severity)) if index == 0 else "",
                node.hostname,
                node.role,
                Text(item.severity.label.upper(), style=style),
                free,
                lag,
                Text(item.reason or "-", style=style if item.reason else "dim"),
            )

    return table


def create_summary_panel(health: FleetHealth) -> Panel:
    """Create a summary panel."""
    status = health.status

    summary_parts = [
        f"[bold]Overall Status:[/bold] [{severity_color(status)}]{status.upper()}[/]",
        f"[bold]Nodes:[/bold] {health.total} total, "
        f"[green]{health.healthy_count}[/] healthy, "
        f"[yellow]{health.warning_count}[/] warning, "
        f"[red]{health.critical_count}[/] critical",
        f"[bold]Last Check:[/bold] {health.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
    ]

    if health.error_message:
        summary_parts.append(f"[bold red]Source error:[/] {health.error_message}")

    alerts = health.get_all_alerts()
    if alerts:
        summary_parts.append("")
        summary_parts.append(f"[bold red]Issues ({len(alerts)}):[/]")
        for hostname, reason in alerts[:5]:  # Show max 5 issues
            summary_parts.append(f"  • [{hostname}] {reason}")
        if len(alerts) > 5:
            summary_parts.append(f"  ... and {len(alerts) - 5} more")

    return Panel(
        "\n".join(summary_parts),
        title="Fleet Health Summary",
        border_style="cyan",
    )


def create_topology_table(topology: TopologyLayout, cluster_id: str) -> Table:
    """Create a Rich table listing layout positions and edges."""
    table = Table(title=f"Topology: {cluster_id}", show_header=True, header_style="bold")
    table.add_column("Node", style="cyan", no_wrap=True)
    table.add_column("Role", justify="center")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Link", justify="center")

    incoming = {edge.target_id: edge for edge in topology.edges}
    for node in topology.nodes:
        edge = incoming.get(node.id)
        link = f"{edge.weight.value} {edge.label}".strip() if edge else "-"
        table.add_row(node.id, node.role.value, f"{node.x:.1f}", f"{node.y:.1f}", link)

    return table


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Replica Set Monitor - database replica set health and topology."""
    pass


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "-f", "--file", "payload_file",
    type=click.Path(exists=True),
    help="Read telemetry from a JSON/YAML file instead of the configured source",
)
@click.option(
    "-e", "--engine",
    type=ENGINE_CHOICES,
    help="Only show one engine",
)
@click.option(
    "--json", "output_json",
    is_flag=True,
    help="Output in JSON format",
)
@click.option(
    "--watch", "-w",
    is_flag=True,
    help="Continuously watch health status",
)
@click.option(
    "--interval", "-i",
    default=None,
    type=int,
    help="Watch interval in seconds (default: refresh_interval from config)",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
def check(
    config: Optional[str],
    payload_file: Optional[str],
    engine: Optional[str],
    output_json: bool,
    watch: bool,
    interval: Optional[int],
    log_level: str,
) -> None:
    """Check health of every monitored cluster."""
    setup_logging(log_level)

    cfg = load_config(config, payload_file)
    if engine:
        cfg.engines = [engine.lower()]

    monitor = FleetMonitor(cfg)

    def do_check() -> FleetHealth:
        health = monitor.check_all()

        if output_json:
            click.echo(json.dumps(health.to_dict(), indent=2))
        else:
            console.print(create_summary_panel(health))
            for report in health.reports.values():
                if report.groups:
                    console.print(create_cluster_table(report))

        return health

    if watch:
        interval = interval or cfg.refresh_interval
        console.print(f"[dim]Watching health status (interval: {interval}s, Ctrl+C to stop)[/]")
        try:
            while True:
                console.clear()
                do_check()
                time.sleep(interval)
        except KeyboardInterrupt:
            console.print("\n[dim]Stopped watching.[/]")
    else:
        health = do_check()
        # Exit with error code if any node is critical
        if health.status == "critical":
            sys.exit(1)
        elif health.status == "warning":
            sys.exit(2)


@main.command()
@click.argument("engine", type=ENGINE_CHOICES)
@click.argument("cluster")
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "-f", "--file", "payload_file",
    type=click.Path(exists=True),
    help="Read telemetry from a JSON/YAML file instead of the configured source",
)
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
def topology(
    engine: str,
    cluster: str,
    config: Optional[str],
    payload_file: Optional[str],
    output_json: bool,
) -> None:
    """Lay out the topology of one cluster."""
    setup_logging("WARNING")

    cfg = load_config(config, payload_file)
    cfg.engines = [engine.lower()]
    monitor = FleetMonitor(cfg)

    health = monitor.check_all()
    if health.error_message:
        console.print(f"[red]{health.error_message}[/]")
        sys.exit(1)

    result = monitor.topology(engine, cluster)
    if result is None:
        console.print(f"[red]Cluster not found: {cluster}[/]")
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        console.print(create_topology_table(result, cluster))


@main.command()
@click.option(
    "-o", "--output",
    default="rsm.yaml",
    help="Output file path",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing file",
)
def init(output: str, force: bool) -> None:
    """Create an example configuration file."""
    path = Path(output)

    if path.exists() and not force:
        console.print(f"[red]File already exists: {path}[/]")
        console.print("Use --force to overwrite")
        sys.exit(1)

    example = create_example_config()
    example.to_yaml(path)

    console.print(f"[green]Created example configuration: {path}[/]")
    console.print("Edit this file to point at your telemetry source.")


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "-f", "--file", "payload_file",
    type=click.Path(exists=True),
    help="Read telemetry from a JSON/YAML file instead of the configured source",
)
@click.option(
    "--host",
    default=None,
    help="Dashboard host (default: from config)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Dashboard port (default: from config)",
)
def dashboard(config: Optional[str], payload_file: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Start the web dashboard API."""
    cfg = load_config(config, payload_file)
    setup_logging(cfg.log_level)

    host = host or cfg.dashboard.host
    port = port or cfg.dashboard.port
    console.print(f"[green]Starting dashboard at http://{host}:{port}[/]")

    from replicaset_monitor.dashboard import create_app
    import uvicorn

    app = create_app(cfg)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
