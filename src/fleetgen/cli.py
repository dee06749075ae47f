"""CLI interface for the fleet generator."""
import json
import sys

import click

from fleetgen.config.loader import AppConfig
from fleetgen.exceptions import FleetGenException
from fleetgen.generators.vehicle_gen import VehicleRecordFactory
from fleetgen.logging_config import configure_logging
from fleetgen.metrics.collector import create_metrics_collector
from fleetgen.server import ControlServer
from fleetgen.service import GeneratorService
from fleetgen.shutdown import create_shutdown_handler


@click.group()
@click.version_option(package_name="fleetgen")
def cli():
    """Synthetic fleet vehicle generator."""
    pass


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path (JSON or YAML)",
)
@click.option("--autostart/--no-autostart", default=False, help="Start generating immediately")
@click.option("--host", default="0.0.0.0", help="Control server bind address")
@click.option("--port", type=int, default=8080, help="Control server port")
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics collection")
@click.option("--metrics-port", type=int, default=9090, help="Port for metrics server")
@click.option("--log-level", default="INFO", help="Log level")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.option("--log-file", type=click.Path(), help="Also write logs to this file")
def run(
    config: str | None,
    autostart: bool,
    host: str,
    port: int,
    metrics: bool,
    metrics_port: int,
    log_level: str,
    json_logs: bool,
    log_file: str | None,
):
    """Run the generator service with its HTTP control surface."""
    configure_logging(level=log_level, json_format=json_logs, log_file=log_file)
    shutdown_handler = create_shutdown_handler()

    try:
        app_config = AppConfig.from_file(config) if config else AppConfig.load()
    except FleetGenException as e:
        click.echo(f"Error: {e.get_user_message()}", err=True)
        sys.exit(1)

    metrics_collector = create_metrics_collector(enabled=metrics)
    if metrics:
        metrics_collector.start_metrics_server(port=metrics_port)
        click.echo(f"Metrics server started on port {metrics_port}")

    service = GeneratorService(app_config, metrics=metrics_collector)
    shutdown_handler.register_cleanup(service.close)

    server = ControlServer(service, host=host, port=port)
    server.start()
    click.echo(f"Control server listening on {host}:{port}")
    click.echo(f"Bus: {app_config.bus.transport} -> {app_config.bus.topic}")
    click.echo(f"Period: {app_config.generator.period_ms} ms")

    if autostart:
        click.echo(service.start().message)

    shutdown_handler.wait_for_shutdown()

    click.echo()
    click.echo("Summary:")
    click.echo(f"Generated {service.status().generated_count} vehicles")

    if metrics:
        stats = metrics_collector.get_stats()
        click.echo(f"Publish failures: {stats['publish_failures']}")
        click.echo(f"Rate: {stats['rate_per_second']:.1f} vehicles/s over {stats['duration_seconds']:.1f}s")


@cli.command()
@click.option("--count", "-n", type=int, default=5, show_default=True, help="Number of vehicles to print")
@click.option("--seed", type=int, help="Random seed for reproducible data")
def preview(count: int, seed: int | None):
    """Print generated vehicle envelopes without publishing them."""
    factory = VehicleRecordFactory(seed=seed)
    for _ in range(count):
        click.echo(json.dumps(factory.create().to_envelope()))


def main():
    cli()


if __name__ == "__main__":
    main()
