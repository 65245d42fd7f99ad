"""Main CLI entry point for the device worker.

Commands:
    device-worker apply <file>
    device-worker show
    device-worker workloads
    device-worker reconcile
    device-worker run [--source <file>]
    device-worker deregister
"""

import json
import logging
import sys
import time
from pathlib import Path

import click
from pydantic import ValidationError

from .. import __version__
from ..configuration import ConfigurationError
from ..settings import WorkerSettings
from ..worker import DeviceWorker
from ..workloads import WorkloadError

_logger = logging.getLogger(__name__)


def build_worker(settings: WorkerSettings) -> DeviceWorker:
    """Create the device worker for a CLI invocation."""
    return DeviceWorker(settings)


def _worker(ctx: click.Context) -> DeviceWorker:
    try:
        return build_worker(ctx.obj)
    except OSError as e:
        click.echo(f"Error: Cannot initialize device worker: {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="device-worker")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Persisted configuration directory [env: DEVICE_WORKER_DATA_DIR]",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Manifest parent directory [env: DEVICE_WORKER_CONFIG_DIR]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, config_dir: Path | None, log_level: str) -> None:
    """Device Worker - keeps containerized workloads matching the desired state.

    \b
    Apply and inspect desired state:
        device-worker apply desired.json
        device-worker show
    \b
    Inspect and repair the runtime:
        device-worker workloads
        device-worker reconcile
        device-worker run --source desired.json
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = WorkerSettings.from_env(data_dir=data_dir, config_dir=config_dir)
    except ValidationError as e:
        click.echo(f"Error: Invalid settings: {e}")
        sys.exit(1)


# =============================================================================
# Desired State Commands
# =============================================================================


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def apply(ctx: click.Context, source: Path) -> None:
    """Apply a desired-state document.

    \b
    Examples:
        device-worker apply desired.json
    """
    worker = _worker(ctx)
    try:
        applied = worker.apply_file(source)
    except ValidationError as e:
        click.echo(f"Error: Invalid desired-state document: {e}")
        sys.exit(1)
    except (ConfigurationError, OSError) as e:
        click.echo(f"Error: Update failed: {e}")
        sys.exit(1)

    version = worker.configuration.get_configuration_version() or "<none>"
    if applied:
        click.echo(f"Applied configuration version {version}")
    else:
        click.echo(f"Configuration unchanged (version {version})")


@cli.command()
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
@click.pass_context
def show(ctx: click.Context, output_format: str) -> None:
    """Show the current device configuration."""
    configuration = _worker(ctx).configuration
    device = configuration.get_device_configuration()
    heartbeat = device.heartbeat if device else None
    workloads = [w.name for w in configuration.get_workloads()]

    if output_format == "json":
        data = {
            "device_id": configuration.get_device_id(),
            "version": configuration.get_configuration_version(),
            "initial": configuration.is_initial_config(),
            "heartbeat_period_seconds": heartbeat.period_seconds if heartbeat else None,
            "workloads": workloads,
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Config file: {configuration.config_file}")
    click.echo(f"  Device:    {configuration.get_device_id() or '-'}")
    click.echo(f"  Version:   {configuration.get_configuration_version() or '-'}")
    click.echo(f"  Initial:   {'yes' if configuration.is_initial_config() else 'no'}")
    if heartbeat:
        click.echo(f"  Heartbeat: every {heartbeat.period_seconds}s")
    if workloads:
        click.echo("  Workloads:")
        for name in workloads:
            click.echo(f"    - {name}")
    else:
        click.echo("  Workloads: none")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def deregister(ctx: click.Context, yes: bool) -> None:
    """Delete the persisted device configuration."""
    configuration = _worker(ctx).configuration
    if not yes and not click.confirm(f"Delete {configuration.config_file}?"):
        click.echo("Aborted.")
        sys.exit(0)
    try:
        configuration.deregister()
    except OSError as e:
        click.echo(f"Error: Cannot remove device configuration: {e}")
        sys.exit(1)
    click.echo("Device configuration removed.")


# =============================================================================
# Runtime Commands
# =============================================================================


@cli.command()
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
@click.pass_context
def workloads(ctx: click.Context, output_format: str) -> None:
    """List workloads known to the container runtime."""
    try:
        infos = _worker(ctx).workloads.list_workloads()
    except WorkloadError as e:
        click.echo(f"Error: Cannot list workloads: {e}")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps([w.model_dump() for w in infos], indent=2))
        return

    if not infos:
        click.echo("No workloads running.")
        return
    for info in infos:
        click.echo(f"{info.name:<30} {info.status}")


@cli.command()
@click.pass_context
def reconcile(ctx: click.Context) -> None:
    """Run a single reconciliation sweep."""
    try:
        report = _worker(ctx).workloads.reconcile()
    except (WorkloadError, OSError) as e:
        click.echo(f"Error: Reconciliation failed: {e}")
        sys.exit(1)

    click.echo(f"Reconciled in {report.duration_seconds:.2f}s")
    click.echo(f"  Ran:     {', '.join(report.ran) or '-'}")
    click.echo(f"  Started: {', '.join(report.started) or '-'}")
    click.echo(f"  Running: {', '.join(report.skipped) or '-'}")
    if report.errors:
        click.echo("  Errors:")
        for err in report.errors:
            click.echo(f"    - {err}")
        sys.exit(1)


@cli.command()
@click.option(
    "--source",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Desired-state document to re-apply every data transfer interval",
)
@click.pass_context
def run(ctx: click.Context, source: Path | None) -> None:
    """Run the reconciliation loop until interrupted.

    \b
    Examples:
        device-worker run
        device-worker run --source /etc/device-worker/desired.json
    """
    worker = _worker(ctx)
    interval = worker.configuration.get_data_transfer_interval().total_seconds()
    worker.start()
    click.echo("Device worker running. Press Ctrl-C to stop.")
    try:
        while True:
            if source is not None:
                try:
                    worker.apply_file(source)
                except (ValidationError, ConfigurationError, OSError) as e:
                    _logger.error("Cannot apply %s: %s", source, e)
            time.sleep(interval)
    except KeyboardInterrupt:
        click.echo("Stopping.")
    finally:
        worker.stop()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
