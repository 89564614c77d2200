"""CLI entry point for the VPN IP tracker."""

from pathlib import Path

import click

from vpn_ip_tracker import __version__
from vpn_ip_tracker.config import load_config
from vpn_ip_tracker.logging import setup_logging


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """VPN IP Tracker - report your VPN address to a remote endpoint."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["config"] = load_config(config)
    ctx.obj["logger"] = setup_logging(ctx.obj["config"], verbose=verbose)


@main.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Monitor VPN interfaces and report address changes."""
    import asyncio
    import signal

    from vpn_ip_tracker import monitor
    from vpn_ip_tracker.errors import ConfigInvalidError
    from vpn_ip_tracker.source import NetifacesInterfaceSource

    config = ctx.obj["config"]
    logger = ctx.obj["logger"]

    try:
        config.validate()
    except ConfigInvalidError as e:
        click.echo(f"Configuration error: {e}", err=True)
        click.echo("Configure with: vpn-ip-tracker configure --token <TOKEN>", err=True)
        raise SystemExit(1)

    async def _run():
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                logger.debug(f"Cannot install handler for {sig.name}")

        await monitor.run(
            config=config,
            source=NetifacesInterfaceSource(),
            stop_event=stop_event,
        )

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("\nShutting down...")


@main.command()
@click.option("--token", "-t", required=True, help="Application token.")
@click.option(
    "--report-url",
    "-r",
    default=None,
    help="URL to send reports with IP address info.",
)
@click.pass_context
def configure(ctx: click.Context, token: str, report_url: str | None) -> None:
    """Store the token and report URL in the config file."""
    from vpn_ip_tracker.config import Config, get_default_report_url, store_config
    from vpn_ip_tracker.errors import ConfigInvalidError

    current = ctx.obj["config"]
    config = Config(
        token=token,
        report_url=report_url or get_default_report_url() or "",
        log_level=current.log_level,
        log_file=current.log_file,
    )

    try:
        config.validate()
    except ConfigInvalidError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    path = store_config(config, ctx.obj["config_path"])
    click.echo(f"Configuration saved to {path}")


@main.group()
def service() -> None:
    """System service commands."""
    pass


@service.command("install")
def service_install() -> None:
    """Install the systemd user service."""
    from vpn_ip_tracker.errors import ServiceError
    from vpn_ip_tracker.service import UNIT_NAME, install_service

    try:
        unit_path = install_service()
    except ServiceError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Service unit written to {unit_path}")
    click.echo(f"Enable with: systemctl --user enable --now {UNIT_NAME}")


@service.command("uninstall")
def service_uninstall() -> None:
    """Remove the systemd user service."""
    from vpn_ip_tracker.errors import ServiceError
    from vpn_ip_tracker.service import UNIT_NAME, uninstall_service

    try:
        unit_path = uninstall_service()
    except ServiceError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Removed {unit_path}")
    click.echo(f"Stop a running instance with: systemctl --user stop {UNIT_NAME}")


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"vpn-ip-tracker version {__version__}")
