"""
setulab — CLI entrypoint.

Usage:
    setulab --help
    setulab setup infra postgres rabbitmq
    setulab status monitoring
    setulab prereq --check-only
"""

from __future__ import annotations

from pathlib import Path

import click

from setulab import __version__
from setulab.core.observability.logging_config import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="setulab")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to setulab.yml (default: auto-detect).",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Where instance directories live (default: /data/setulab).",
)
@click.option("--mock", is_flag=True, help="Use an in-memory runtime instead of docker.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    base_dir: str | None,
    mock: bool,
) -> None:
    """🚀 setulab — local infrastructure and monitoring services on Docker Compose.

    \b
    Types:
        infra       Infrastructure services
        monitoring  Monitoring tools

    \b
    Examples:
        setulab prereq                      # Check prerequisites first
        setulab setup infra postgres rabbitmq
        setulab start infra postgres
        setulab status infra
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["base_dir"] = Path(base_dir) if base_dir else None
    ctx.obj["mock"] = mock

    configure_logging(debug=debug, verbose=verbose, quiet=quiet)


@cli.command("help")
@click.pass_context
def help_cmd(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


# ── Register commands from setulab/ui/cli/ ──────────────────────

from setulab.ui.cli.prereq import prereq  # noqa: E402
from setulab.ui.cli.resources import list_cmd, logs, setup, start, status, stop, urls  # noqa: E402

cli.add_command(setup)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(status)
cli.add_command(logs)
cli.add_command(list_cmd)
cli.add_command(urls)
cli.add_command(prereq)
cli.add_command(prereq, name="prerequisite")
cli.add_command(prereq, name="prerequisites")


if __name__ == "__main__":
    cli()
