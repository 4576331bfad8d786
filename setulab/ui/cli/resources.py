"""
CLI commands for the resource catalog — setup, start, stop, status,
logs, list, urls.

Thin wrappers over ``setulab.core.services.catalog_ops``.
"""

from __future__ import annotations

import json
import sys

import click

from setulab.adapters.base import RuntimeClient
from setulab.core.models.resource import BatchReport
from setulab.ui.cli.context import get_runtime, get_settings

_TITLES = {"infra": "infrastructure", "monitoring": "monitoring"}
_ICONS = {"ok": "✅", "warning": "⚠️ ", "failed": "❌"}
_COLORS = {"ok": "green", "warning": "yellow", "failed": "red"}


# ── Shared helpers ──────────────────────────────────────────────


def _validate(catalog: str, names: tuple[str, ...] | list[str]) -> None:
    """Reject unknown types/names before anything else happens."""
    from setulab.core.services.catalog import UnknownResourceError, ValidationError, get_catalog

    try:
        get_catalog().validate(catalog, names)
    except ValidationError as e:
        click.secho(f"❌ {e}", fg="red")
        if isinstance(e, UnknownResourceError):
            click.echo(f"   Available {catalog} resources: {' '.join(e.available)}")
        sys.exit(1)


def _gate(ctx: click.Context) -> RuntimeClient:
    """The runtime precondition every lifecycle verb shares."""
    from setulab.core.services.preconditions import PreconditionError, check_runtime

    runtime = get_runtime(ctx)
    try:
        check_runtime(runtime)
    except PreconditionError as e:
        click.secho(f"❌ {e}", fg="red")
        if e.remediation:
            click.secho(f"   💡 {e.remediation}", fg="cyan")
        sys.exit(1)
    return runtime


def _print_report(ctx: click.Context, report: BatchReport, as_json: bool) -> None:
    """Render a batch report, exiting 1 if any resource failed."""
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.ok else 1)

    quiet = ctx.obj.get("quiet", False)
    for outcome in report.outcomes:
        if quiet and outcome.ok:
            continue
        click.secho(
            f"   {_ICONS[outcome.status]} {outcome.name:<20} {outcome.message}",
            fg=_COLORS[outcome.status],
        )

    click.echo()
    if report.ok:
        click.secho(
            f"✅ {report.verb.capitalize()} completed for {report.catalog} resources "
            f"({report.succeeded}/{report.total})",
            fg="green",
            bold=True,
        )
    else:
        click.secho(
            f"❌ {report.verb.capitalize()} failed for {report.failed} of "
            f"{report.total} {report.catalog} resources",
            fg="red",
            bold=True,
        )
        sys.exit(1)


# ── Lifecycle ───────────────────────────────────────────────────


@click.command()
@click.argument("catalog")
@click.argument("names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def setup(ctx: click.Context, catalog: str, names: tuple[str, ...], as_json: bool) -> None:
    """Generate compose, .env and config files for resources."""
    from setulab.core.services.catalog_ops import setup_resources
    from setulab.core.services.preconditions import PreconditionError

    _validate(catalog, names)
    runtime = _gate(ctx)
    settings = get_settings(ctx)

    if not as_json:
        click.secho(f"🔧 Setting up {catalog} resources: {' '.join(names)}", fg="cyan", bold=True)

    try:
        report = setup_resources(
            catalog, names,
            base_dir=settings.base_dir,
            network=settings.network,
            runtime=runtime,
        )
    except PreconditionError as e:
        click.secho(f"❌ {e}", fg="red")
        if e.remediation:
            click.secho(f"   💡 {e.remediation}", fg="cyan")
        sys.exit(1)
    except OSError as e:
        click.secho(f"❌ Cannot create {settings.base_dir}: {e}", fg="red")
        sys.exit(1)

    _print_report(ctx, report, as_json)


@click.command()
@click.argument("catalog")
@click.argument("names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def start(ctx: click.Context, catalog: str, names: tuple[str, ...], as_json: bool) -> None:
    """Start resources (docker compose up -d)."""
    from setulab.core.services.catalog_ops import start_resources

    _validate(catalog, names)
    runtime = _gate(ctx)

    if not as_json:
        click.secho(f"▶️  Starting {catalog} resources: {' '.join(names)}", fg="cyan", bold=True)

    report = start_resources(
        catalog, names, base_dir=get_settings(ctx).base_dir, runtime=runtime,
    )
    _print_report(ctx, report, as_json)


@click.command()
@click.argument("catalog")
@click.argument("names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def stop(ctx: click.Context, catalog: str, names: tuple[str, ...], as_json: bool) -> None:
    """Stop resources (docker compose down)."""
    from setulab.core.services.catalog_ops import stop_resources

    _validate(catalog, names)
    runtime = _gate(ctx)

    if not as_json:
        click.secho(f"⏹️  Stopping {catalog} resources: {' '.join(names)}", fg="cyan", bold=True)

    report = stop_resources(
        catalog, names, base_dir=get_settings(ctx).base_dir, runtime=runtime,
    )
    _print_report(ctx, report, as_json)


# ── Observe ─────────────────────────────────────────────────────


@click.command()
@click.argument("catalog")
@click.argument("name", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, catalog: str, name: str | None, as_json: bool) -> None:
    """Show status of one resource, or of every set-up resource."""
    from setulab.core.services.catalog_ops import resource_status

    _validate(catalog, [name] if name is not None else [])
    runtime = _gate(ctx)

    report = resource_status(
        catalog, name, base_dir=get_settings(ctx).base_dir, runtime=runtime,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.ok else 1)

    if not report.outcomes:
        click.secho(f"No {_TITLES[catalog]} resources are set up.", fg="yellow")
        return

    click.secho(f"📊 {_TITLES[catalog].capitalize()} services status:", fg="cyan", bold=True)
    for outcome in report.outcomes:
        click.secho(f"\n=== {outcome.name} ===", fg="blue", bold=True)
        if not outcome.ok:
            click.secho(f"   {_ICONS[outcome.status]} {outcome.message}", fg=_COLORS[outcome.status])
            continue

        services = outcome.receipt.metadata.get("services", []) if outcome.receipt else []
        if not services:
            click.secho(f"   ⚪ {outcome.message}", fg="yellow")
            continue
        for svc in services:
            state = svc.get("state", "")
            icon = "🟢" if state == "running" else "🔴" if state == "exited" else "⚪"
            click.echo(f"   {icon} {svc['name']:<30} {svc.get('status', '')}")
            if svc.get("ports"):
                click.echo(f"      Ports: {svc['ports']}")

    click.echo()
    if not report.ok:
        sys.exit(1)


@click.command()
@click.argument("catalog")
@click.argument("name")
@click.option("--tail", default=100, show_default=True, type=click.IntRange(min=1),
              help="Number of log lines per container.")
@click.pass_context
def logs(ctx: click.Context, catalog: str, name: str, tail: int) -> None:
    """Show recent logs of a resource."""
    from setulab.core.services.catalog_ops import resource_logs

    _validate(catalog, [name])
    runtime = _gate(ctx)

    report = resource_logs(
        catalog, name, base_dir=get_settings(ctx).base_dir, runtime=runtime, tail=tail,
    )
    outcome = report.outcomes[0]
    if outcome.failed:
        click.secho(f"❌ {outcome.message}", fg="red")
        sys.exit(1)

    click.echo(outcome.receipt.output if outcome.receipt else "")


@click.command("list")
@click.argument("catalog")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, catalog: str, as_json: bool) -> None:
    """List available resources of a type."""
    from setulab.core.services.catalog import get_catalog
    from setulab.core.services.catalog_ops import instance_for

    _validate(catalog, [])
    descriptors = get_catalog().descriptors(catalog)
    names = [d.name for d in descriptors]
    base_dir = get_settings(ctx).base_dir
    set_up = {n for n in names if instance_for(catalog, n, base_dir).exists}

    if as_json:
        click.echo(json.dumps({
            "catalog": catalog,
            "resources": [
                {
                    "name": d.name,
                    "set_up": d.name in set_up,
                    "image": d.image,
                    "ports": [p.compose_spec for p in d.ports],
                }
                for d in descriptors
            ],
        }, indent=2))
        return

    click.secho(f"Available {_TITLES[catalog]} resources:", fg="blue")
    for n in names:
        marker = "  ✓ set up" if n in set_up else ""
        click.echo(f"{n}{marker}")


@click.command()
@click.argument("catalog")
@click.pass_context
def urls(ctx: click.Context, catalog: str) -> None:
    """Show web UI addresses of a type's resources."""
    from setulab.core.services.catalog_ops import resource_urls

    _validate(catalog, [])
    entries = resource_urls(catalog)
    if not entries:
        click.secho(f"No {_TITLES[catalog]} resources expose a web UI.", fg="yellow")
        return

    click.secho(f"🌐 {_TITLES[catalog].capitalize()} service URLs:", fg="cyan", bold=True)
    for e in entries:
        click.echo(f"   • {e['label']}: ", nl=False)
        click.secho(e["url"], fg="cyan")
