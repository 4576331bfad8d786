"""
CLI command for the prerequisite checker and installer.

Thin wrapper over ``setulab.core.services.prereq``.
"""

from __future__ import annotations

import json
import sys

import click

from setulab.core.models.prereq import PrereqReport, RequirementResult, RequirementStatus

_STATUS_ICONS = {
    RequirementStatus.SATISFIED: "✅",
    RequirementStatus.BELOW_MINIMUM: "⚠️ ",
    RequirementStatus.MISSING: "❌",
    RequirementStatus.INSTALL_FAILED: "❌",
    RequirementStatus.UNCHECKED: "⚪",
}


def _confirm(question: str, default: bool) -> bool:
    return click.confirm(click.style(question, fg="yellow"), default=default)


def _header(text: str) -> None:
    click.secho(text, fg="cyan", bold=True)
    click.secho("=" * 60, fg="cyan")


def _print_result(result: RequirementResult) -> None:
    req = result.requirement
    icon = _STATUS_ICONS[result.status]
    optional = "" if req.required else " (optional)"

    if result.status == RequirementStatus.SATISFIED:
        version = f"v{result.version}" if result.version else "installed"
        click.secho(f"  {icon} {req.display_name}: {version}{optional}", fg="green")
    elif result.status == RequirementStatus.BELOW_MINIMUM:
        click.secho(
            f"  {icon} {req.display_name}: v{result.version or '?'} is below "
            f"required {req.min_version}",
            fg="yellow",
        )
    elif result.status == RequirementStatus.MISSING:
        color = "red" if req.required else "yellow"
        click.secho(f"  {icon} {req.display_name}: Not installed{optional}", fg=color)
    else:
        click.secho(f"  {icon} {req.display_name}: installation failed", fg="red")
        if result.install_error:
            click.echo(f"      {result.install_error}")

    for note in result.notes:
        click.echo(f"      • {note}")
    if result.guidance and not result.satisfied:
        click.secho(f"      💡 {result.guidance}", fg="cyan")


def _print_summary(report: PrereqReport) -> None:
    _header("Summary")
    click.secho("Required Dependencies:", bold=True)
    for result in report.results:
        if result.requirement.required:
            _print_result(result)

    click.echo()
    click.secho("Additional Tools:", bold=True)
    for result in report.results:
        if not result.requirement.required:
            _print_result(result)
    click.echo()


@click.command()
@click.option("--check-only", is_flag=True, help="Only check prerequisites, don't install.")
@click.option("--force", is_flag=True, help="Offer to reinstall tools that are already installed.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON (implies --check-only).")
@click.pass_context
def prereq(
    ctx: click.Context,
    check_only: bool,
    force: bool,
    assume_yes: bool,
    as_json: bool,
) -> None:
    """Check and install prerequisites (Docker, Docker Compose, Task)."""
    from setulab.core.services.prereq import detect_os, resolve, system_info, verify_runtime

    interactive = not (check_only or as_json)
    quiet = ctx.obj.get("quiet", False)
    profile = detect_os()

    if not as_json and not quiet:
        title = "🔍 Prerequisite Check Only" if not interactive else "🚀 setulab — Prerequisite Checker"
        _header(title)
        if force and interactive:
            click.secho("Force mode enabled. Will offer to reinstall components.", fg="yellow")
        for key, value in system_info(profile).items():
            click.echo(click.style(f"{key}: ", fg="cyan") + value)
        click.echo()

    report = resolve(
        interactive=interactive,
        os_profile=profile,
        confirm=None if assume_yes else _confirm,
        default_answer=assume_yes,
        force=force,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.required_ok else 1)

    _print_summary(report)

    if report.installed_any:
        click.secho("Some components were installed. You may need to:", fg="yellow")
        click.echo("  1. Log out and log back in (for Docker group permissions)")
        click.echo("  2. Or run: newgrp docker")
        click.echo("  3. Restart your terminal session")
        click.echo()

        if assume_yes or _confirm("Do you want to test the Docker installation now?", False):
            from setulab.ui.cli.context import get_runtime

            receipt = verify_runtime(get_runtime(ctx))
            if receipt.ok:
                click.secho("✅ Docker is working correctly!", fg="green")
            else:
                click.secho(f"❌ Docker test failed: {receipt.error}", fg="red")

    if not report.required_ok:
        click.secho("❌ Required prerequisites are missing.", fg="red", bold=True)
        sys.exit(1)

    if report.ok:
        click.secho("✅ All prerequisites are satisfied! 🎉", fg="green", bold=True)
    else:
        click.secho("✅ Required prerequisites are satisfied.", fg="green", bold=True)

    if not quiet:
        click.echo()
        click.secho("Next Steps:", bold=True)
        click.echo("  1. Run: " + click.style("setulab help", fg="cyan"))
        click.echo("  2. Setup services: " + click.style("setulab setup infra postgres", fg="cyan"))
        click.echo("  3. Show service URLs: " + click.style("setulab urls monitoring", fg="cyan"))
