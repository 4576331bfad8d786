"""Per-invocation settings and runtime, cached on ``ctx.obj``."""

from __future__ import annotations

import sys

import click

from setulab.adapters.base import RuntimeClient
from setulab.core.config.loader import Settings


def get_settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation, exiting 1 on a bad config."""
    if "settings" not in ctx.obj:
        from setulab.core.config.loader import ConfigError, load_settings

        try:
            ctx.obj["settings"] = load_settings(
                ctx.obj.get("config_path"),
                base_dir=ctx.obj.get("base_dir"),
            )
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)
    return ctx.obj["settings"]


def get_runtime(ctx: click.Context) -> RuntimeClient:
    """The runtime client; tests may pre-seed ``ctx.obj["runtime"]``."""
    if "runtime" not in ctx.obj:
        from setulab.adapters import create_runtime

        ctx.obj["runtime"] = create_runtime(get_settings(ctx), mock=ctx.obj.get("mock", False))
    return ctx.obj["runtime"]
