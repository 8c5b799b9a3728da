"""Ensure-running command - resume a stopped container."""

import asyncio

import click

from ..common.exceptions import RuntimeOperationError
from ..services.sandbox.manager import SandboxLifecycleManager


@click.command("ensure-running")
@click.argument("name")
@click.pass_context
def ensure_running_cmd(ctx: click.Context, name: str):
    """Start container NAME if it exists but is stopped."""
    manager: SandboxLifecycleManager = ctx.obj["manager"]

    try:
        started = asyncio.run(manager.ensure_container_running(name))
    except RuntimeOperationError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    if started:
        click.echo(f"Started {name}")
    else:
        click.echo(f"Nothing to do for {name} (running or not found)")
