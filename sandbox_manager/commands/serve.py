"""Serve command - run background pruning until interrupted."""

import asyncio

import click

from ..services.sandbox.manager import SandboxLifecycleManager


async def run_prune_loop(manager: SandboxLifecycleManager) -> None:
    await manager.start_scheduler()
    try:
        await manager.maybe_prune_sandboxes()
        await asyncio.Event().wait()
    finally:
        await manager.stop_scheduler()


@click.command("serve")
@click.pass_context
def serve_cmd(ctx: click.Context):
    """Prune stale containers periodically until interrupted (Ctrl-C)."""
    manager: SandboxLifecycleManager = ctx.obj["manager"]
    click.echo("Sandbox prune scheduler running. Press Ctrl-C to stop.")
    try:
        asyncio.run(run_prune_loop(manager))
    except KeyboardInterrupt:
        click.echo("Stopped.")
