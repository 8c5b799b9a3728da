"""Recreate command - remove selected containers so they get reprovisioned."""

import asyncio
from typing import Optional

import click

from ..common.exceptions import SelectionError
from ..models.sandbox import RecreateSelection
from ..output import format_recreate_preview, format_recreate_result
from ..services.sandbox.manager import SandboxLifecycleManager


def confirm_recreate() -> bool:
    try:
        return click.confirm(
            "This will stop and remove these containers. Continue?", default=False
        )
    except click.Abort:
        return False


@click.command("recreate")
@click.option("--all", "select_all", is_flag=True, help="Recreate all containers")
@click.option("--session", default=None, help="Recreate containers of a session key")
@click.option("--agent", default=None, help="Recreate containers of an agent id")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
@click.pass_context
def recreate_cmd(
    ctx: click.Context,
    select_all: bool,
    session: Optional[str],
    agent: Optional[str],
    force: bool,
):
    """Remove sandbox containers so they are recreated on next use.

    \b
    Exactly one of --all, --session or --agent is required.

    \b
    Examples:
      sandbox-manager recreate --all                  # Every container
      sandbox-manager recreate --session agent:a:main # One session
      sandbox-manager recreate --agent coder -f       # One agent, no prompt
    """
    selection = RecreateSelection(all=select_all, session=session, agent=agent)
    try:
        selection.validate()
    except SelectionError as e:
        raise click.UsageError(e.message, ctx=ctx)

    manager: SandboxLifecycleManager = ctx.obj["manager"]
    containers = asyncio.run(manager.select_containers(selection))

    if not containers:
        click.echo("No containers found matching the criteria.")
        return

    click.echo(format_recreate_preview(containers))

    if not force and not confirm_recreate():
        click.echo("Cancelled.")
        return

    click.echo("\nRemoving containers...\n")
    result = asyncio.run(
        manager.remove_containers(
            containers,
            on_removed=lambda name: click.echo(f"Removed {name}"),
            on_failed=lambda name, error: click.echo(
                f"Failed to remove {name}: {error}", err=True
            ),
        )
    )
    click.echo()
    click.echo(format_recreate_result(result))

    if result.fail_count > 0:
        raise SystemExit(1)
