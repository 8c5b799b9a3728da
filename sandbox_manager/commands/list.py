"""List command - show registered sandbox containers."""

import asyncio

import click

from ..output import format_container_list, format_containers_json, format_summary
from ..services.sandbox.manager import SandboxLifecycleManager


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool):
    """List sandbox containers and their runtime state.

    \b
    Examples:
      sandbox-manager list          # Table with status and image match
      sandbox-manager list --json   # {"containers": [...]}
    """
    manager: SandboxLifecycleManager = ctx.obj["manager"]
    containers = asyncio.run(manager.list_containers())

    if as_json:
        click.echo(format_containers_json(containers))
        return

    click.echo(format_container_list(containers))
    click.echo()
    click.echo(format_summary(containers))
