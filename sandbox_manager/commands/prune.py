"""Prune command - evict idle or aged-out containers now."""

import asyncio
from typing import Optional

import click

from ..common.exceptions import SandboxManagerError
from ..output import format_age, format_table
from ..services.sandbox.manager import SandboxLifecycleManager


@click.command("prune")
@click.option("--agent", default=None, help="Use this agent's prune thresholds")
@click.option("--dry-run", is_flag=True, help="Only show what would be pruned")
@click.pass_context
def prune_cmd(ctx: click.Context, agent: Optional[str], dry_run: bool):
    """Remove containers past their idle or max-age threshold.

    \b
    Examples:
      sandbox-manager prune --dry-run     # List stale containers
      sandbox-manager prune --agent coder # Prune with coder's thresholds
    """
    manager: SandboxLifecycleManager = ctx.obj["manager"]

    try:
        settings = manager.config_resolver.resolve_prune_thresholds(agent)
        if settings.disabled:
            click.echo("Pruning is disabled (idleHours and maxAgeDays are both 0).")
            return

        if dry_run:
            entries = manager.list_prunable_entries(settings)
            rows = [
                [
                    e.container_name,
                    e.session_key,
                    format_age(e.created_at_ms),
                    format_age(e.last_used_at_ms),
                ]
                for e in entries
            ]
            click.echo(format_table(["name", "session", "age", "idle"], rows))
            return

        pruned = asyncio.run(manager.prune_sandboxes(settings))
    except SandboxManagerError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    for name in pruned:
        click.echo(f"Pruned {name}")
    click.echo(f"Pruned {len(pruned)} container(s).")
