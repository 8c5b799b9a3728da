"""Main CLI entry point."""

import click

from . import __version__
from .commands.ensure_running import ensure_running_cmd
from .commands.list import list_cmd
from .commands.prune import prune_cmd
from .commands.recreate import recreate_cmd
from .commands.serve import serve_cmd
from .common.exceptions import ConfigError
from .common.logger import set_log_level
from .services.sandbox.manager import build_sandbox_manager

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="sandbox-manager")
@click.option(
    "-c", "--config", "config_path", envvar="SANDBOX_CONFIG_PATH", help="Sandbox config file"
)
@click.option(
    "-r", "--runtime", envvar="SANDBOX_RUNTIME_MODE", help="Container runtime (docker, podman)"
)
@click.option(
    "--log-level",
    envvar="SANDBOX_CLI_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Log level for diagnostics on stderr",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str, runtime: str, log_level: str):
    """sandbox-manager - manage agent sandbox containers.

    \b
    Tracks the containers provisioned for agent sessions, reconciles the
    registry with the container runtime, prunes stale containers and
    recreates containers on demand.

    \b
    Quick start:
      sandbox-manager list
      sandbox-manager recreate --agent coder
      sandbox-manager prune --dry-run

    \b
    Environment variables:
      SANDBOX_CONFIG_PATH  - Sandbox config file (YAML)
      SANDBOX_RUNTIME_MODE - Container runtime (docker, podman)
      REDIS_URL            - Registry Redis URL
    """
    set_log_level(log_level)
    ctx.ensure_object(dict)
    try:
        ctx.obj["manager"] = build_sandbox_manager(
            config_path=config_path, runtime_mode=runtime
        )
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)


# Register commands
cli.add_command(list_cmd)
cli.add_command(recreate_cmd)
cli.add_command(prune_cmd)
cli.add_command(ensure_running_cmd)
cli.add_command(serve_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
