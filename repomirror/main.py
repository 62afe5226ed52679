"""
repomirror — CLI Entry Point

Mirror git repositories between two disconnected networks. Local bare
copies of every repository live under a workspace directory (the current
directory by default); fetch updates them from the source network, push
replays them onto the destination network.

Usage:
    repomirror add <fetchURL> <pushURL> [<localDest>]
    repomirror fetch
    repomirror push
    repomirror list [--json]
    repomirror version
"""

from __future__ import annotations

# Load .env file FIRST, before anything reads REPOMIRROR_* variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import platform
from typing import Optional

import click

from . import __version__
from .cli.mirror import add, fetch, list_mirrors, push
from .logging_config import setup_logging
from .mirror.config import MirrorSettings
from .mirror.errors import PrimitiveError
from .mirror.git_ops import GitCommands


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace holding the mirrors [env: REPOMIRROR_ROOT, default: .]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Application log level [env: LOG_LEVEL]",
)
@click.pass_context
def cli(ctx: click.Context, root: Optional[Path], log_level: Optional[str]) -> None:
    """repomirror — Mirror Git repositories between two disconnected networks."""
    setup_logging(level=log_level)

    ctx.ensure_object(dict)
    settings = MirrorSettings.from_env()
    if root is not None:
        settings.root = root
    ctx.obj["settings"] = settings


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show repomirror version information."""
    settings: MirrorSettings = ctx.obj["settings"]
    git = ctx.obj.get("git") or GitCommands(settings.git_executable, settings.git_timeout)

    try:
        git_version = git.version()
    except PrimitiveError:
        git_version = click.style("not found", fg="red")

    click.echo(f"  Version:    {__version__}")
    click.echo(f"  Python:     {platform.python_version()}")
    click.echo(f"  Git:        {git_version}")


# Mirror commands — in repomirror/cli/mirror.py
cli.add_command(add)
cli.add_command(fetch)
cli.add_command(push)
cli.add_command(list_mirrors)


if __name__ == "__main__":
    cli()
