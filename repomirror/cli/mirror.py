"""
CLI mirror commands — add, fetch, push and list mirrors.

Usage:
    repomirror add <fetchURL> <pushURL> [<localDest>]
    repomirror fetch
    repomirror push
    repomirror list [--json]
"""

from __future__ import annotations

from typing import Optional

import click

from ..mirror.errors import DiscoveryError, MirrorError
from ..mirror.manager import MirrorManager, OperationResult
from ..mirror.runner import OperationKind


def _manager(ctx: click.Context) -> MirrorManager:
    return MirrorManager(ctx.obj["settings"], ctx.obj.get("git"))


def _echo_result(result: OperationResult) -> None:
    """One status line per mirror, printed as soon as it finishes."""
    if result.success:
        click.secho(f"[✔] {result.name}", fg="green")
    else:
        click.secho(f"[X] {result.name}", fg="red")


def _run_all(ctx: click.Context, kind: OperationKind) -> None:
    manager = _manager(ctx)
    try:
        outcome = manager.perform(kind, on_result=_echo_result)
    except DiscoveryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    if not outcome.ok:
        click.secho(f"{kind.value.capitalize()} failed for {outcome.failed} repos", fg="red")
        raise SystemExit(1)


@click.command("add")
@click.argument("fetch_url", metavar="<fetchURL>")
@click.argument("push_url", metavar="<pushURL>")
@click.argument("local_dest", metavar="[<localDest>]", required=False)
@click.pass_context
def add(ctx: click.Context, fetch_url: str, push_url: str, local_dest: Optional[str]) -> None:
    """Add a repository to mirror.

    Clones FETCH_URL as a bare mirror and sets origin's push URL to
    PUSH_URL. Without LOCAL_DEST the mirror is stored as <host>/<path>.git
    under the workspace root.
    """
    manager = _manager(ctx)
    try:
        dest = manager.add(fetch_url, push_url, local_dest)
    except MirrorError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    click.secho(f"✓ Added {manager.display_name(dest)}", fg="green")


@click.command("fetch")
@click.pass_context
def fetch(ctx: click.Context) -> None:
    """Fetch changes for all mirrored repositories."""
    _run_all(ctx, OperationKind.FETCH)


@click.command("push")
@click.pass_context
def push(ctx: click.Context) -> None:
    """Push changes for all mirrored repositories."""
    _run_all(ctx, OperationKind.PUSH)


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_mirrors(ctx: click.Context, as_json: bool) -> None:
    """List mirrored repositories and where they push to."""
    manager = _manager(ctx)
    try:
        infos = manager.list_mirrors()
    except DiscoveryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    if as_json:
        import json
        click.echo(json.dumps([i.to_dict() for i in infos], indent=2))
        return

    if not infos:
        click.echo(f"No mirrors under {manager.root}")
        click.echo("  Add one with: repomirror add <fetchURL> <pushURL>")
        return

    for info in infos:
        click.secho(info.name, bold=True, nl=False)
        if info.error:
            click.secho(f"  ⚠️  {info.error}", fg="yellow")
        else:
            click.echo(f"  → {info.push_url} ({info.target_kind})")
