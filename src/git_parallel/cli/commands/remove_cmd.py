import click

from git_parallel.cli.core import discover_parallel_context
from git_parallel.cli.ensure import handle_parallel_errors
from git_parallel.core.context import AppContext
from git_parallel.core.lifecycle import remove_fork


@click.command("remove")
@click.argument("alias", required=False)
@click.pass_obj
@handle_parallel_errors
def remove_cmd(ctx: AppContext, alias: str | None) -> None:
    """Remove a fork without joining it.

    Refuses forks with uncommitted changes and the fork you are standing in.
    If git cannot remove the worktree, asks before deleting the directory.
    """
    pctx = discover_parallel_context(ctx)
    remove_fork(ctx, pctx, alias)
