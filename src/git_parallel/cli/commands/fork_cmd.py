import click

from git_parallel.cli.core import discover_parallel_context
from git_parallel.cli.ensure import handle_parallel_errors
from git_parallel.core.context import AppContext
from git_parallel.core.lifecycle import ForkMode, fork_worktree


@click.command("fork")
@click.argument("alias", required=False)
@click.option(
    "--move",
    "-mv",
    "move",
    is_flag=True,
    help="Move origin's uncommitted changes (including untracked files) into the fork.",
)
@click.option(
    "--mirror",
    "-mr",
    "mirror",
    is_flag=True,
    help="Copy origin's uncommitted changes into the fork, leaving origin untouched.",
)
@click.pass_obj
@handle_parallel_errors
def fork_cmd(ctx: AppContext, alias: str | None, move: bool, mirror: bool) -> None:
    """Create a fork of the current branch in a temporary worktree.

    The fork is a detached worktree at origin's HEAD, stored under
    <temp_root>/worktrees/<project>/<branch>/ALIAS. Join it back with
    `git parallel join ALIAS`.

    Example:
      git parallel fork feature-x --move
    """
    mode = ForkMode.from_flags(move, mirror)
    pctx = discover_parallel_context(ctx)
    fork_worktree(ctx, pctx, alias, mode)
