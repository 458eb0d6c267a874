import click

from git_parallel.cli.core import discover_parallel_context
from git_parallel.cli.ensure import handle_parallel_errors
from git_parallel.core.context import AppContext
from git_parallel.core.errors import ValidationError
from git_parallel.core.join import JOIN_USAGE, join_fork


def _parse_join_args(args: tuple[str, ...]) -> str | None:
    """First positional is the alias; anything else is rejected."""
    alias: str | None = None
    for arg in args:
        if alias is None and not arg.startswith("-"):
            alias = arg
            continue
        raise ValidationError(f"Unknown option '{arg}'.", hints=[JOIN_USAGE])
    return alias


@click.command("join", context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--keep",
    is_flag=True,
    help="Keep the fork after joining and move its base commit to origin's new HEAD.",
)
@click.option(
    "--all",
    "include_all",
    is_flag=True,
    help="Also bring the fork's uncommitted changes into origin.",
)
@click.pass_obj
@handle_parallel_errors
def join_cmd(ctx: AppContext, args: tuple[str, ...], keep: bool, include_all: bool) -> None:
    """Replay a fork's commits onto origin, then remove the fork.

    Without ALIAS, joins the fork you are standing in. Origin must be clean.
    If a commit fails to apply, origin is reset to where it was before the
    join and the fork is left untouched.
    """
    alias = _parse_join_args(args)
    pctx = discover_parallel_context(ctx)
    join_fork(ctx, pctx, alias, keep=keep, include_all=include_all)
