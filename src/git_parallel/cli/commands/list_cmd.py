import click

from git_parallel.cli.core import discover_parallel_context
from git_parallel.cli.ensure import handle_parallel_errors
from git_parallel.cli.output import user_output
from git_parallel.core.context import AppContext
from git_parallel.core.status import (
    NO_FORKS_MESSAGE,
    collect_fork_statuses,
    format_fork_line,
    format_header,
)


@click.command("list")
@click.option(
    "--short",
    "-s",
    is_flag=True,
    help="Shorten paths and render them as clickable links.",
)
@click.pass_obj
@handle_parallel_errors
def list_cmd(ctx: AppContext, short: bool) -> None:
    """List the forks of the current branch.

    Each fork shows whether it is dirty, its HEAD, and how far it is ahead of
    or behind origin. The fork you are in is marked with ●.
    """
    pctx = discover_parallel_context(ctx)

    for line in format_header(pctx):
        user_output(line)
    user_output()

    statuses = collect_fork_statuses(ctx.git, pctx)
    if not statuses:
        user_output(click.style(NO_FORKS_MESSAGE, fg="yellow"))
        return

    for status in statuses:
        user_output(format_fork_line(status, short=short))
    user_output()
