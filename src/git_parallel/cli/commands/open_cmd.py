"""Open and switch - reach origin or a fork from wherever you are."""

import logging
import shlex

import click

from git_parallel.cli.core import discover_parallel_context
from git_parallel.cli.ensure import handle_parallel_errors
from git_parallel.core.context import AppContext
from git_parallel.core.errors import ExecutionFailure, PreconditionError
from git_parallel.core.lifecycle import resolve_destination
from git_parallel.core.shell_scripts import RESULT_FILE_ENV, SWITCH_EXIT_CODE

logger = logging.getLogger(__name__)


@click.command("open")
@click.argument("target", required=False)
@click.option("-c", "--copy", is_flag=True, help="Copy the worktree path instead of opening it.")
@click.pass_obj
@handle_parallel_errors
def open_cmd(ctx: AppContext, target: str | None, copy: bool) -> None:
    """Open origin or a fork in the configured editor.

    TARGET is a fork alias or `origin`.
    """
    pctx = discover_parallel_context(ctx)
    destination = resolve_destination(pctx, target)

    if copy:
        if not ctx.shell.copy_to_clipboard(str(destination)):
            raise ExecutionFailure(
                "Failed to copy the worktree path to the clipboard.",
                hints=[f"Path: {destination}"],
            )
        ctx.feedback.success("Worktree path copied to clipboard!")
        return

    command = shlex.split(ctx.global_config.default_editor)
    if not command:
        raise PreconditionError("No editor configured.")
    executable = ctx.shell.get_installed_tool_path(command[0])
    if executable is None:
        raise PreconditionError(
            f"Editor '{command[0]}' not found on PATH.",
            hints=["Set another editor with: git-parallel config set default_editor <command>"],
        )

    logger.debug("Opening %s with %s", destination, command)
    exit_code = ctx.shell.run_command([executable, *command[1:], str(destination)])
    if exit_code != 0:
        raise ExecutionFailure(f"Editor '{command[0]}' exited with code {exit_code}.")


@click.command("switch")
@click.argument("target", required=False)
@click.pass_obj
@handle_parallel_errors
def switch_cmd(ctx: AppContext, target: str | None) -> None:
    """Change the shell's directory to origin or a fork.

    Needs the shell wrapper from `git-parallel shell-init`, which performs the
    actual `cd` after this command exits.
    """
    pctx = discover_parallel_context(ctx)
    destination = resolve_destination(pctx, target)

    if ctx.result_file is None:
        raise PreconditionError(
            f"Shell integration not detected ({RESULT_FILE_ENV} is not set).",
            hints=[
                'Add to your shell profile: eval "$(git-parallel shell-init bash)"',
                f"Or change directory yourself: cd {shlex.quote(str(destination))}",
            ],
        )

    ctx.result_file.write_text(str(destination), encoding="utf-8")
    raise SystemExit(SWITCH_EXIT_CODE)
