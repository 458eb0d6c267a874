import logging
import os
from typing import Any, NoReturn

import click
from click.exceptions import NoArgsIsHelpError

from git_parallel.cli.commands.config_cmd import config_group
from git_parallel.cli.commands.fork_cmd import fork_cmd
from git_parallel.cli.commands.join_cmd import join_cmd
from git_parallel.cli.commands.list_cmd import list_cmd
from git_parallel.cli.commands.open_cmd import open_cmd, switch_cmd
from git_parallel.cli.commands.remove_cmd import remove_cmd
from git_parallel.cli.commands.shell_integration import shell_init_cmd
from git_parallel.cli.ensure import report_error
from git_parallel.core.context import create_context

DEBUG_ENV = "GIT_PARALLEL_DEBUG"

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


def _configure_logging() -> None:
    # Enable debug logging if GIT_PARALLEL_DEBUG environment variable is set
    if os.getenv(DEBUG_ENV):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


def _exit_usage_error(e: click.UsageError) -> NoReturn:
    hints = []
    if e.ctx is not None:
        hints.append(f"Try '{e.ctx.command_path} --help' for help.")
    report_error(e.format_message(), hints)
    raise SystemExit(1) from e


class ParallelGroup(click.Group):
    """Click Group that reports usage errors like every other error.

    Unknown options, extra arguments and bad choices print a red "Error:"
    line and exit with code 1 instead of click's usage exit code 2.
    """

    def make_context(
        self,
        info_name: str | None,
        args: list[str],
        parent: click.Context | None = None,
        **extra: Any,
    ) -> click.Context:
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except NoArgsIsHelpError:
            raise
        except click.UsageError as e:
            _exit_usage_error(e)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except NoArgsIsHelpError:
            raise
        except click.UsageError as e:
            _exit_usage_error(e)


@click.group(cls=ParallelGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="git-parallel")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Work on the current branch in parallel, disposable worktrees."""
    _configure_logging()
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


# Register all commands
cli.add_command(config_group)
cli.add_command(fork_cmd)
cli.add_command(join_cmd)
cli.add_command(list_cmd)
cli.add_command(open_cmd)
cli.add_command(remove_cmd)
cli.add_command(shell_init_cmd)
cli.add_command(switch_cmd)


def main() -> None:
    """CLI entry point used by the `git-parallel` console script."""
    cli()
