import click

from git_parallel.cli.output import machine_output
from git_parallel.core.shell_scripts import EXECUTABLE, SUPPORTED_SHELLS, render_shell_wrapper


@click.command("shell-init")
@click.argument(
    "shell", type=click.Choice([*SUPPORTED_SHELLS, "pwsh"], case_sensitive=False)
)
@click.option(
    "--name",
    default=EXECUTABLE,
    show_default=True,
    help="Name of the shell function to define.",
)
def shell_init_cmd(shell: str, name: str) -> None:
    """Print the shell wrapper that makes `switch` change directory.

    Example:
      eval "$(git-parallel shell-init zsh)"
    """
    machine_output(render_shell_wrapper(shell, name), nl=False)
