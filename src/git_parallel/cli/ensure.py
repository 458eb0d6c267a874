"""CLI error handling utilities with styled output.

Ensure asserts invariants in commands; handle_parallel_errors turns the
core's ParallelError into the same styled message. All errors use a red
"Error:" prefix and exit with code 1.
"""

import functools
from collections.abc import Callable
from typing import ParamSpec, TypeVar

import click

from git_parallel.cli.output import user_output
from git_parallel.core.errors import ParallelError

P = ParamSpec("P")
R = TypeVar("R")


def report_error(message: str, hints: list[str] | None = None) -> None:
    user_output(click.style("Error: ", fg="red") + message)
    for hint in hints or []:
        user_output(click.style(hint, fg="yellow"))


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            report_error(error_message)
            raise SystemExit(1)


def handle_parallel_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Report ParallelError raised by a command and exit with code 1."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except ParallelError as e:
            report_error(e.message, e.hints)
            raise SystemExit(1) from e

    return wrapper
