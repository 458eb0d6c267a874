"""User-facing progress output used by the core operations."""

from abc import ABC, abstractmethod

import click

from git_parallel.cli.output import user_output


class UserFeedback(ABC):
    """Human-readable progress reporting.

    Core operations report through ctx.feedback instead of printing, so the
    same code path is observable in tests via an in-memory fake.

    Usage:
        ctx.feedback.info("Stashing changes...")
        ctx.feedback.success("Parallel worktree created: /tmp/...")
        ctx.feedback.warning("Please remove it manually later.")

    Errors that end a command are raised as ParallelError, not sent here.
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show an informational message."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show a success message."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show a warning that does not by itself stop the command."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show an error message."""


class InteractiveFeedback(UserFeedback):
    """Feedback written to stderr with terminal styling."""

    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="cyan"))

    def warning(self, message: str) -> None:
        user_output(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
