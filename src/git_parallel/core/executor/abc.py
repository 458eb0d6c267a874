"""Git command execution interface.

Every repository query and mutation performed by git-parallel goes through an
Executor. Keeping the interface this narrow lets the multi-step operations
(fork, join, remove) be exercised against a scripted fake.

Architecture:
- Executor: Abstract base class defining the interface
- RealExecutor: Production implementation using subprocess
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a captured git command."""

    stdout: str
    exit_code: int
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class Executor(ABC):
    """Abstract interface for running git commands.

    `args` never include the git binary itself; implementations supply it.
    """

    @abstractmethod
    def run(self, args: Sequence[str], cwd: Path) -> CommandResult:
        """Run a git command, blocking, with stdout and stderr captured.

        Args:
            args: Arguments after the git binary (e.g. ["status", "--porcelain"])
            cwd: Directory the command runs in

        Returns:
            CommandResult with the captured output and exit code. A non-zero
            exit code is reported, not raised.
        """
        ...

    @abstractmethod
    def run_inherit(self, args: Sequence[str], cwd: Path) -> int:
        """Run a git command, blocking, streaming output to the terminal.

        Args:
            args: Arguments after the git binary
            cwd: Directory the command runs in

        Returns:
            The process exit code
        """
        ...
