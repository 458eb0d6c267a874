"""Production Executor implementation using subprocess."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from git_parallel.core.errors import ExecutionFailure
from git_parallel.core.executor.abc import CommandResult, Executor

logger = logging.getLogger(__name__)


class RealExecutor(Executor):
    """Runs git through subprocess.

    A missing git binary is reported as ExecutionFailure; a non-zero exit code
    is returned to the caller, which decides whether it is fatal.
    """

    def __init__(self, git_binary: str = "git") -> None:
        self._git_binary = git_binary

    def run(self, args: Sequence[str], cwd: Path) -> CommandResult:
        cmd = [self._git_binary, *args]
        logger.debug("run: %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except FileNotFoundError as e:
            raise ExecutionFailure(
                f"Command not found while trying to run git: {self._git_binary}",
                hints=["Install git or set 'git_binary' with 'git-parallel config set'."],
            ) from e

        if result.returncode != 0:
            logger.debug("exit %d, stderr: %s", result.returncode, result.stderr.strip())
        return CommandResult(
            stdout=result.stdout, exit_code=result.returncode, stderr=result.stderr
        )

    def run_inherit(self, args: Sequence[str], cwd: Path) -> int:
        cmd = [self._git_binary, *args]
        logger.debug("run_inherit: %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(cmd, cwd=cwd, check=False)
        except FileNotFoundError as e:
            raise ExecutionFailure(
                f"Command not found while trying to run git: {self._git_binary}",
                hints=["Install git or set 'git_binary' with 'git-parallel config set'."],
            ) from e
        return result.returncode
