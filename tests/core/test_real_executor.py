import shutil
from pathlib import Path

import pytest

from git_parallel.core.errors import ExecutionFailure
from git_parallel.core.executor.real import RealExecutor


def test_missing_binary_is_execution_failure(tmp_path: Path) -> None:
    executor = RealExecutor(git_binary=str(tmp_path / "no-such-git"))

    with pytest.raises(ExecutionFailure, match="Command not found"):
        executor.run(["status"], tmp_path)

    with pytest.raises(ExecutionFailure):
        executor.run_inherit(["status"], tmp_path)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_non_zero_exit_is_returned(tmp_path: Path) -> None:
    result = RealExecutor().run(["rev-parse", "--show-toplevel"], tmp_path)

    assert not result.ok
    assert result.stdout == ""
    assert result.stderr
