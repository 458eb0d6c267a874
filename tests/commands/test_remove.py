"""Tests for the remove command."""

from pathlib import Path

from click.testing import CliRunner

from git_parallel.cli.cli import cli
from tests.fakes.executor import FakeExecutor
from tests.fakes.prompt import FakePrompt
from tests.test_utils.git_responses import dirty, repo_responses
from tests.test_utils.layout import build_context, make_layout


def test_remove_clean_fork(tmp_path: Path) -> None:
    layout = make_layout(tmp_path)
    fork = layout.add_fork("feature-x")
    executor = FakeExecutor(responses=repo_responses(layout.origin))
    ctx = build_context(layout, executor)

    result = CliRunner().invoke(cli, ["remove", "feature-x"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert (layout.origin, ("worktree", "remove", str(fork))) in executor.inherit_calls
    assert not fork.exists()


def test_remove_dirty_fork_is_refused(tmp_path: Path) -> None:
    layout = make_layout(tmp_path)
    fork = layout.add_fork("feature-x")
    responses = repo_responses(layout.origin)
    responses.update(dirty(fork))
    executor = FakeExecutor(responses=responses)
    ctx = build_context(layout, executor)

    result = CliRunner().invoke(cli, ["remove", "feature-x"], obj=ctx)

    assert result.exit_code == 1
    assert "Worktree 'feature-x' has uncommitted changes." in result.output
    assert executor.inherit_calls == []
    assert fork.exists()


def test_remove_unknown_fork(tmp_path: Path) -> None:
    layout = make_layout(tmp_path)
    ctx = build_context(layout, FakeExecutor(responses=repo_responses(layout.origin)))

    result = CliRunner().invoke(cli, ["remove", "ghost"], obj=ctx)

    assert result.exit_code == 1
    assert "Worktree 'ghost' not found for branch 'main' or is not accessible." in result.output


def test_declining_force_remove_keeps_directory(tmp_path: Path) -> None:
    layout = make_layout(tmp_path)
    fork = layout.add_fork("feature-x")
    executor = FakeExecutor(
        responses=repo_responses(layout.origin),
        inherit_exit_codes={(layout.origin, ("worktree", "remove", str(fork))): 1},
    )
    prompt = FakePrompt(answers=["no"])
    ctx = build_context(layout, executor, prompt=prompt)

    result = CliRunner().invoke(cli, ["remove", "feature-x"], obj=ctx)

    assert result.exit_code == 1
    assert "Aborted removing worktree 'feature-x'." in result.output
    assert len(prompt.questions) == 1
    assert fork.exists()


def test_accepting_force_remove_deletes_directory(tmp_path: Path) -> None:
    layout = make_layout(tmp_path)
    fork = layout.add_fork("feature-x")
    executor = FakeExecutor(
        responses=repo_responses(layout.origin),
        inherit_exit_codes={(layout.origin, ("worktree", "remove", str(fork))): 1},
    )
    ctx = build_context(layout, executor, prompt=FakePrompt(answers=["Y"]))

    result = CliRunner().invoke(cli, ["remove", "feature-x"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert not fork.exists()
    assert (layout.origin, ("worktree", "prune")) in executor.calls
