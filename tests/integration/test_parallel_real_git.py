"""End-to-end fork/join/remove against real git repositories.

Every test creates a repository in tmp_path and drives the core operations
with RealExecutor, so these exercise the exact git invocations.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from git_parallel.core.config_store import GlobalConfig
from git_parallel.core.context import AppContext
from git_parallel.core.errors import ExecutionFailure, PreconditionError
from git_parallel.core.executor.real import RealExecutor
from git_parallel.core.join import JoinState, join_fork
from git_parallel.core.lifecycle import ForkMode, fork_worktree, remove_fork
from git_parallel.core.metadata import METADATA_FILENAME
from git_parallel.core.parallel_context import ParallelContext, resolve_parallel_context
from tests.fakes.user_feedback import FakeUserFeedback

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def _commit(cwd: Path, name: str, content: str, message: str) -> str:
    (cwd / name).write_text(content, encoding="utf-8")
    _git(cwd, "add", name)
    _git(cwd, "commit", "-q", "-m", message)
    return _git(cwd, "rev-parse", "HEAD")


def _status(cwd: Path) -> str:
    return _git(cwd, "status", "--porcelain")


@pytest.fixture
def origin(tmp_path: Path) -> Path:
    repo = tmp_path.resolve() / "work" / "demo"
    repo.mkdir(parents=True)
    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "commit.gpgsign", "false")
    _commit(repo, "shared.txt", "one\n", "initial")
    return repo


def _context(tmp_path: Path, cwd: Path, feedback: FakeUserFeedback | None = None) -> AppContext:
    return AppContext.for_test(
        executor=RealExecutor(),
        feedback=feedback or FakeUserFeedback(),
        global_config=GlobalConfig(
            temp_root=tmp_path.resolve() / "tmp", default_editor="code", git_binary="git"
        ),
        cwd=cwd,
    )


def _pctx(ctx: AppContext) -> ParallelContext:
    return resolve_parallel_context(ctx.git, ctx.cwd, ctx.global_config.worktrees_root)


def _fork(tmp_path: Path, origin: Path, alias: str, mode: ForkMode = ForkMode.NONE) -> Path:
    ctx = _context(tmp_path, origin)
    return fork_worktree(ctx, _pctx(ctx), alias, mode).path


def test_fork_then_join_replays_commits(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    assert fork == tmp_path.resolve() / "tmp" / "worktrees" / "demo" / "main" / "feature-x"
    assert (fork / METADATA_FILENAME).is_file()
    assert _status(fork) == ""

    _commit(fork, "a.txt", "a\n", "add a")
    _commit(fork, "b.txt", "b\n", "add b")

    ctx = _context(tmp_path, origin)
    outcome = join_fork(ctx, _pctx(ctx), "feature-x")

    assert outcome.visited[-1] is JoinState.COMMITTED
    assert len(outcome.applied) == 2
    assert _git(origin, "log", "--format=%s", "-3").splitlines() == ["add b", "add a", "initial"]
    assert _git(origin, "rev-parse", "--abbrev-ref", "HEAD") == "main"
    assert not fork.exists()
    assert "feature-x" not in _git(origin, "worktree", "list")


def test_join_from_inside_fork_with_keep(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    _commit(fork, "a.txt", "a\n", "add a")

    ctx = _context(tmp_path, fork)
    outcome = join_fork(ctx, _pctx(ctx), None, keep=True)

    assert outcome.succeeded
    assert fork.exists()
    assert (origin / "a.txt").is_file()


def test_fork_move_clears_origin(tmp_path: Path, origin: Path) -> None:
    (origin / "shared.txt").write_text("changed\n", encoding="utf-8")
    (origin / "new.txt").write_text("untracked\n", encoding="utf-8")

    fork = _fork(tmp_path, origin, "moved", ForkMode.MOVE)

    assert _status(origin) == ""
    assert (fork / "shared.txt").read_text(encoding="utf-8") == "changed\n"
    assert (fork / "new.txt").read_text(encoding="utf-8") == "untracked\n"
    assert _git(origin, "stash", "list") == ""


def test_fork_mirror_leaves_origin_untouched(tmp_path: Path, origin: Path) -> None:
    (origin / "shared.txt").write_text("changed\n", encoding="utf-8")
    (origin / "new.txt").write_text("untracked\n", encoding="utf-8")
    feedback = FakeUserFeedback()
    ctx = _context(tmp_path, origin, feedback)

    fork = fork_worktree(ctx, _pctx(ctx), "mirrored", ForkMode.MIRROR).path

    for tree in (origin, fork):
        assert (tree / "shared.txt").read_text(encoding="utf-8") == "changed\n"
        assert (tree / "new.txt").read_text(encoding="utf-8") == "untracked\n"
    status = _status(origin)
    assert "M shared.txt" in status
    assert "?? new.txt" in status
    assert _git(origin, "stash", "list") == ""
    assert "Pending changes mirrored to fork 'mirrored'." in feedback.text
    assert feedback.of_level("warning") == []


def test_join_refused_while_origin_dirty(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    _commit(fork, "a.txt", "a\n", "add a")
    before = _git(origin, "rev-parse", "HEAD")
    (origin / "shared.txt").write_text("dirty\n", encoding="utf-8")

    ctx = _context(tmp_path, origin)
    with pytest.raises(PreconditionError, match="Origin worktree has pending changes"):
        join_fork(ctx, _pctx(ctx), "feature-x")

    assert _git(origin, "rev-parse", "HEAD") == before
    assert fork.exists()


def test_dirty_fork_needs_all(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    _commit(fork, "a.txt", "a\n", "add a")
    (fork / "wip.txt").write_text("wip\n", encoding="utf-8")

    ctx = _context(tmp_path, origin)
    with pytest.raises(PreconditionError, match="--all"):
        join_fork(ctx, _pctx(ctx), "feature-x")

    outcome = join_fork(ctx, _pctx(ctx), "feature-x", include_all=True)

    assert outcome.succeeded
    assert (origin / "a.txt").is_file()
    assert (origin / "wip.txt").read_text(encoding="utf-8") == "wip\n"
    assert _git(origin, "stash", "list") == ""


def test_conflicting_commit_rolls_origin_back(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    _commit(fork, "a.txt", "a\n", "add a")
    _commit(fork, "shared.txt", "from fork\n", "fork edit")
    before = _commit(origin, "shared.txt", "from origin\n", "origin edit")

    ctx = _context(tmp_path, origin)
    with pytest.raises(ExecutionFailure, match="Cherry-pick failed"):
        join_fork(ctx, _pctx(ctx), "feature-x")

    assert _git(origin, "rev-parse", "HEAD") == before
    assert _status(origin) == ""
    assert not (origin / "a.txt").exists()
    assert fork.exists()


def test_remove_refuses_dirty_fork_then_removes_clean_one(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    (fork / "wip.txt").write_text("wip\n", encoding="utf-8")
    ctx = _context(tmp_path, origin)

    with pytest.raises(PreconditionError, match="uncommitted changes"):
        remove_fork(ctx, _pctx(ctx), "feature-x")

    (fork / "wip.txt").unlink()
    remove_fork(ctx, _pctx(ctx), "feature-x")

    assert not fork.exists()


def test_descriptor_is_ignored_by_status(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")

    assert METADATA_FILENAME in (origin / ".git" / "info" / "exclude").read_text(encoding="utf-8")
    assert _status(fork) == ""
    assert _status(origin) == ""


def test_kept_fork_joins_again_after_reset(tmp_path: Path, origin: Path) -> None:
    fork = _fork(tmp_path, origin, "feature-x")
    _commit(fork, "a.txt", "a\n", "add a")
    ctx = _context(tmp_path, origin)
    join_fork(ctx, _pctx(ctx), "feature-x", keep=True)
    _commit(fork, "b.txt", "b\n", "add b")

    # Without a reset the already-joined commit is replayed again and comes out empty.
    with pytest.raises(ExecutionFailure, match="Cherry-pick failed"):
        join_fork(ctx, _pctx(ctx), "feature-x", keep=True)

    _git(fork, "reset", "-q", "--hard", _git(origin, "rev-parse", "HEAD"))
    _commit(fork, "b.txt", "b\n", "add b")
    outcome = join_fork(ctx, _pctx(ctx), "feature-x", keep=True)

    assert outcome.applied == [_git(fork, "rev-parse", "HEAD")]
    assert _git(origin, "log", "--format=%s", "-3").splitlines() == ["add b", "add a", "initial"]
