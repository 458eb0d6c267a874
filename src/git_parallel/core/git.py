"""Named git operations built on an injected Executor.

This module gives each git invocation used by git-parallel a name and a
typed result, so the fork/join/list logic reads as intent rather than argv
lists. It holds no state beyond the executor.
"""

from pathlib import Path

from git_parallel.core.errors import ExecutionFailure
from git_parallel.core.executor.abc import CommandResult, Executor

DETACHED_HEAD = "HEAD"

_STATUS_ARGS = ["status", "--porcelain=v1", "--untracked-files=normal"]


class Git:
    """Git operations for a single invocation.

    Query methods return None (or a neutral value) when git reports failure;
    methods whose failure must stop an operation return a bool so the caller
    can run its compensating step before reporting.
    """

    def __init__(self, executor: Executor) -> None:
        self.executor = executor

    def _run(self, args: list[str], cwd: Path) -> CommandResult:
        return self.executor.run(args, cwd)

    def _stdout_or_none(self, args: list[str], cwd: Path) -> str | None:
        result = self._run(args, cwd)
        if not result.ok:
            return None
        return result.stdout.strip() or None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def show_toplevel(self, cwd: Path) -> Path | None:
        """Root directory of the worktree containing cwd."""
        output = self._stdout_or_none(["rev-parse", "--show-toplevel"], cwd)
        if not output:
            return None
        return Path(output)

    def current_branch(self, cwd: Path) -> str:
        """Current branch name, or DETACHED_HEAD when detached or unknown."""
        output = self._stdout_or_none(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
        if not output:
            return DETACHED_HEAD
        return output

    def git_common_dir(self, cwd: Path) -> Path | None:
        """The git directory shared by all worktrees of the repository."""
        output = self._stdout_or_none(["rev-parse", "--git-common-dir"], cwd)
        if not output:
            return None
        git_dir = Path(output)
        if not git_dir.is_absolute():
            git_dir = cwd / git_dir
        return git_dir.resolve()

    def head_commit(self, cwd: Path) -> str | None:
        return self._stdout_or_none(["rev-parse", "HEAD"], cwd)

    def short_head(self, cwd: Path) -> str | None:
        return self._stdout_or_none(["rev-parse", "--short", "HEAD"], cwd)

    def has_pending_changes(self, cwd: Path) -> bool:
        """Check for staged, unstaged or untracked differences from HEAD.

        Raises:
            ExecutionFailure: If git status itself fails
        """
        result = self._run(_STATUS_ARGS, cwd)
        if not result.ok:
            raise ExecutionFailure(
                f"Failed to read status of '{cwd}'.",
                hints=[result.stderr.strip()] if result.stderr.strip() else None,
            )
        return bool(result.stdout.strip())

    def count_commits(self, cwd: Path, from_ref: str, to_ref: str) -> int:
        """Number of commits reachable from to_ref but not from from_ref.

        Returns 0 when the range cannot be evaluated.
        """
        output = self._stdout_or_none(["rev-list", "--count", f"{from_ref}..{to_ref}"], cwd)
        if not output:
            return 0
        try:
            return int(output)
        except ValueError:
            return 0

    def commits_between(self, cwd: Path, base: str, head: str) -> list[str] | None:
        """Commits reachable from head but not base, oldest first."""
        result = self._run(["rev-list", "--reverse", f"{base}..{head}"], cwd)
        if not result.ok:
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def stash_list(self, cwd: Path) -> list[tuple[str, str]]:
        """Stash entries as (selector, subject) pairs, newest first."""
        output = self._stdout_or_none(["stash", "list", "--format=%gd%x09%gs"], cwd)
        if not output:
            return []
        entries: list[tuple[str, str]] = []
        for line in output.splitlines():
            selector, _, subject = line.partition("\t")
            entries.append((selector.strip(), subject.strip()))
        return entries

    # ------------------------------------------------------------------
    # Worktrees
    # ------------------------------------------------------------------

    def add_detached_worktree(self, repo_root: Path, target: Path) -> bool:
        return self.executor.run_inherit(
            ["worktree", "add", "--detach", str(target), "HEAD"], repo_root
        ) == 0

    def remove_worktree(self, repo_root: Path, target: Path) -> bool:
        return self.executor.run_inherit(["worktree", "remove", str(target)], repo_root) == 0

    def prune_worktrees(self, repo_root: Path) -> bool:
        return self._run(["worktree", "prune"], repo_root).ok

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def cherry_pick(self, cwd: Path, commit: str) -> bool:
        return self.executor.run_inherit(["cherry-pick", commit], cwd) == 0

    def cherry_pick_abort(self, cwd: Path) -> bool:
        return self._run(["cherry-pick", "--abort"], cwd).ok

    def reset_hard(self, cwd: Path, commit: str) -> bool:
        return self._run(["reset", "--hard", commit], cwd).ok

    # ------------------------------------------------------------------
    # Stash
    # ------------------------------------------------------------------

    def stash_push(self, cwd: Path, message: str) -> bool:
        return self._run(["stash", "push", "--include-untracked", "-m", message], cwd).ok

    def stash_apply(self, cwd: Path, ref: str) -> bool:
        return self._run(["stash", "apply", "--index", ref], cwd).ok

    def stash_drop(self, cwd: Path, ref: str) -> bool:
        return self._run(["stash", "drop", ref], cwd).ok

    def stash_pop(self, cwd: Path, ref: str) -> bool:
        return self._run(["stash", "pop", ref], cwd).ok
