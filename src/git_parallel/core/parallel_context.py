"""Resolution of where the caller stands relative to origin and its forks.

Computed once per command and passed to every component, so nothing below
the command layer re-derives the current directory, branch or fork root.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git_parallel.core.errors import PreconditionError
from git_parallel.core.git import Git
from git_parallel.core.metadata import ValidFork, read_fork_metadata
from git_parallel.core.naming import sanitize_path_segment

logger = logging.getLogger(__name__)

ORIGIN_LABEL = "origin"


@dataclass(frozen=True)
class ParallelContext:
    """The caller's repository position.

    Attributes:
        repo_root: Top-level directory of the worktree the caller is in
        project_name: Origin repository directory name
        branch_name: Origin branch (from metadata when inside a fork)
        safe_project_name: project_name made filesystem-safe
        safe_branch_name: branch_name made filesystem-safe
        parallel_root: Directory holding the forks of (project, branch)
        origin_path: Origin worktree directory
        alias: Alias of the fork the caller is in, None in origin
        is_fork: Whether repo_root lies under the fork root
    """

    repo_root: Path
    project_name: str
    branch_name: str
    safe_project_name: str
    safe_branch_name: str
    parallel_root: Path
    origin_path: Path
    alias: str | None
    is_fork: bool

    def fork_path(self, alias: str) -> Path:
        return self.parallel_root / alias

    @property
    def current_label(self) -> str:
        if self.is_fork and self.alias is not None:
            return self.alias
        return ORIGIN_LABEL

    def is_current(self, path: Path) -> bool:
        """Whether path is the worktree the caller stands in."""
        return path.resolve() == self.repo_root.resolve()


def resolve_parallel_context(git: Git, cwd: Path, worktrees_root: Path) -> ParallelContext:
    """Derive the caller's ParallelContext.

    Args:
        git: Git operations bound to the injected executor
        cwd: Directory the command was invoked from
        worktrees_root: `<temp_root>/worktrees`

    Raises:
        PreconditionError: If cwd is not inside a git repository
    """
    top = git.show_toplevel(cwd)
    if top is None:
        raise PreconditionError(
            f"Not inside a git repository: {cwd}",
            hints=["Run this command from a repository or one of its forks."],
        )

    repo_root = top.resolve()
    worktrees_root = worktrees_root.resolve()
    project_name = repo_root.name
    branch_name = git.current_branch(cwd)
    is_fork = repo_root.is_relative_to(worktrees_root)

    safe_project: str | None = None
    safe_branch: str | None = None
    origin_path = repo_root
    alias: str | None = None

    if is_fork:
        classification = read_fork_metadata(repo_root)
        if isinstance(classification, ValidFork):
            meta = classification.metadata
            branch_name = meta.branch
            project_name = meta.project
            origin_path = Path(meta.origin_path).resolve()
            alias = meta.alias
            safe_project = meta.safe_project
            safe_branch = meta.safe_branch
        else:
            logger.debug("Fork at %s has no metadata: %s", repo_root, classification.reason)
            alias = repo_root.name

    safe_project_name = sanitize_path_segment(safe_project or project_name)
    safe_branch_name = sanitize_path_segment(safe_branch or branch_name)

    ctx = ParallelContext(
        repo_root=repo_root,
        project_name=project_name,
        branch_name=branch_name,
        safe_project_name=safe_project_name,
        safe_branch_name=safe_branch_name,
        parallel_root=worktrees_root / safe_project_name / safe_branch_name,
        origin_path=origin_path,
        alias=alias,
        is_fork=is_fork,
    )
    logger.debug("Resolved context: %s", ctx)
    return ctx
