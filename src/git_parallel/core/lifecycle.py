"""Creating and destroying forks.

A fork is a detached linked worktree under the fork root, plus a descriptor
file. Creation optionally carries origin's uncommitted changes along through
the stash (see changes.py); removal refuses to discard uncommitted work.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from git_parallel.core import changes
from git_parallel.core.changes import StashError, StashRef
from git_parallel.core.context import AppContext
from git_parallel.core.errors import (
    ExecutionFailure,
    PreconditionError,
    UnrecoverableInconsistency,
    ValidationError,
)
from git_parallel.core.git import DETACHED_HEAD
from git_parallel.core.metadata import (
    ForkMetadata,
    ensure_metadata_excluded,
    write_fork_metadata,
)
from git_parallel.core.naming import is_valid_alias
from git_parallel.core.parallel_context import ORIGIN_LABEL, ParallelContext
from git_parallel.core.prompt import is_affirmative
from git_parallel.core.time import isoformat_utc

logger = logging.getLogger(__name__)

FORK_STASH_PREFIX = "git-parallel:"

FORCE_REMOVE_QUESTION = (
    "Do you want to force remove the worktree directory? "
    "This will delete all files in it. (y/n): "
)


class ForkMode(Enum):
    """What happens to origin's uncommitted changes when forking."""

    NONE = "none"
    MOVE = "move"
    MIRROR = "mirror"

    @property
    def past_tense(self) -> str:
        return {ForkMode.MOVE: "moved", ForkMode.MIRROR: "mirrored"}.get(self, "")

    @staticmethod
    def from_flags(move: bool, mirror: bool) -> "ForkMode":
        if move and mirror:
            raise ValidationError(
                "Options --move and --mirror cannot be used together.",
                hints=["Use --move to take the changes out of origin, --mirror to copy them."],
            )
        if move:
            return ForkMode.MOVE
        if mirror:
            return ForkMode.MIRROR
        return ForkMode.NONE


@dataclass(frozen=True)
class ForkResult:
    path: Path
    metadata: ForkMetadata
    transferred: bool


def require_alias(alias: str | None, *, missing_message: str = "Missing worktree alias.") -> str:
    """Validate an alias supplied on the command line.

    Every command taking an alias goes through here, so rejection is the
    same everywhere.

    Raises:
        ValidationError: If alias is missing or not usable as a directory name
    """
    if alias is None or alias == "":
        raise ValidationError(missing_message)
    if not is_valid_alias(alias):
        raise ValidationError(f"Alias '{alias}' contains invalid characters or spaces.")
    return alias


def fork_stash_message(alias: str) -> str:
    return f"{FORK_STASH_PREFIX}{alias}"


def _exclude_file(ctx: AppContext, pctx: ParallelContext) -> Path:
    common_dir = ctx.git.git_common_dir(pctx.repo_root)
    if common_dir is None:
        common_dir = pctx.repo_root / ".git"
    return common_dir / "info" / "exclude"


def _take_changes(ctx: AppContext, pctx: ParallelContext, alias: str, mode: ForkMode) -> StashRef:
    message = fork_stash_message(alias)
    try:
        if mode is ForkMode.MIRROR:
            return changes.mirror_changes(ctx.git, pctx.repo_root, message)
        return changes.move_changes(ctx.git, pctx.repo_root, message)
    except StashError as e:
        if e.stash is not None:
            # Snapshot taken but origin could not get its changes back.
            raise UnrecoverableInconsistency(
                "Failed to restore origin's changes after snapshotting them for the fork.",
                hints=e.hints,
            ) from e
        raise ExecutionFailure(
            "Failed to stash changes before forking.", hints=[e.message, *e.hints]
        ) from e


def _undo_stash(ctx: AppContext, stash: StashRef, mode: ForkMode) -> None:
    """Put origin back the way it was after a failed worktree creation.

    A mirrored snapshot left origin untouched, so the entry is only dropped.
    """
    git = ctx.git
    if mode is ForkMode.MIRROR:
        ref = changes.locate(git, stash)
        if not git.stash_drop(stash.tree, ref):
            ctx.feedback.warning(
                f"Could not drop snapshot '{ref}'. Drop it with: git stash drop {ref}"
            )
        return

    try:
        changes.restore(git, stash)
    except StashError as e:
        raise UnrecoverableInconsistency(
            "Failed to create the parallel worktree, and restoring the stashed changes failed.",
            hints=[
                f"Your changes remain stashed as '{changes.locate(git, stash)}' "
                f"({stash.message}). Apply them manually with: git stash pop",
            ],
        ) from e
    ctx.feedback.warning("Stashed changes restored to the origin worktree.")


def _discard_partial_worktree(ctx: AppContext, pctx: ParallelContext, target: Path) -> None:
    if target.exists():
        shutil.rmtree(target, ignore_errors=True)
    ctx.git.prune_worktrees(pctx.repo_root)


def fork_worktree(
    ctx: AppContext, pctx: ParallelContext, alias: str | None, mode: ForkMode
) -> ForkResult:
    """Create a fork of origin's HEAD under the fork root.

    Args:
        ctx: Application context
        pctx: Resolved position of the caller; must be origin
        alias: Name of the new fork
        mode: What to do with origin's uncommitted changes

    Raises:
        PreconditionError: Called from a fork, on a detached HEAD, or the
            alias is already taken
        ValidationError: Missing or invalid alias
        ExecutionFailure: Stashing or worktree creation failed; origin was
            restored
        UnrecoverableInconsistency: Changes are left in the stash list
    """
    git = ctx.git

    if pctx.is_fork:
        raise PreconditionError(
            "Run `git parallel fork` from the original worktree, not from a fork."
        )
    if pctx.branch_name == DETACHED_HEAD:
        raise PreconditionError("Detached HEAD detected. Switch to a branch before forking.")
    alias = require_alias(alias)
    target = pctx.fork_path(alias)
    if target.exists():
        raise PreconditionError(f"Worktree alias '{alias}' already exists for this branch.")

    # Step 1: keep the descriptor out of `git status` in every worktree
    if ensure_metadata_excluded(_exclude_file(ctx, pctx)):
        logger.debug("Added descriptor to exclude file")

    # Step 2: fork root
    pctx.parallel_root.mkdir(parents=True, exist_ok=True)

    # Step 3: base commit
    base_commit = git.head_commit(pctx.repo_root)
    if base_commit is None:
        raise PreconditionError(
            "Cannot read HEAD of the origin worktree.",
            hints=["A fork needs at least one commit on the current branch."],
        )

    # Step 4-5: pending changes
    stash: StashRef | None = None
    if git.has_pending_changes(pctx.repo_root):
        if mode is ForkMode.NONE:
            ctx.feedback.info(
                "Origin has pending changes; they stay in origin. "
                "Use --move or --mirror to bring them along."
            )
        else:
            stash = _take_changes(ctx, pctx, alias, mode)
            logger.debug("Stashed origin changes as %s", stash)

    # Step 6: worktree
    if not git.add_detached_worktree(pctx.repo_root, target):
        logger.debug("worktree add failed for %s", target)
        _discard_partial_worktree(ctx, pctx, target)
        if stash is not None:
            _undo_stash(ctx, stash, mode)
        raise ExecutionFailure("Failed to create the parallel worktree.")

    created_at = isoformat_utc(ctx.time.now())
    metadata = ForkMetadata(
        alias=alias,
        branch=pctx.branch_name,
        safe_branch=pctx.safe_branch_name,
        project=pctx.project_name,
        safe_project=pctx.safe_project_name,
        origin_path=str(pctx.repo_root),
        base_commit=base_commit,
        created_at=created_at,
    )

    # Step 7: changes into the fork
    if stash is not None:
        try:
            changes.apply_and_drop(git, target, stash)
        except StashError as e:
            if e.applied:
                ctx.feedback.warning(" ".join([e.message, *e.hints]))
            else:
                write_fork_metadata(target, metadata)
                raise UnrecoverableInconsistency(
                    "Failed to move local changes into the new worktree.",
                    hints=[
                        f"Your changes remain stashed as '{changes.locate(git, stash)}' "
                        f"({stash.message}). Apply them manually when ready.",
                        f"Worktree path: {target}",
                    ],
                ) from e

    # Step 8: descriptor
    write_fork_metadata(target, metadata)

    ctx.feedback.success(f"Parallel worktree created: {target}")
    if stash is not None:
        ctx.feedback.success(f"Pending changes {mode.past_tense} to fork '{alias}'.")

    return ForkResult(path=target, metadata=metadata, transferred=stash is not None)


def delete_fork(ctx: AppContext, repo_cwd: Path, alias: str, target: Path) -> None:
    """Remove a fork's worktree registration and directory.

    When git refuses, the operator is asked whether to delete the directory
    anyway. This is the only interactive step of any operation.

    Args:
        repo_cwd: A worktree of the same repository other than target
        alias: Fork alias, for messages
        target: Fork directory

    Raises:
        ExecutionFailure: If the operator declines or the delete fails
    """
    git = ctx.git
    if git.remove_worktree(repo_cwd, target):
        if target.exists():
            shutil.rmtree(target, ignore_errors=True)
        ctx.feedback.success(f"Removed worktree: {alias}")
        return

    ctx.feedback.error(f"Failed to remove worktree '{alias}'.")
    answer = ctx.prompt.ask(FORCE_REMOVE_QUESTION)
    if not is_affirmative(answer):
        raise ExecutionFailure(f"Aborted removing worktree '{alias}'.")

    try:
        shutil.rmtree(target)
    except OSError as e:
        raise ExecutionFailure(
            f"Failed to force remove worktree directory '{alias}'.", hints=[str(e)]
        ) from e

    git.prune_worktrees(repo_cwd)
    ctx.feedback.success(f"Force removed worktree directory: {alias}")


def remove_fork(ctx: AppContext, pctx: ParallelContext, alias: str | None) -> None:
    """Remove a clean fork that the caller is not standing in.

    Raises:
        ValidationError: Missing or invalid alias
        PreconditionError: Fork missing, current, or dirty
        ExecutionFailure: Removal failed and was not forced
    """
    alias = require_alias(alias, missing_message="Missing worktree alias to remove.")
    target = pctx.fork_path(alias)

    if not target.exists() or not os.access(target, os.W_OK):
        raise PreconditionError(
            f"Worktree '{alias}' not found for branch '{pctx.branch_name}' or is not accessible."
        )
    if pctx.is_current(target):
        raise PreconditionError(
            "Cannot remove the worktree you are currently in. Switch to origin first."
        )
    if ctx.git.has_pending_changes(target):
        raise PreconditionError(
            f"Worktree '{alias}' has uncommitted changes. Join or clean it before removing."
        )

    delete_fork(ctx, pctx.repo_root, alias, target)


def resolve_destination(pctx: ParallelContext, target: str | None) -> Path:
    """Directory of `origin` or of an existing fork, for `open` and `switch`.

    Raises:
        ValidationError: Missing or invalid alias
        PreconditionError: The directory does not exist
    """
    if target is None or target == "":
        raise ValidationError("Missing target worktree alias or 'origin'.")

    if target.lower() == ORIGIN_LABEL:
        if not pctx.origin_path.exists():
            raise PreconditionError(f"Origin worktree path not found at '{pctx.origin_path}'.")
        return pctx.origin_path

    alias = require_alias(target)
    destination = pctx.fork_path(alias)
    if not destination.exists():
        raise PreconditionError(f"Worktree '{alias}' not found for branch '{pctx.branch_name}'.")
    return destination
