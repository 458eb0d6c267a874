"""Moving uncommitted work between worktrees through git stash.

The stash list is shared by every worktree of a repository, so an entry
created in one tree can be applied from another. Entries are created with a
recognisable message and located by that message before being applied or
dropped; `stash@{0}` is only the fallback.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git_parallel.core.errors import ExecutionFailure
from git_parallel.core.git import Git

logger = logging.getLogger(__name__)

STASH_TOP = "stash@{0}"


@dataclass(frozen=True)
class StashRef:
    """A stash entry taken from `tree`, labelled with `message`."""

    tree: Path
    ref: str
    message: str


class StashError(ExecutionFailure):
    """A stash step failed; `stash` is the entry involved, if one exists.

    `applied` is set when the changes already reached their destination and
    only dropping the entry failed.
    """

    def __init__(
        self,
        message: str,
        *,
        stash: StashRef | None = None,
        applied: bool = False,
        hints: list[str] | None = None,
    ) -> None:
        super().__init__(message, hints=hints)
        self.stash = stash
        self.applied = applied


def locate(git: Git, stash: StashRef) -> str:
    """Current selector of a stash entry, matched by its message."""
    for selector, subject in git.stash_list(stash.tree):
        if subject.endswith(stash.message):
            return selector
    return stash.ref


def mirror_changes(git: Git, tree: Path, message: str) -> StashRef:
    """Snapshot all pending changes of `tree`, untracked files included, keeping them in `tree`.

    The changes are pushed like move_changes() and the new entry is applied
    straight back onto `tree` with its index, so the entry remains in the list
    while the tree keeps its work.

    Raises:
        StashError: If the snapshot cannot be taken, or it cannot be put back
            onto `tree`; in the latter case `stash` names the entry holding
            the changes
    """
    stash = move_changes(git, tree, message)
    ref = locate(git, stash)
    if not git.stash_apply(tree, ref):
        raise StashError(
            f"Failed to restore changes to '{tree}' after snapshotting them.",
            stash=stash,
            hints=[f"Your changes are stashed as '{ref}'. Restore them with: git stash pop {ref}"],
        )
    logger.debug("Mirrored changes of %s as %s", tree, ref)
    return stash


def move_changes(git: Git, tree: Path, message: str) -> StashRef:
    """Stash all pending changes of `tree`, including untracked files, clearing it.

    Raises:
        StashError: If git stash push fails
    """
    if not git.stash_push(tree, message):
        raise StashError(f"Failed to stash uncommitted changes in '{tree}'.")
    return StashRef(tree=tree, ref=STASH_TOP, message=message)


def apply_and_drop(git: Git, target: Path, stash: StashRef) -> None:
    """Apply a stash entry into `target` (index preserved), then drop it.

    The drop only happens after the apply succeeded.

    Raises:
        StashError: If applying or dropping fails; the entry stays in the list
    """
    ref = locate(git, stash)
    logger.debug("Applying %s (%s) into %s", ref, stash.message, target)
    if not git.stash_apply(target, ref):
        raise StashError(f"Failed to apply stash '{ref}' in '{target}'.", stash=stash)
    if not git.stash_drop(stash.tree, ref):
        raise StashError(
            f"Applied stash '{ref}' but failed to drop it.",
            stash=stash,
            applied=True,
            hints=[f"Drop it manually with: git stash drop {ref}"],
        )


def restore(git: Git, stash: StashRef) -> None:
    """Pop a stash entry back onto the tree it was taken from.

    Raises:
        StashError: If git stash pop fails
    """
    ref = locate(git, stash)
    logger.debug("Restoring %s onto %s", ref, stash.tree)
    if not git.stash_pop(stash.tree, ref):
        raise StashError(f"Failed to restore stash '{ref}' onto '{stash.tree}'.", stash=stash)
