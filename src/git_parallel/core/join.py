"""Joining a fork back into origin.

The join runs as a small state machine:

    VALIDATING -> STASHING_FORK? -> REPLAYING -> RESTORING_STASH? -> FINALIZING
        -> COMMITTED | ROLLED_BACK

Each handler performs one step, including that step's compensation, and
returns the next state. The machine records every state it visits, so a
failed join can be inspected to see exactly which compensations ran.

Replay uses cherry-pick so origin keeps a linear history on its own branch;
the fork's commits are copied, never merged.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from git_parallel.core import changes
from git_parallel.core.changes import StashError, StashRef
from git_parallel.core.context import AppContext
from git_parallel.core.errors import (
    ExecutionFailure,
    ParallelError,
    PreconditionError,
    UnrecoverableInconsistency,
    ValidationError,
)
from git_parallel.core.git import Git
from git_parallel.core.lifecycle import delete_fork, require_alias
from git_parallel.core.metadata import (
    ForkMetadata,
    ValidFork,
    read_fork_metadata,
    write_fork_metadata,
)
from git_parallel.core.parallel_context import ParallelContext
from git_parallel.core.time import isoformat_utc

logger = logging.getLogger(__name__)

JOIN_STASH_PREFIX = "git-parallel-join:"
JOIN_USAGE = "Usage: git parallel join [<alias>] [--keep] [--all]"


class JoinState(Enum):
    VALIDATING = "validating"
    STASHING_FORK = "stashing_fork"
    REPLAYING = "replaying"
    RESTORING_STASH = "restoring_stash"
    FINALIZING = "finalizing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        return self in (JoinState.COMMITTED, JoinState.ROLLED_BACK)


@dataclass(frozen=True)
class JoinRequest:
    """Which fork to join, and how."""

    alias: str
    fork_path: Path
    keep: bool
    include_all: bool


@dataclass(frozen=True)
class JoinOutcome:
    """Result of a finished join.

    `error` is set whenever the command must exit non-zero. A join can end
    COMMITTED with an error when the commits landed but removing the fork
    afterwards failed.
    """

    state: JoinState
    visited: list[JoinState]
    applied: list[str]
    error: ParallelError | None

    @property
    def succeeded(self) -> bool:
        return self.state is JoinState.COMMITTED and self.error is None


def resolve_join_target(
    pctx: ParallelContext,
    alias: str | None,
    *,
    keep: bool,
    include_all: bool,
) -> JoinRequest:
    """Decide which fork a join acts on.

    With an alias the fork must exist and must not be the tree the caller is
    in. Without one the caller must be standing in a fork, which is then the
    target.

    Raises:
        ValidationError: No alias given outside a fork, or the alias is invalid
        PreconditionError: Target is the current fork or does not exist
    """
    if alias is None:
        if not pctx.is_fork or pctx.alias is None:
            raise ValidationError(
                "Either run join from inside a forked worktree, or specify which fork to join.",
                hints=[JOIN_USAGE],
            )
        return JoinRequest(
            alias=pctx.alias, fork_path=pctx.repo_root, keep=keep, include_all=include_all
        )

    if pctx.is_fork and pctx.alias == alias:
        raise PreconditionError(
            "Cannot join the fork you are currently in. Switch to origin or another fork first."
        )
    alias = require_alias(alias)
    fork_path = pctx.fork_path(alias)
    if not fork_path.exists():
        raise PreconditionError(f"Worktree '{alias}' not found for branch '{pctx.branch_name}'.")
    return JoinRequest(alias=alias, fork_path=fork_path, keep=keep, include_all=include_all)


@dataclass
class JoinMachine:
    """Runs one join from VALIDATING to a terminal state.

    Handlers never raise ParallelError; they record it in `error` and move to
    ROLLED_BACK (or, after the commits landed, carry it into COMMITTED).
    """

    ctx: AppContext
    request: JoinRequest
    visited: list[JoinState] = field(default_factory=list)
    applied: list[str] = field(default_factory=list)
    error: ParallelError | None = None
    metadata: ForkMetadata | None = None
    origin_path: Path | None = None
    fork_dirty: bool = False
    stash: StashRef | None = None
    pre_join_head: str | None = None

    def run(self) -> JoinOutcome:
        handlers: dict[JoinState, Callable[[], JoinState]] = {
            JoinState.VALIDATING: self._validate,
            JoinState.STASHING_FORK: self._stash_fork,
            JoinState.REPLAYING: self._replay,
            JoinState.RESTORING_STASH: self._restore_stash,
            JoinState.FINALIZING: self._finalize,
        }
        state = JoinState.VALIDATING
        while True:
            self.visited.append(state)
            logger.debug("join %s: entering %s", self.request.alias, state.name)
            if state.is_terminal:
                break
            state = handlers[state]()

        return JoinOutcome(
            state=state,
            visited=list(self.visited),
            applied=list(self.applied),
            error=self.error,
        )

    @property
    def _git(self) -> Git:
        return self.ctx.git

    def _fail(self, error: ParallelError) -> JoinState:
        self.error = error
        return JoinState.ROLLED_BACK

    # ------------------------------------------------------------------
    # VALIDATING
    # ------------------------------------------------------------------

    def _validate(self) -> JoinState:
        alias = self.request.alias
        fork_path = self.request.fork_path

        classification = read_fork_metadata(fork_path)
        if not isinstance(classification, ValidFork):
            return self._fail(
                PreconditionError(
                    f"Missing metadata for worktree '{alias}'. Unable to join automatically."
                )
            )
        metadata = classification.metadata
        if metadata.base_commit is None or not metadata.base_commit.strip():
            return self._fail(
                PreconditionError(
                    "Fork metadata is missing base commit information. "
                    "Unable to perform an automatic join."
                )
            )

        origin_path = Path(metadata.origin_path).resolve()
        if not origin_path.exists():
            return self._fail(
                PreconditionError(
                    f"Original worktree path not found. Expected at '{metadata.origin_path}'."
                )
            )

        try:
            fork_dirty = self._git.has_pending_changes(fork_path)
            if fork_dirty and not self.request.include_all:
                return self._fail(
                    PreconditionError(
                        f"Fork '{alias}' has uncommitted changes. "
                        "Re-run with --all to include them or clean the worktree first."
                    )
                )
            if self._git.has_pending_changes(origin_path):
                return self._fail(
                    PreconditionError(
                        "Origin worktree has pending changes. Commit or stash them before joining."
                    )
                )
        except ExecutionFailure as e:
            return self._fail(e)

        self.metadata = metadata
        self.origin_path = origin_path
        self.fork_dirty = fork_dirty
        if fork_dirty:
            return JoinState.STASHING_FORK
        return JoinState.REPLAYING

    # ------------------------------------------------------------------
    # STASHING_FORK
    # ------------------------------------------------------------------

    def _stash_fork(self) -> JoinState:
        message = f"{JOIN_STASH_PREFIX}{self.request.alias}"
        try:
            self.stash = changes.move_changes(self._git, self.request.fork_path, message)
        except StashError as e:
            return self._fail(
                ExecutionFailure(
                    "Failed to stash uncommitted changes before joining.", hints=e.hints
                )
            )
        return JoinState.REPLAYING

    # ------------------------------------------------------------------
    # REPLAYING
    # ------------------------------------------------------------------

    def _replay(self) -> JoinState:
        assert self.metadata is not None and self.metadata.base_commit is not None
        assert self.origin_path is not None
        git = self._git
        fork_path = self.request.fork_path

        self.pre_join_head = git.head_commit(self.origin_path)
        fork_head = git.head_commit(fork_path)
        commits: list[str] | None = None
        if fork_head is not None and self.pre_join_head is not None:
            commits = git.commits_between(fork_path, self.metadata.base_commit.strip(), fork_head)

        if commits is None:
            self._restore_fork_stash()
            if self.error is None:
                self.error = ExecutionFailure("Unable to enumerate commits to join.")
            return JoinState.ROLLED_BACK

        logger.debug("Replaying %d commit(s) onto %s", len(commits), self.origin_path)
        for commit in commits:
            if git.cherry_pick(self.origin_path, commit):
                self.applied.append(commit)
                continue

            logger.debug("cherry-pick %s failed after %d applied", commit, len(self.applied))
            self._undo_replay()
            self._restore_fork_stash()
            if self.error is None:
                self.error = ExecutionFailure(
                    f"Cherry-pick failed while applying commit {commit}.",
                    hints=["Origin was reset to its state before the join."],
                )
            return JoinState.ROLLED_BACK

        if self.stash is not None:
            return JoinState.RESTORING_STASH
        return JoinState.FINALIZING

    def _undo_replay(self) -> None:
        """Return origin to the HEAD it had before the join started."""
        assert self.origin_path is not None and self.pre_join_head is not None
        git = self._git
        git.cherry_pick_abort(self.origin_path)
        if not self.applied:
            return
        if not git.reset_hard(self.origin_path, self.pre_join_head):
            self.error = UnrecoverableInconsistency(
                f"Cherry-pick failed and origin could not be reset to {self.pre_join_head}.",
                hints=[
                    f"{len(self.applied)} commit(s) were already replayed into "
                    f"'{self.origin_path}'.",
                    f"Restore it with: git reset --hard {self.pre_join_head}",
                ],
            )
            return
        self.applied.clear()

    def _restore_fork_stash(self) -> None:
        if self.stash is None:
            return
        try:
            changes.restore(self._git, self.stash)
        except StashError:
            ref = changes.locate(self._git, self.stash)
            message = (
                f"Please restore stash '{ref}' manually from fork '{self.request.alias}'. "
                "Automatic pop failed."
            )
            if self.error is None:
                self.error = UnrecoverableInconsistency(message)
            else:
                self.error.hints.append(message)
            return
        self.ctx.feedback.warning(
            f"Stashed changes restored to fork '{self.request.alias}' due to join failure."
        )

    # ------------------------------------------------------------------
    # RESTORING_STASH
    # ------------------------------------------------------------------

    def _restore_stash(self) -> JoinState:
        assert self.stash is not None and self.origin_path is not None
        try:
            changes.apply_and_drop(self._git, self.origin_path, self.stash)
        except StashError as e:
            if e.applied:
                self.ctx.feedback.warning(" ".join([e.message, *e.hints]))
                return JoinState.FINALIZING

            # Replayed commits stay in origin; only the uncommitted work goes back.
            self.ctx.feedback.error("Failed to apply uncommitted changes to the origin worktree.")
            self._restore_fork_stash()
            if self.error is None:
                self.error = ExecutionFailure(
                    f"Uncommitted changes were restored to fork '{self.request.alias}' for safety.",
                    hints=[f"{len(self.applied)} commit(s) were replayed into origin."],
                )
            return JoinState.ROLLED_BACK
        return JoinState.FINALIZING

    # ------------------------------------------------------------------
    # FINALIZING
    # ------------------------------------------------------------------

    def _finalize(self) -> JoinState:
        assert self.metadata is not None and self.origin_path is not None
        alias = self.request.alias
        fork_path = self.request.fork_path
        feedback = self.ctx.feedback

        if self.applied:
            feedback.success(f"Cherry-picked {len(self.applied)} commit(s) into origin.")
        else:
            feedback.success("No new commits to cherry-pick. Origin was already up to date.")

        if not self.request.keep:
            try:
                delete_fork(self.ctx, self.origin_path, alias, fork_path)
            except ExecutionFailure as e:
                logger.debug("Removing %s after join failed: %s", alias, e.message)
                self.error = ExecutionFailure(
                    f"Failed to remove fork '{alias}' after joining. "
                    "Please remove it manually later."
                )
                return JoinState.COMMITTED
            feedback.success(f"Fork '{alias}' merged and removed successfully.")
            return JoinState.COMMITTED

        new_base = self._git.head_commit(self.origin_path)
        if new_base:
            updated = self.metadata.with_base_commit(
                new_base, updated_at=isoformat_utc(self.ctx.time.now())
            )
            try:
                write_fork_metadata(fork_path, updated)
            except OSError as e:
                feedback.warning(f"Could not update metadata of fork '{alias}': {e}")
        feedback.success(f"Fork '{alias}' merged into origin. Worktree kept at: {fork_path}")
        if self.applied and new_base:
            # The new base is origin's copy of the commits, not an ancestor of the fork's HEAD.
            feedback.info(
                f"Before joining '{alias}' again, reset it to origin: "
                f"git -C {fork_path} reset --hard {new_base}"
            )
        return JoinState.COMMITTED


def join_fork(
    ctx: AppContext,
    pctx: ParallelContext,
    alias: str | None,
    *,
    keep: bool = False,
    include_all: bool = False,
) -> JoinOutcome:
    """Replay a fork's commits onto origin and remove (or keep) the fork.

    Raises:
        ParallelError: Whatever stopped the join; origin's HEAD is unchanged
            unless the error says otherwise
    """
    request = resolve_join_target(pctx, alias, keep=keep, include_all=include_all)
    outcome = JoinMachine(ctx=ctx, request=request).run()
    logger.debug(
        "join %s finished in %s via %s",
        request.alias,
        outcome.state.name,
        " -> ".join(s.name for s in outcome.visited),
    )
    if outcome.error is not None:
        raise outcome.error
    return outcome
