"""Error taxonomy for fork operations.

Every failure a fork operation can report maps to one of four classes:

- ValidationError: bad or missing alias, unknown option combination.
  Nothing was touched.
- PreconditionError: the repository is in a state the operation refuses to
  work from (dirty tree, detached HEAD, wrong location, missing metadata).
  Nothing was touched.
- ExecutionFailure: a git command failed mid-sequence. The compensating
  action for that step (stash restore, cherry-pick abort) already ran.
- UnrecoverableInconsistency: the compensating action itself failed. The
  message always names the artifact (stash reference, fork path) a human
  needs to recover by hand.

The CLI layer catches ParallelError, prints the message and hints, and exits 1.
"""


class ParallelError(Exception):
    """Base class for all reportable fork-operation failures."""

    def __init__(self, message: str, *, hints: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hints = hints or []


class ValidationError(ParallelError):
    """Invalid user input."""


class PreconditionError(ParallelError):
    """Repository state does not allow the operation."""


class ExecutionFailure(ParallelError):
    """A git command failed; any compensation for the step has been applied."""


class UnrecoverableInconsistency(ParallelError):
    """Compensation failed; manual recovery is required."""
