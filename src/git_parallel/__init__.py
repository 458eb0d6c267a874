"""git-parallel - ephemeral forked worktrees for parallel work on a branch."""

__version__ = "0.1.0"
