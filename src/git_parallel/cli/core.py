"""Shared helpers for commands."""

from git_parallel.core.context import AppContext
from git_parallel.core.parallel_context import ParallelContext, resolve_parallel_context


def discover_parallel_context(ctx: AppContext) -> ParallelContext:
    """Resolve the caller's position from the invocation directory."""
    return resolve_parallel_context(ctx.git, ctx.cwd, ctx.global_config.worktrees_root)
