"""Git executor subpackage.

Provides the Executor abstraction over git subprocess calls with a real
implementation here and a scripted fake under tests/fakes.
"""

from git_parallel.core.executor.abc import CommandResult, Executor
from git_parallel.core.executor.real import RealExecutor

__all__ = [
    "CommandResult",
    "Executor",
    "RealExecutor",
]
