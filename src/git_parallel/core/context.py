"""Application context with dependency injection."""

import os
from dataclasses import dataclass
from pathlib import Path

import click

from git_parallel.cli.output import user_output
from git_parallel.core.config_store import (
    ConfigStore,
    GlobalConfig,
    RealConfigStore,
    apply_env_overrides,
)
from git_parallel.core.executor.abc import Executor
from git_parallel.core.executor.real import RealExecutor
from git_parallel.core.git import Git
from git_parallel.core.prompt import Prompt, RealPrompt
from git_parallel.core.shell import RealShell, Shell
from git_parallel.core.shell_scripts import RESULT_FILE_ENV
from git_parallel.core.time import RealTime, Time
from git_parallel.core.user_feedback import InteractiveFeedback, UserFeedback


@dataclass(frozen=True)
class AppContext:
    """Immutable context holding all dependencies for git-parallel operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    Note: result_file is the side channel used by `switch` to hand a target
    directory to the shell wrapper; it is None when the wrapper is not
    installed.
    """

    executor: Executor
    shell: Shell
    prompt: Prompt
    time: Time
    feedback: UserFeedback
    config_store: ConfigStore
    global_config: GlobalConfig
    cwd: Path  # Current working directory at CLI invocation
    result_file: Path | None

    @property
    def git(self) -> Git:
        return Git(self.executor)

    @staticmethod
    def for_test(
        executor: Executor | None = None,
        shell: Shell | None = None,
        prompt: Prompt | None = None,
        time: Time | None = None,
        feedback: UserFeedback | None = None,
        config_store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
        cwd: Path | None = None,
        result_file: Path | None = None,
    ) -> "AppContext":
        """Create test context with optional pre-configured collaborators.

        Any collaborator not given is replaced by its empty fake.

        Example:
            >>> executor = FakeExecutor(responses={...})
            >>> ctx = AppContext.for_test(executor=executor, cwd=repo)
        """
        from tests.fakes.config_store import FakeConfigStore
        from tests.fakes.executor import FakeExecutor
        from tests.fakes.prompt import FakePrompt
        from tests.fakes.shell import FakeShell
        from tests.fakes.time import FakeTime
        from tests.fakes.user_feedback import FakeUserFeedback
        from tests.test_utils.paths import sentinel_path

        if executor is None:
            executor = FakeExecutor()

        if shell is None:
            shell = FakeShell()

        if prompt is None:
            prompt = FakePrompt()

        if time is None:
            time = FakeTime()

        if feedback is None:
            feedback = FakeUserFeedback()

        if global_config is None:
            global_config = GlobalConfig(
                temp_root=Path("/test/tmp"),
                default_editor="code",
                git_binary="git",
            )

        if config_store is None:
            config_store = FakeConfigStore(config=global_config)

        return AppContext(
            executor=executor,
            shell=shell,
            prompt=prompt,
            time=time,
            feedback=feedback,
            config_store=config_store,
            global_config=global_config,
            cwd=cwd or sentinel_path(),
            result_file=result_file,
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        (path, None) on success, (None, error_message) if the directory was deleted
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def load_global_config(config_store: ConfigStore) -> GlobalConfig:
    """Load config, reporting (not failing on) a malformed file."""
    try:
        config = config_store.load()
    except ValueError as e:
        user_output(click.style("Warning: ", fg="yellow") + f"{e} - using defaults")
        config = GlobalConfig.defaults()
    return apply_env_overrides(config, dict(os.environ))


def create_context() -> AppContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.
    """
    # 1. Capture cwd (no deps)
    cwd, error_msg = safe_cwd()
    if cwd is None:
        user_output(click.style("Error: ", fg="red") + str(error_msg))
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(1)

    # 2. Load global config (missing file means defaults)
    config_store = RealConfigStore()
    global_config = load_global_config(config_store)

    # 3. Side channel for `switch`
    result_env = os.environ.get(RESULT_FILE_ENV)
    result_file = Path(result_env) if result_env else None

    return AppContext(
        executor=RealExecutor(global_config.git_binary),
        shell=RealShell(),
        prompt=RealPrompt(),
        time=RealTime(),
        feedback=InteractiveFeedback(),
        config_store=config_store,
        global_config=global_config,
        cwd=cwd,
        result_file=result_file,
    )
