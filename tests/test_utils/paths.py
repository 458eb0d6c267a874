"""Path utilities for tests.

Sentinel paths let tests that never touch the filesystem avoid tmp_path.
"""

from pathlib import Path


def sentinel_path() -> Path:
    """Return sentinel path for tests that don't need real filesystem.

    Use this when testing pure logic (CLI exit codes, error messages,
    validation) that doesn't perform filesystem I/O.

    Note:
        - AppContext.for_test() accepts any Path without validating existence
        - CliRunner.invoke() doesn't validate ctx.cwd exists
        - FakeExecutor answers from its table, never from disk
    """
    return Path("/test/sentinel")
