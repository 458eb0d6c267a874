"""Fake implementation of Shell for testing.

This fake enables testing `open` without launching editors or touching the
system clipboard.
"""

from pathlib import Path

from git_parallel.core.shell import Shell


class FakeShell(Shell):
    """In-memory fake implementation of shell operations.

    Constructor Injection:
    - All state is provided via constructor parameters
    - Calls are recorded for assertions

    Examples:
        # Editor installed
        >>> shell = FakeShell(installed_tools={"code": "/usr/local/bin/code"})
        >>> shell.get_installed_tool_path("code")
        '/usr/local/bin/code'

        # Clipboard unavailable
        >>> shell = FakeShell(clipboard_available=False)
        >>> shell.copy_to_clipboard("/tmp/x")
        False
    """

    def __init__(
        self,
        *,
        installed_tools: dict[str, str] | None = None,
        command_exit_code: int = 0,
        clipboard_available: bool = True,
    ) -> None:
        """Initialize fake with predetermined tool availability.

        Args:
            installed_tools: Mapping of tool name to executable path. Tools not in
                this mapping will return None from get_installed_tool_path()
            command_exit_code: Exit code to return from run_command() (default: 0)
            clipboard_available: Whether copy_to_clipboard() succeeds
        """
        self._installed_tools = installed_tools or {}
        self._command_exit_code = command_exit_code
        self._clipboard_available = clipboard_available
        self._command_calls: list[tuple[list[str], Path | None]] = []
        self._clipboard_calls: list[str] = []

    def get_installed_tool_path(self, tool_name: str) -> str | None:
        """Return the tool path if configured, None otherwise."""
        return self._installed_tools.get(tool_name)

    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        """Track call to run_command and return configured exit code."""
        self._command_calls.append((command, cwd))
        return self._command_exit_code

    def copy_to_clipboard(self, text: str) -> bool:
        self._clipboard_calls.append(text)
        return self._clipboard_available

    @property
    def command_calls(self) -> list[tuple[list[str], Path | None]]:
        """Get the list of run_command() calls that were made.

        Returns list of (command, cwd) tuples.

        This property is for test assertions only.
        """
        return self._command_calls.copy()

    @property
    def clipboard_calls(self) -> list[str]:
        """Texts passed to copy_to_clipboard(), for test assertions."""
        return self._clipboard_calls.copy()
