"""Shell and desktop tool access (editor, clipboard).

Abstracted so `open` can be tested without launching editors or touching the
system clipboard.
"""

import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path


class Shell(ABC):
    """Abstract interface for running external user tools."""

    @abstractmethod
    def get_installed_tool_path(self, tool_name: str) -> str | None:
        """Resolve a tool on PATH.

        Returns:
            Absolute path to the executable, or None if not installed
        """
        ...

    @abstractmethod
    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        """Run a command with inherited stdio and return its exit code."""
        ...

    @abstractmethod
    def copy_to_clipboard(self, text: str) -> bool:
        """Copy text to the system clipboard.

        Returns:
            True if a clipboard tool accepted the text
        """
        ...


def _clipboard_commands(platform: str) -> list[list[str]]:
    if platform == "win32":
        return [["clip"]]
    if platform == "darwin":
        return [["pbcopy"]]
    if platform.startswith("linux"):
        return [
            ["xclip", "-selection", "clipboard"],
            ["xsel", "--clipboard", "--input"],
            ["wl-copy"],
        ]
    return []


class RealShell(Shell):
    """Production implementation using shutil.which and subprocess."""

    def get_installed_tool_path(self, tool_name: str) -> str | None:
        return shutil.which(tool_name)

    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        result = subprocess.run(command, cwd=cwd, check=False)
        return result.returncode

    def copy_to_clipboard(self, text: str) -> bool:
        for command in _clipboard_commands(sys.platform):
            if shutil.which(command[0]) is None:
                continue
            result = subprocess.run(
                command, input=text, text=True, capture_output=True, check=False
            )
            if result.returncode == 0:
                return True
        return False
