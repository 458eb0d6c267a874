"""Naming utilities for fork aliases and fork-root path segments.

Pure functions, no I/O.
"""

import re

_UNSAFE_SEGMENT_CHARS = re.compile(r'[/\\<>:"|?*\x00-\x1f]')
_ALIAS_SEPARATORS = re.compile(r"[/\\ ]")


def is_valid_alias(alias: str | None) -> bool:
    """Check whether an alias can be used as a fork directory name.

    Rejects empty or whitespace-only aliases, path separators, spaces, the
    characters `<>:"|?*`, and control characters.

    Examples:
        >>> is_valid_alias("feature-x")
        True
        >>> is_valid_alias("feature/x")
        False
    """
    if alias is None or alias.strip() == "":
        return False
    if _ALIAS_SEPARATORS.search(alias):
        return False
    if _UNSAFE_SEGMENT_CHARS.search(alias):
        return False
    return True


def sanitize_path_segment(name: str) -> str:
    """Make a project or branch name safe to use as a single directory name.

    Path separators, `<>:"|?*` and control characters become `_`.

    Examples:
        >>> sanitize_path_segment("feature/login")
        'feature_login'
    """
    return _UNSAFE_SEGMENT_CHARS.sub("_", name)
