"""Per-fork status for `list`.

Collection runs the read-only git queries of each fork on a small thread
pool; rendering is pure and keeps directory order.
"""

import concurrent.futures
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import click

from git_parallel.core.git import Git
from git_parallel.core.metadata import ValidFork, read_fork_metadata
from git_parallel.core.parallel_context import ParallelContext

logger = logging.getLogger(__name__)

NO_FORKS_MESSAGE = "No forked worktrees found for this branch."
UNKNOWN_HEAD = "unknown"
MAX_WORKERS = 4

ALIAS_WIDTH = 18
STATUS_WIDTH = 7
DIVERGENCE_WIDTH = 11
SHORT_PATH_WIDTH = 50

CURRENT_MARKER = "●"
OTHER_MARKER = "○"
ELLIPSIS = "…"


class Divergence(Enum):
    UP_TO_DATE = "up-to-date"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"

    @staticmethod
    def classify(ahead: int, behind: int) -> "Divergence":
        if ahead > 0 and behind > 0:
            return Divergence.DIVERGED
        if ahead > 0:
            return Divergence.AHEAD
        if behind > 0:
            return Divergence.BEHIND
        return Divergence.UP_TO_DATE


@dataclass(frozen=True)
class ForkStatus:
    alias: str
    path: Path
    dirty: bool
    short_head: str
    ahead: int
    behind: int
    is_current: bool

    @property
    def divergence(self) -> Divergence:
        return Divergence.classify(self.ahead, self.behind)


def discover_forks(parallel_root: Path) -> list[ValidFork]:
    """Forks under parallel_root in name order; other directories are skipped."""
    if not parallel_root.is_dir():
        return []
    forks: list[ValidFork] = []
    for entry in sorted(parallel_root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        classification = read_fork_metadata(entry)
        if isinstance(classification, ValidFork):
            forks.append(classification)
        else:
            logger.debug("Skipping %s: %s", entry, classification.reason)
    return forks


def commit_comparison(git: Git, fork_path: Path, origin_head: str | None) -> tuple[int, int]:
    """(ahead, behind) of a fork relative to origin's HEAD."""
    fork_head = git.head_commit(fork_path)
    if fork_head is None or origin_head is None:
        return (0, 0)
    if fork_head == origin_head:
        return (0, 0)
    ahead = git.count_commits(fork_path, origin_head, fork_head)
    behind = git.count_commits(fork_path, fork_head, origin_head)
    return (ahead, behind)


def _query_fork(
    git: Git, fork: ValidFork, origin_head: str | None, current: str | None
) -> ForkStatus:
    alias = fork.metadata.alias or fork.path.name
    ahead, behind = commit_comparison(git, fork.path, origin_head)
    return ForkStatus(
        alias=alias,
        path=fork.path,
        dirty=git.has_pending_changes(fork.path),
        short_head=git.short_head(fork.path) or UNKNOWN_HEAD,
        ahead=ahead,
        behind=behind,
        is_current=current is not None and alias == current,
    )


def collect_fork_statuses(
    git: Git, pctx: ParallelContext, max_workers: int = MAX_WORKERS
) -> list[ForkStatus]:
    """Status of every fork of the current (project, branch), in name order."""
    forks = discover_forks(pctx.parallel_root)
    if not forks:
        return []

    origin_head = git.head_commit(pctx.origin_path)
    current = pctx.alias if pctx.is_fork else None

    # map() yields results in input order regardless of completion order
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
        return list(ex.map(lambda fork: _query_fork(git, fork, origin_head, current), forks))


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------


def get_visible_length(text: str) -> int:
    """Length of text without ANSI color codes and OSC 8 hyperlink sequences."""
    text = re.sub(r"\033\[[0-9;]*m", "", text)
    text = re.sub(r"\033\]8;;[^\033]*\033\\", "", text)
    return len(text)


def pad_visible(text: str, width: int, align: str = "left") -> str:
    padding = max(0, width - get_visible_length(text))
    if align == "center":
        left = padding // 2
        return " " * left + text + " " * (padding - left)
    return text + " " * padding


def clamp_end(text: str, width: int) -> str:
    """Cut text to width, marking the cut with an ellipsis at the end."""
    if len(text) <= width:
        return text
    return text[: width - 1] + ELLIPSIS


def clamp_middle(text: str, width: int) -> str:
    """Cut text to width, keeping both ends.

    Examples:
        >>> clamp_middle("/tmp/worktrees/demo/main/feature", 16)
        '/tmp/wor…feature'
    """
    if len(text) <= width:
        return text
    keep = width - 1
    head = math.ceil(keep / 2)
    tail = keep - head
    return text[:head] + ELLIPSIS + (text[-tail:] if tail else "")


def hyperlink(text: str, url: str) -> str:
    """Wrap text in an OSC 8 terminal hyperlink."""
    return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"


def file_url(path: Path) -> str:
    return "file://" + str(path).replace("\\", "/")


def format_divergence(status: ForkStatus) -> str:
    divergence = status.divergence
    if divergence is Divergence.DIVERGED:
        return click.style(f"↑{status.ahead} ↓{status.behind}", fg="yellow")
    if divergence is Divergence.AHEAD:
        return click.style(f"↑{status.ahead}", fg="green")
    if divergence is Divergence.BEHIND:
        return click.style(f"↓{status.behind}", fg="red")
    return click.style("up-to-date", dim=True)


def format_fork_line(status: ForkStatus, short: bool = False) -> str:
    """One `list` row: marker, alias, dirty/clean, short HEAD, divergence, path."""
    marker = click.style(CURRENT_MARKER if status.is_current else OTHER_MARKER, dim=True)
    alias = pad_visible(clamp_end(status.alias, ALIAS_WIDTH), ALIAS_WIDTH)
    if status.dirty:
        label = click.style("dirty", fg="red")
    else:
        label = click.style("clean", fg="green")

    path_text = str(status.path)
    if short:
        path_text = hyperlink(clamp_middle(path_text, SHORT_PATH_WIDTH), file_url(status.path))

    return " ".join(
        [
            marker,
            alias,
            pad_visible(label, STATUS_WIDTH, align="center"),
            click.style(status.short_head, dim=True),
            pad_visible(format_divergence(status), DIVERGENCE_WIDTH),
            path_text,
        ]
    )


def format_header(pctx: ParallelContext) -> list[str]:
    return [
        click.style("Project:", fg="cyan") + f" {pctx.project_name}",
        click.style("Branch:", fg="cyan") + f" {pctx.branch_name}",
        click.style("Origin:", fg="cyan") + f" {pctx.origin_path}",
        click.style("Current:", fg="cyan") + f" {pctx.current_label}",
    ]
