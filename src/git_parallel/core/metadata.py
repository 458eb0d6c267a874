"""Fork descriptor file (.git-parallel.json).

A directory under the fork root is a fork only if it holds a descriptor that
decodes cleanly. Reading never raises: anything unreadable classifies the
directory as NotAFork so callers branch on an explicit case.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from git_parallel.core.naming import is_valid_alias

logger = logging.getLogger(__name__)

METADATA_FILENAME = ".git-parallel.json"
METADATA_SCHEMA_VERSION = 1


class ForkMetadata(BaseModel):
    """Decoded contents of a fork's descriptor file.

    Field names are snake_case in Python and camelCase on disk. The schema
    version lives in code; files written by this version carry no version key,
    and a file announcing a newer version is not decoded.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    alias: str
    branch: str
    safe_branch: str | None = None
    project: str
    safe_project: str | None = None
    origin_path: str
    base_commit: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    version: int = Field(default=METADATA_SCHEMA_VERSION, exclude=True)

    @field_validator("alias")
    @classmethod
    def _alias_is_a_directory_name(cls, value: str) -> str:
        if not is_valid_alias(value):
            raise ValueError(f"invalid alias {value!r}")
        return value

    def to_json(self) -> str:
        """Serialize with 2-space indentation, omitting unset optional fields."""
        return self.model_dump_json(indent=2, by_alias=True, exclude_none=True) + "\n"

    def with_base_commit(self, base_commit: str, *, updated_at: str) -> "ForkMetadata":
        """Return a copy advanced to a new base commit."""
        return self.model_copy(update={"base_commit": base_commit, "updated_at": updated_at})


@dataclass(frozen=True)
class ValidFork:
    """A directory with a decodable fork descriptor."""

    path: Path
    metadata: ForkMetadata


@dataclass(frozen=True)
class NotAFork:
    """A directory that is not (or no longer) a fork. Never an error."""

    path: Path
    reason: str


def metadata_path(fork_path: Path) -> Path:
    return fork_path / METADATA_FILENAME


def read_fork_metadata(fork_path: Path) -> ValidFork | NotAFork:
    """Classify a directory by its descriptor file.

    Args:
        fork_path: Root directory of a (possible) fork

    Returns:
        ValidFork with the decoded metadata, or NotAFork describing why the
        directory does not qualify
    """
    path = metadata_path(fork_path)
    if not path.is_file():
        return NotAFork(path=fork_path, reason="no descriptor file")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Unreadable descriptor %s: %s", path, e)
        return NotAFork(path=fork_path, reason="unreadable descriptor file")

    try:
        metadata = ForkMetadata.model_validate_json(content)
    except ValidationError as e:
        logger.debug("Invalid descriptor %s: %s", path, e)
        return NotAFork(path=fork_path, reason="invalid descriptor file")

    if metadata.version > METADATA_SCHEMA_VERSION:
        return NotAFork(
            path=fork_path, reason=f"unsupported descriptor version {metadata.version}"
        )

    return ValidFork(path=fork_path, metadata=metadata)


def write_fork_metadata(fork_path: Path, metadata: ForkMetadata) -> None:
    """Write (overwrite) the descriptor file of a fork."""
    metadata_path(fork_path).write_text(metadata.to_json(), encoding="utf-8")


def ensure_metadata_excluded(exclude_file: Path) -> bool:
    """Add the descriptor filename to a repository's local exclude list once.

    Creates the exclude file (and its directory) when missing.

    Args:
        exclude_file: Path to `<git common dir>/info/exclude`

    Returns:
        True if the file was modified, False if the entry was already present
    """
    if exclude_file.is_file():
        content = exclude_file.read_text(encoding="utf-8")
        if METADATA_FILENAME in content.splitlines():
            return False
        with exclude_file.open("a", encoding="utf-8") as f:
            f.write(f"\n{METADATA_FILENAME}\n")
        return True

    exclude_file.parent.mkdir(parents=True, exist_ok=True)
    exclude_file.write_text(f"{METADATA_FILENAME}\n", encoding="utf-8")
    return True
