"""Global configuration data structures and loading.

Provides immutable global config loaded from ~/.git-parallel/config.toml,
with environment variable overrides applied on top of file values.
"""

import os
import tempfile
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from pathlib import Path

import tomlkit

CONFIG_PATH_ENV = "GIT_PARALLEL_CONFIG"

ENV_OVERRIDES = {
    "temp_root": "GIT_PARALLEL_TEMP_ROOT",
    "default_editor": "GIT_PARALLEL_EDITOR",
    "git_binary": "GIT_PARALLEL_GIT",
}

CONFIG_DESCRIPTIONS = {
    "temp_root": "Directory under which forks are created (in <temp_root>/worktrees)",
    "default_editor": "Editor command used by 'open'",
    "git_binary": "git executable to run",
}


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in AppContext.
    """

    temp_root: Path
    default_editor: str
    git_binary: str

    @staticmethod
    def defaults() -> "GlobalConfig":
        return GlobalConfig(
            temp_root=Path(tempfile.gettempdir()),
            default_editor="code",
            git_binary="git",
        )

    @property
    def worktrees_root(self) -> Path:
        """Directory holding every fork, grouped by project and branch."""
        return self.temp_root / "worktrees"


def config_keys() -> list[str]:
    return [f.name for f in fields(GlobalConfig)]


def _coerce(key: str, value: str) -> Path | str:
    if key == "temp_root":
        return Path(value).expanduser()
    return value


def apply_env_overrides(config: GlobalConfig, environ: dict[str, str]) -> GlobalConfig:
    """Return config with any GIT_PARALLEL_* environment values applied."""
    updates: dict[str, Path | str] = {}
    for key, env_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            updates[key] = _coerce(key, value)
    if not updates:
        return config
    return replace(config, **updates)


class ConfigStore(ABC):
    """Abstract interface for global config access.

    Enables in-memory implementations for tests without touching the
    filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if the config file exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load config from file, falling back to defaults for missing keys.

        Raises:
            ValueError: If the file is not valid TOML or a key has the wrong type
        """
        ...

    @abstractmethod
    def set_value(self, key: str, value: str) -> None:
        """Persist a single key.

        Raises:
            KeyError: If key is not a known configuration key
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for messages)."""
        ...


class RealConfigStore(ConfigStore):
    """Production implementation reading/writing ~/.git-parallel/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        if config_path is None:
            env_path = os.environ.get(CONFIG_PATH_ENV)
            if env_path:
                config_path = Path(env_path).expanduser()
            else:
                config_path = Path.home() / ".git-parallel" / "config.toml"
        self._path = config_path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> GlobalConfig:
        config = GlobalConfig.defaults()
        if not self.exists():
            return config

        try:
            with self._path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {self._path}: {e}") from e

        updates: dict[str, Path | str] = {}
        for key in config_keys():
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, str):
                raise ValueError(f"Config key '{key}' in {self._path} must be a string")
            updates[key] = _coerce(key, value)
        return replace(config, **updates)

    def set_value(self, key: str, value: str) -> None:
        if key not in config_keys():
            raise KeyError(key)

        if self.exists():
            with self._path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("git-parallel configuration"))

        doc[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)

    def path(self) -> Path:
        return self._path
