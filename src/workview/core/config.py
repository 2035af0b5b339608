"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.workview/config.toml.
Every field has a default, so a missing file is equivalent to an empty one.
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import tomlkit

from workview.core.exec.real import DEFAULT_EXTRA_PATH_DIRS


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in WorkviewContext.
    """

    poll_interval_seconds: float = 5.0
    debounce_seconds: float = 0.3
    command_timeout_seconds: float = 15.0
    install_check_timeout_seconds: float = 5.0
    worktree_tool: str = "gwt"
    pipeline_tool: str = "clier"
    pipeline_config_file: str = "clier-pipeline.json"
    extra_path_dirs: tuple[str, ...] = DEFAULT_EXTRA_PATH_DIRS


_FLOAT_FIELDS = frozenset(
    {
        "poll_interval_seconds",
        "debounce_seconds",
        "command_timeout_seconds",
        "install_check_timeout_seconds",
    }
)
_STR_FIELDS = frozenset({"worktree_tool", "pipeline_tool", "pipeline_config_file"})
_LIST_FIELDS = frozenset({"extra_path_dirs"})

CONFIG_KEYS: tuple[str, ...] = tuple(f.name for f in fields(GlobalConfig))


def _coerce_value(key: str, value: Any, source: str) -> Any:
    if key in _FLOAT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{key}' must be a number in {source}")
        if value <= 0:
            raise ValueError(f"'{key}' must be positive in {source}")
        return float(value)
    if key in _STR_FIELDS:
        if not isinstance(value, str) or not value:
            raise ValueError(f"'{key}' must be a non-empty string in {source}")
        return value
    if key in _LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"'{key}' must be a list of strings in {source}")
        return tuple(value)
    raise ValueError(f"Unknown config key '{key}' in {source}")


def config_from_mapping(data: dict[str, Any], source: str) -> GlobalConfig:
    """Build a GlobalConfig from parsed TOML, applying defaults for absent keys.

    Raises:
        ValueError: If a key is unknown or a value has the wrong type
    """
    values = {key: _coerce_value(key, value, source) for key, value in data.items()}
    return GlobalConfig(**values)


def parse_config_value(key: str, raw: str) -> Any:
    """Convert a command-line string into the type a config key expects.

    List values are comma-separated.

    Raises:
        ValueError: If the key is unknown or the value cannot be converted
    """
    if key in _FLOAT_FIELDS:
        try:
            number = float(raw)
        except ValueError:
            raise ValueError(f"'{key}' must be a number, got '{raw}'") from None
        return _coerce_value(key, number, "command line")
    if key in _LIST_FIELDS:
        items = [item.strip() for item in raw.split(",") if item.strip()]
        return _coerce_value(key, items, "command line")
    return _coerce_value(key, raw, "command line")


def with_value(config: GlobalConfig, key: str, raw: str) -> GlobalConfig:
    return replace(config, **{key: parse_config_value(key, raw)})


class ConfigStore(ABC):
    """Abstract interface for global config operations.

    Provides dependency injection for global config access, enabling
    in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if global config exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load global config.

        Returns:
            GlobalConfig instance with loaded values

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If config is malformed
        """
        ...

    @abstractmethod
    def save(self, config: GlobalConfig) -> None:
        """Save global config.

        Args:
            config: GlobalConfig instance to save
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the global config file (for error messages and debugging)."""
        ...

    def load_or_default(self) -> GlobalConfig:
        """Load global config, or return defaults when none exists.

        Raises:
            ValueError: If config exists but is malformed
        """
        if not self.exists():
            return GlobalConfig()
        return self.load()


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.workview/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()
        if not config_path.exists():
            raise FileNotFoundError(f"Global config not found at {config_path}")

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e
        return config_from_mapping(data, str(config_path))

    def save(self, config: GlobalConfig) -> None:
        """Write config, preserving comments and formatting of an existing file."""
        config_path = self.path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("Global workview configuration"))

        for key in CONFIG_KEYS:
            value = getattr(config, key)
            doc[key] = list(value) if isinstance(value, tuple) else value

        with config_path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)

    def path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        return Path.home() / ".workview" / "config.toml"


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            raise FileNotFoundError(f"Global config not found at {self.path()}")
        return self._config

    def save(self, config: GlobalConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/workview/config.toml")
