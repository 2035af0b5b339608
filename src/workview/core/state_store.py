"""Persistent per-workspace key/value state.

Architecture:
- StateStore: Abstract base class defining the interface
- JsonStateStore: Production implementation backed by a JSON file
- InMemoryStateStore: Test implementation holding values in a dict
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".workview"
STATE_FILE_NAME = "state.json"


def state_path_for(workspace: Path) -> Path:
    return workspace / STATE_DIR_NAME / STATE_FILE_NAME


class StateStore(ABC):
    """String-keyed storage for JSON-compatible values.

    Reads take a typed default that is returned when the key is absent or
    holds a value of a different type.
    """

    @abstractmethod
    def get_raw(self, key: str) -> Any:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    def set_raw(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under key."""
        ...

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get_raw(key)
        if isinstance(value, bool):
            return value
        return default

    def get_str_list(self, key: str, default: list[str]) -> list[str]:
        value = self.get_raw(key)
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return list(value)
        return list(default)

    def set_bool(self, key: str, value: bool) -> None:
        self.set_raw(key, value)

    def set_str_list(self, key: str, value: list[str]) -> None:
        self.set_raw(key, list(value))


class JsonStateStore(StateStore):
    """Stores all keys in a single JSON object on disk.

    The file is re-read on every access so separate CLI invocations see each
    other's writes. Writes replace the file atomically.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug("Ignoring unreadable state file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.debug("Ignoring state file %s: not a JSON object", self._path)
            return {}
        return data

    def get_raw(self, key: str) -> Any:
        return self._load().get(key)

    def set_raw(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemoryStateStore(StateStore):
    """Test implementation that keeps state in memory without touching filesystem."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        """Initialize in-memory state.

        Args:
            values: Initial key/value pairs (None = empty store)
        """
        self._values: dict[str, Any] = dict(values) if values is not None else {}

    @property
    def values(self) -> dict[str, Any]:
        """Read-only copy of stored values for test assertions."""
        return dict(self._values)

    def get_raw(self, key: str) -> Any:
        return self._values.get(key)

    def set_raw(self, key: str, value: Any) -> None:
        self._values[key] = value
