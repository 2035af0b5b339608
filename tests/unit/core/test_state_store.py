"""Tests for persistent per-workspace state."""

import json
from pathlib import Path

from workview.core.state_store import (
    InMemoryStateStore,
    JsonStateStore,
    state_path_for,
)


def test_state_path_for_workspace() -> None:
    """Test that state lives in a hidden directory under the workspace."""
    assert state_path_for(Path("/repo")) == Path("/repo/.workview/state.json")


def test_json_state_store_missing_file_returns_defaults(tmp_path: Path) -> None:
    """Test that reads from a missing file fall back to the given defaults."""
    store = JsonStateStore(tmp_path / "state.json")

    assert store.get_bool("flag", True) is True
    assert store.get_str_list("names", ["x"]) == ["x"]
    assert store.get_raw("flag") is None


def test_json_state_store_round_trip_creates_directories(tmp_path: Path) -> None:
    """Test that writes create parent directories and persist across instances."""
    # Arrange
    path = tmp_path / "nested" / ".workview" / "state.json"
    store = JsonStateStore(path)

    # Act
    store.set_str_list("workview.hiddenProcesses", ["lint", "api"])
    store.set_bool("workview.showHiddenProcesses", True)

    # Assert
    reopened = JsonStateStore(path)
    assert reopened.get_str_list("workview.hiddenProcesses", []) == ["lint", "api"]
    assert reopened.get_bool("workview.showHiddenProcesses", False) is True
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "workview.hiddenProcesses": ["lint", "api"],
        "workview.showHiddenProcesses": True,
    }
    assert [p.name for p in path.parent.iterdir()] == ["state.json"]


def test_json_state_store_ignores_corrupt_file(tmp_path: Path) -> None:
    """Test that an unreadable state file behaves like an empty one and is repaired on write."""
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonStateStore(path)

    assert store.get_str_list("k", []) == []

    store.set_bool("k", False)

    assert json.loads(path.read_text(encoding="utf-8")) == {"k": False}


def test_json_state_store_ignores_invalid_utf8(tmp_path: Path) -> None:
    """Test that a state file that is not valid UTF-8 reads as empty."""
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe{bad")

    assert JsonStateStore(path).get_bool("k", False) is False


def test_json_state_store_path_is_directory(tmp_path: Path) -> None:
    """Test that a state path occupied by a directory yields defaults."""
    path = tmp_path / "state.json"
    path.mkdir()

    store = JsonStateStore(path)

    assert store.get_str_list("workview.hiddenWorktrees", []) == []
    assert store.get_bool("workview.showHiddenWorktrees", False) is False


def test_json_state_store_non_object_file(tmp_path: Path) -> None:
    """Test that a JSON document that is not an object is ignored."""
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonStateStore(path).get_raw("anything") is None


def test_typed_reads_reject_wrong_types() -> None:
    """Test that values of the wrong type yield the default."""
    store = InMemoryStateStore(values={"b": "yes", "l": ["ok", 3], "n": "x"})

    assert store.get_bool("b", False) is False
    assert store.get_str_list("l", ["d"]) == ["d"]
    assert store.get_str_list("n", []) == []


def test_in_memory_store_values_is_a_copy() -> None:
    """Test that the values property cannot be used to mutate the store."""
    store = InMemoryStateStore()
    store.set_bool("a", True)

    snapshot = store.values
    snapshot["a"] = False

    assert store.get_bool("a", False) is True
