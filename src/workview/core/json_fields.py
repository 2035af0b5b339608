"""Lenient field accessors for JSON documents produced by external tools.

Each accessor returns a typed default instead of raising when a field is
missing or has the wrong type.
"""

from typing import Any


def as_str(value: Any, default: str = "") -> str:
    """Return value if it is a string, the decimal form of an int, else default."""
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return default


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    return default


def as_int(value: Any) -> int | None:
    """Return value if it is an int (bools excluded), else None."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return []


def as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}
