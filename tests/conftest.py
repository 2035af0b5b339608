"""Shared test helpers."""

from pathlib import Path

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    """Read a fixture file relative to tests/fixtures/."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")
