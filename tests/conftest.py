"""Shared fixtures for vgen tests."""

from pathlib import Path
from types import SimpleNamespace

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Path to the fixture source files."""
    return FIXTURES_DIR


@pytest.fixture
def user_source(tmp_path):
    """Copy of the sample source file in a scratch directory."""
    source = tmp_path / "user.py"
    source.write_text((FIXTURES_DIR / "user.py").read_text(encoding="utf-8"), encoding="utf-8")
    return source


@pytest.fixture
def load_module():
    """Execute generated module text and return its namespace."""
    def _load(text: str) -> dict:
        namespace: dict = {}
        exec(compile(text, "<generated>", "exec"), namespace)
        return namespace
    return _load


@pytest.fixture
def valid_user():
    """A User value that passes every rule of the sample structure."""
    return SimpleNamespace(
        name="Alice",
        email="alice@example.com",
        age=30,
        city="Tokyo",
        status="active",
    )
