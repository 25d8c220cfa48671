"""Tests for the project metadata in pyproject.toml."""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

REPO_ROOT = Path(__file__).parent.parent


def _project_table():
    with open(REPO_ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)["project"]


def test_no_readme_metadata():
    """The project ships no README, so no long description is declared."""
    assert "readme" not in _project_table()


def test_runtime_dependencies_declared():
    names = {dep.split(">")[0].split("=")[0].strip().lower() for dep in _project_table()["dependencies"]}

    assert {"taichi", "numpy", "pillow"} <= names
