"""Shared pytest fixtures for USACO standings tests."""

from pathlib import Path

import pytest


@pytest.fixture
def test_data_dir() -> Path:
    """Returns the path to the test data directory."""
    return Path(__file__).parent / "data"


@pytest.fixture
def results_html(test_data_dir: Path) -> str:
    """A US Open 2024 Platinum results page."""
    return (test_data_dir / "open24_platinum_results.html").read_text(encoding="utf-8")


@pytest.fixture
def finalists_html(test_data_dir: Path) -> str:
    """The 2023-24 finalist announcement page."""
    return (test_data_dir / "finalists24.html").read_text(encoding="utf-8")


@pytest.fixture
def history_html(test_data_dir: Path) -> str:
    """The combined IOI/EGOI history page."""
    return (test_data_dir / "history.html").read_text(encoding="utf-8")


@pytest.fixture
def temp_json_file(tmp_path: Path) -> Path:
    """Provides a temporary JSON file path for testing storage."""
    return tmp_path / "usaco_data.json"
