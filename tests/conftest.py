"""Pytest fixtures for bfmemo tests.

Provides:
- A real source file named with a fake-reader identifier
- A cache root directory
- A reader that counts how often the expensive initialization runs
"""

from pathlib import Path

import pytest

from memo_helpers import TEST_FILE, CountingFakeReader


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data" / "run1"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def source(source_dir: Path) -> str:
    """Absolute path of an existing (empty) fake source file."""
    path = source_dir / TEST_FILE
    path.touch()
    return str(path)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    d = tmp_path / "cache"
    d.mkdir()
    return d


@pytest.fixture
def reader() -> CountingFakeReader:
    return CountingFakeReader()


@pytest.fixture(autouse=True)
def _clean_memo_env(monkeypatch):
    """Keep the caller's BFMEMO_* settings out of the tests."""
    for name in ("BFMEMO_DIR", "BFMEMO_IN_PLACE", "BFMEMO_MIN_ELAPSED_MS"):
        monkeypatch.delenv(name, raising=False)
