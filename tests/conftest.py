"""
Pytest configuration and fixtures for charforge-data tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add src directory to Python path to allow importing charforge_data
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def raw_dir(tmp_path) -> Path:
    path = tmp_path / "_raw"
    path.mkdir()
    return path


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def write_raw(raw_dir):
    """Write one raw 5etools JSON file under the raw directory."""

    def _write(relative: str, data: dict) -> Path:
        path = raw_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
