"""
Root conftest.py - Session-scoped fixtures shared across all tests.
"""

from pathlib import Path

import pytest
import yaml

TESTS_DIR = Path(__file__).parent.resolve()


@pytest.fixture(scope="session")
def tests_dir():
    """Path to tests directory."""
    return TESTS_DIR


@pytest.fixture()
def write_config(tmp_path):
    """Return a helper that dumps a mapping to a YAML file under tmp_path."""
    def _write(data, name="config.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path
    return _write
