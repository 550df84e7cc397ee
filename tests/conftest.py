"""
Shared test fixtures for hookscan tests.
"""

import json
from pathlib import Path

import pytest

from hookscan.core.config import Config, reset_logging


@pytest.fixture(autouse=True)
def _no_logging():
    """Each test starts and ends with logging unconfigured."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def heuristic_only():
    """Config with the syntax strategy switched off."""
    return Config(syntax=False)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep user, project and env config files out of the test."""
    monkeypatch.setattr("hookscan.core.config.USER_CONFIG", tmp_path / "no-user-config")
    monkeypatch.delenv("HOOKSCAN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_json(tmp_path):
    """Factory writing a JSON document to a file under tmp_path."""

    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def hooks_dir(tmp_path):
    """Factory creating a hooks directory populated with files."""

    def _make(files: dict[str, str], name: str = "hooks") -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for filename, content in files.items():
            (directory / filename).write_text(content)
        return directory

    return _make
