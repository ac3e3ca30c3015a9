"""Shared pytest fixtures for all tests."""

import json
from pathlib import Path
from typing import Generator

import pytest

from cli.config import Config
from registry.database import init_database


@pytest.fixture
def test_db(tmp_path, monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary ledger database for each test.
    """
    db_path = tmp_path / "ledger.db"
    monkeypatch.setattr("registry.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("registry.config.DATABASE_PATH", str(db_path))
    init_database()
    yield db_path


@pytest.fixture
def file_payload():
    """
    Transient payload for the create operation.
    """
    return {
        "name": "f1",
        "contentHash": "abc123",
        "timestamp": 100,
        "owner": "orgA",
        "folio": 7,
    }


@pytest.fixture
def transient_for():
    """
    Build a transient map with one JSON-encoded payload.
    """
    def _build(key: str, payload) -> dict:
        return {key: json.dumps(payload).encode("utf-8")}
    return _build


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .folio directory
    """
    config_dir = tmp_path / '.folio'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')
