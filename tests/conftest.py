"""Shared fixtures."""

import logging
import sqlite3

import pytest

from hitori.common.debug import reset_debug_cache
from hitori.store import PostStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config, data and debug state inside the test's tmp dir."""
    monkeypatch.setenv("HITORI_CONFIG", str(tmp_path / "config" / "config.yaml"))
    monkeypatch.setenv("HITORI_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("HITORI_DEBUG", raising=False)
    reset_debug_cache()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    reset_debug_cache()
    # the CLI reconfigures root logging; undo it
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store" / "hitori.db"


@pytest.fixture
def store(db_path):
    """Store in per-call mode over a file database."""
    return PostStore(db_path)


@pytest.fixture
def memory_store():
    """Store wrapping an in-memory connection."""
    conn = sqlite3.connect(":memory:")
    yield PostStore.from_connection(conn)
    conn.close()
