from __future__ import annotations

import pytest

from aws_hygiene.audit.db import SqliteStore
from aws_hygiene.audit.recorder import ViolationRecorder
from aws_hygiene.config import _load_settings_cached


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    _load_settings_cached.cache_clear()
    yield
    _load_settings_cached.cache_clear()


@pytest.fixture
def store(tmp_path):
    sqlite_store = SqliteStore(str(tmp_path / "audit.db"))
    yield sqlite_store
    sqlite_store.close()


@pytest.fixture
def recorder(store):
    return ViolationRecorder(store, max_retries=0, retry_backoff_seconds=0)
