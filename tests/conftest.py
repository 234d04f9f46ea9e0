"""
Shared pytest fixtures.

Every test gets a fresh StorageContext whose six stores are private
in-memory SQLite databases, so nothing touches the data directory.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from memoria.core.config import Settings
from memoria.db.base import StorageContext, get_storage
from memoria.main import app
from memoria.repositories.records import MoodRecord
from memoria.services.context import Services


@pytest.fixture()
def test_settings():
    return Settings(DATABASE_URL_TEMPLATE="sqlite://", _env_file=None)


@pytest.fixture()
def storage(test_settings):
    ctx = StorageContext(test_settings)
    yield ctx
    ctx.dispose()


@pytest.fixture()
def services(storage):
    return Services.build(storage)


@pytest.fixture()
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_mood(**overrides) -> MoodRecord:
    fields = {
        "rating": 4,
        "emotion": "calm",
        "entry_time": datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return MoodRecord(**fields)
