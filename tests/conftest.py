from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import main
from config import Settings
from database import JsonRecordStore

ADMIN_PASSWORD = "themomchef-test"


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def store(tmp_path):
    return JsonRecordStore(str(tmp_path / "data"))


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 10, 19, 10, 3, 0, 123000, tzinfo=timezone.utc))


@pytest.fixture
def client(store):
    main.app.dependency_overrides[main.get_store] = lambda: store
    main.app.dependency_overrides[main.get_settings] = lambda: Settings(
        data_dir=store.data_dir, admin_password=ADMIN_PASSWORD
    )
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
