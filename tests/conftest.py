"""Shared fixtures: a controllable clock, an in-memory snapshot backend, apps on tmp dirs."""
import os

import pytest
from fastapi.testclient import TestClient

from wordbin.config import Settings
from wordbin.database import PasteStore
from wordbin.errors import PersistenceWriteFailed
from wordbin.files import FilePayloadStore
from wordbin.main import create_app

START = 1_700_000_000


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class MemoryStorage:
    """Snapshot backend that keeps the last saved collection in memory."""

    def __init__(self, pastes=None):
        self.saved = list(pastes or [])
        self.saves = 0
        self.fail = False

    def save(self, pastes):
        if self.fail:
            raise PersistenceWriteFailed("disk full")
        self.saved = list(pastes)
        self.saves += 1

    def load(self):
        return list(self.saved)

    def ping(self):
        return not self.fail


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def files(tmp_path):
    return FilePayloadStore(str(tmp_path / "files"))


@pytest.fixture
def store(storage, files, clock):
    return PasteStore(storage, files=files, clock=clock)


@pytest.fixture
def settings(tmp_path):
    s = Settings()
    s.DATA_DIR = str(tmp_path / "pasta_data")
    s.SNAPSHOT_FILE = ""
    s.PERSISTENCE_BACKEND = "file"
    s.ID_BITS = 16
    s.UNIQUE_IDS = True
    s.SWEEP_INTERVAL_SECONDS = 0
    os.makedirs(s.DATA_DIR, exist_ok=True)
    return s


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
