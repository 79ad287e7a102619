"""Shared fixtures for CPAP tracker tests."""

import os

os.environ.setdefault("CPAP_STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from app.db.kv_store import MemoryKeyValueStore
from app.main import create_app
from app.schemas.models import UsageRecord


class FailingKeyValueStore:
    """Key-value layer whose reads and/or writes raise OSError."""

    def __init__(self, fail_get: bool = True, fail_put: bool = True):
        self.fail_get = fail_get
        self.fail_put = fail_put
        self.closed = False

    async def get(self, key):
        if self.fail_get:
            raise OSError("disk unavailable")
        return None

    async def put(self, key, value):
        if self.fail_put:
            raise OSError("disk full")

    async def close(self):
        self.closed = True


@pytest.fixture
def night_one():
    return UsageRecord(date="2024-01-01", time="22:00")


@pytest.fixture
def night_two():
    return UsageRecord(date="2024-01-02", time="23:15")


@pytest.fixture
def memory_kv():
    return MemoryKeyValueStore()


@pytest.fixture
def client(memory_kv):
    with TestClient(create_app(kv=memory_kv)) as c:
        yield c
