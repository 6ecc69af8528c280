from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from storage.kv_store import InMemoryStore


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def clock():
    """Deterministic clock: one minute later on every call."""
    start = datetime(2024, 5, 23, 9, 0, tzinfo=timezone.utc)
    calls = {"n": 0}

    def _now():
        calls["n"] += 1
        return start + timedelta(minutes=calls["n"])

    return _now


class FailingStore(InMemoryStore):
    """In-memory store whose writes raise OSError while ``fail`` is set."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def set(self, key, value):
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)


@pytest.fixture
def failing_store():
    return FailingStore()
