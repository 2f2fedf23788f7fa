"""Shared test fixtures."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from monotrack.app import app
from monotrack.documents.store import DocumentStore


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> DocumentStore:
    """A fresh store with sequential ids and a ticking clock."""
    counter = itertools.count(1)
    return DocumentStore(new_id=lambda: f"id{next(counter)}", clock=clock)


@pytest.fixture
def client():
    """TestClient with the lifespan run, so app.state.store exists."""
    with TestClient(app) as test_client:
        yield test_client
