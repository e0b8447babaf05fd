"""Pytest fixtures: in-memory Event store injected in place of MongoDB."""
import asyncio
import copy
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from backoffice.config import settings
from backoffice.main import app, get_event_store

EVENT_ID = "64b7f0c2a1b2c3d4e5f60718"
OTHER_EVENT_ID = "64b7f0c2a1b2c3d4e5f60719"


class InMemoryEventStore:
    """EventStore double. Match + merge run with no await in between, so
    each merge is atomic with respect to other tasks on the loop."""

    def __init__(self, events: Optional[List[dict]] = None):
        self.events: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        for ev in events or []:
            self.events[ev["eventId"]] = copy.deepcopy(ev)

    async def merge(self, event_id, patch):
        self.calls.append((event_id, copy.deepcopy(patch)))
        await asyncio.sleep(0)
        doc = self.events.get(event_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(patch))
        return copy.deepcopy(doc)


class FailingEventStore:
    def __init__(self, exc: BaseException):
        self.exc = exc
        self.calls = 0

    async def merge(self, event_id, patch):
        self.calls += 1
        raise self.exc


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    """Known settings regardless of the local .env."""
    monkeypatch.setattr(settings, "API_TOKEN", None)
    monkeypatch.setattr(settings, "VALIDATE_EVENT_ID_FORMAT", True)


@pytest.fixture
def launch_event():
    return {"eventId": EVENT_ID, "name": "Launch", "capacity": 10}


@pytest.fixture
def store(launch_event):
    return InMemoryEventStore([launch_event])


def make_client(event_store) -> TestClient:
    app.dependency_overrides[get_event_store] = lambda: event_store
    return TestClient(app)


@pytest.fixture
def client(store):
    """TestClient wired to the in-memory store (startup hooks not run)."""
    yield make_client(store)
    app.dependency_overrides.clear()


@pytest.fixture
def client_factory():
    yield make_client
    app.dependency_overrides.clear()
