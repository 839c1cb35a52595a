"""Pytest configuration helpers.

This conftest ensures ``backend/`` is on ``sys.path`` so tests can import
the ``soragen`` package without installing it, and provides the shared
fixtures: in-memory storage and a fake remote generation service.
"""
import os
import sys

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from soragen.config import Settings  # noqa: E402
from soragen.credentials import CredentialStore  # noqa: E402
from soragen.service import GenerationService  # noqa: E402
from soragen.session import SessionStore  # noqa: E402
from soragen.storage import MemoryKeyValueStore  # noqa: E402

from helpers import BASE_URL, FakeRemote  # noqa: E402



@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def credentials(store):
    return CredentialStore(store, "x_api_key")


@pytest.fixture
def session(store):
    return SessionStore(store, "current_task_id")


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def http_client(remote):
    return httpx.AsyncClient(transport=httpx.MockTransport(remote.handler))


@pytest.fixture
def settings():
    return Settings(
        API_BASE_URL=BASE_URL,
        STORAGE_BACKEND="memory",
        POLL_INTERVAL=100.0,
        NOTIFY_HOOK="",
    )


@pytest.fixture
def make_service(store, http_client, settings):
    """Build a GenerationService on the shared store, with a chosen poll interval."""

    def _make(interval: float = 100.0) -> GenerationService:
        cfg = settings.model_copy(update={"POLL_INTERVAL": interval})
        return GenerationService.from_settings(cfg, store=store, http_client=http_client)

    return _make
