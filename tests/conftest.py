"""Shared fixtures: temporary SQLite database, fake completion client, API test client."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from dependency_injector import providers
from fastapi.testclient import TestClient

from api.shared.entities.registry import BaseEntity
from infra.resources import DatabaseResource


class FakeCompletion:
    """Stands in for the OpenAI client; records every request."""

    def __init__(
        self,
        response: Any = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.response = response if response is not None else {"output_text": "Hi! How can I help?"}
        self.error = error
        self.delay = delay
        self.is_configured = True
        self.calls: List[List[Dict[str, Any]]] = []

    async def init(self):
        return self

    async def shutdown(self):
        return self

    async def complete(self, messages):
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


def _sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}"


@pytest_asyncio.fixture
async def db_resource(tmp_path):
    """Initialised database with the schema created, disposed after the test."""
    resource = DatabaseResource(_sqlite_url(tmp_path))
    await resource.init()
    await resource.create_schema(BaseEntity)
    yield resource
    await resource.shutdown()


@pytest_asyncio.fixture
async def db_session(db_resource):
    session = db_resource.get_session()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def app(tmp_path, completion):
    """The API with its database and completion client swapped for test doubles."""
    from api.main import app as _app

    infrastructure = _app.container.infrastructure
    infrastructure.database.override(providers.Object(DatabaseResource(_sqlite_url(tmp_path))))
    infrastructure.completion_client.override(providers.Object(completion))
    yield _app
    infrastructure.database.reset_override()
    infrastructure.completion_client.reset_override()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
