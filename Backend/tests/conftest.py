import json
from collections.abc import AsyncGenerator
from datetime import date
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from studytimer.main import app
from studytimer.services.course_service import CourseClient
from studytimer.services.engine import StudySessionEngine
from studytimer.services.notification_service import NotificationClient
from studytimer.services.store_service import PersistentStore
from studytimer.services.ui_feed import UIFeed

TODAY = date(2026, 3, 10)


class FakeStore(PersistentStore):
    """In-memory store. Values round-trip through JSON like the real one."""

    def __init__(self, initial: dict | None = None):
        self._data: dict[str, str] = {}
        self.saves = 0
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    def load(self, key: str):
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def save(self, key: str, value) -> None:
        self._data[key] = json.dumps(value, default=str)
        self.saves += 1


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifications() -> AsyncMock:
    mock = AsyncMock(spec=NotificationClient)
    mock.create = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def courses() -> AsyncMock:
    return AsyncMock(spec=CourseClient)


@pytest.fixture
def feed() -> UIFeed:
    return UIFeed()


@pytest.fixture
def engine(store, notifications, courses, feed) -> StudySessionEngine:
    return StudySessionEngine(store, notifications, courses, feed, clock=lambda: TODAY)


@pytest.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    app.state.engine = engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await engine.runner.drain()
    del app.state.engine


def notification_titles(notifications: AsyncMock) -> list[str]:
    return [call.args[0] for call in notifications.create.call_args_list]
