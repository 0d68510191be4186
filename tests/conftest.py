# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session

from taskboard.client.storage import LocalTaskStorage
from taskboard.client.task_cache import TaskCache
from taskboard.db.config import create_db_engine
from taskboard.db.init import init_db
from taskboard.main import app
from taskboard.routers.tasks import get_task_repository
from taskboard.services.task_repository import TaskRepository

from .fakes import FakeClock, RecordingTransport

# Monday; every date-range test is anchored here
TODAY = date(2026, 10, 19)

API_BASE_URL = "http://testserver/api"


@pytest.fixture()
def engine() -> Iterator[Engine]:
    """Fresh in-memory SQLite database with the tasks table."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def repository(session: Session, clock: FakeClock) -> TaskRepository:
    return TaskRepository(session, clock=clock)


@pytest.fixture()
def api(engine: Engine, clock: FakeClock) -> Iterator[None]:
    """
    Route the app's repository dependency to the test database.

    Each request still gets its own session, as in production.
    """

    def override_repository() -> Iterator[TaskRepository]:
        with Session(engine) as session:
            yield TaskRepository(session, clock=clock)

    app.dependency_overrides[get_task_repository] = override_repository
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(api: None) -> TestClient:
    # Not used as a context manager: lifespan would initialise the default database
    return TestClient(app)


@pytest.fixture()
def storage(tmp_path: Path) -> LocalTaskStorage:
    return LocalTaskStorage(tmp_path / "taskboard_cache.json")


@pytest.fixture()
def recorder(api: None) -> RecordingTransport:
    return RecordingTransport(httpx.ASGITransport(app=app))


@pytest.fixture()
def make_cache(storage: LocalTaskStorage, recorder: RecordingTransport) -> Callable[..., TaskCache]:
    """Factory for caches talking to the in-process app (or a given transport)."""

    def factory(transport: httpx.AsyncBaseTransport | None = None) -> TaskCache:
        return TaskCache(
            base_url=API_BASE_URL,
            storage=storage,
            timeout=5.0,
            transport=transport or recorder,
        )

    return factory
