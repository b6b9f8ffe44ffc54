import os

os.environ.setdefault("STATUS_DASH_DATABASE_URL", "sqlite:///:memory:")

from contextlib import contextmanager  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from status_dash.db import init_db  # noqa: E402
from status_dash.metrics.base import RenderContext, StatisticsSnapshot  # noqa: E402
from status_dash.storage import SqlStorage  # noqa: E402


class CountingConnection:
    """Connection exposing set counts from a dict."""

    def __init__(self, sets):
        self.sets = sets

    def get_set_count(self, name):
        return self.sets.get(name, 0)


class BareConnection:
    """Connection without the set-count capability."""


class FakeStorage:
    def __init__(self, sets=None, capable=True, error=None):
        self.sets = sets or {}
        self.capable = capable
        self.error = error
        self.events = []

    @contextmanager
    def get_connection(self):
        self.events.append("open")
        try:
            if self.error is not None:
                raise self.error
            if self.capable:
                yield CountingConnection(self.sets)
            else:
                yield BareConnection()
        finally:
            self.events.append("close")


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def make_context(fake_storage):
    def _make(storage=None, **counts):
        return RenderContext(
            statistics=StatisticsSnapshot(**counts),
            storage=storage if storage is not None else fake_storage,
        )

    return _make


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    try:
        yield sessionmaker(engine, expire_on_commit=False)
    finally:
        engine.dispose()


@pytest.fixture
def sql_storage(session_factory):
    return SqlStorage(session_factory, server_timeout_seconds=60)


@pytest.fixture
def make_storage():
    return FakeStorage
