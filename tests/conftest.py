from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import pytest
from sqlalchemy.engine import Engine

from note_store.db.engine import create_engine, create_session_factory
from note_store.db.schema import Base, DbDocument, create_all
from note_store.models.note import Note
from note_store.repositories.record_repository import RecordRepository
from note_store.store import DocumentStoreError, SqlDocumentStore, create_document_store


@pytest.fixture(scope="session")
def postgres_url() -> str | None:
    """Return the Postgres test URL if provided via env."""
    return os.getenv("POSTGRES_TEST_URL") or os.getenv("DATABASE_URL")


@pytest.fixture
def engine(postgres_url: str | None) -> Iterator[Engine]:
    """Yield an engine targeting Postgres when configured; otherwise SQLite in-memory."""
    engine = create_engine(postgres_url) if postgres_url else create_engine()
    create_all(engine)
    try:
        yield engine
    finally:
        with engine.begin() as connection:
            if engine.dialect.name == "sqlite":
                Base.metadata.drop_all(bind=connection)
            else:
                connection.execute(DbDocument.__table__.delete())


@pytest.fixture
def session_factory(engine: Engine):
    return create_session_factory(engine)


@pytest.fixture
def document_store(session_factory) -> SqlDocumentStore:
    return create_document_store(session_factory)


class SteppingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def repository(document_store, clock) -> RecordRepository[Note]:
    return RecordRepository(document_store, Note, clock=clock)


class RecordingStore:
    """Document store wrapper that logs calls and can inject failures."""

    def __init__(self, inner: SqlDocumentStore):
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self.failing: set[tuple[str, str | None]] = set()

    def fail(self, operation: str, key: str | None = None) -> None:
        """Make ``operation`` raise for ``key`` (or for every key when ``None``)."""
        self.failing.add((operation, key))

    def _record(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if (operation, key) in self.failing or (operation, None) in self.failing:
            raise DocumentStoreError(f"injected {operation} failure for {key}")

    def get(self, collection: str, key: str):
        self._record("get", key)
        return self.inner.get(collection, key)

    def create(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        self._record("create", key)
        self.inner.create(collection, key, document)

    def set(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        self._record("set", key)
        self.inner.set(collection, key, document)

    def delete(self, collection: str, key: str) -> None:
        self._record("delete", key)
        self.inner.delete(collection, key)

    def query_equal(self, collection: str, field: str, value: Any):
        self._record("query_equal", field)
        return self.inner.query_equal(collection, field, value)


@pytest.fixture
def recording_store(document_store) -> RecordingStore:
    return RecordingStore(document_store)


@pytest.fixture
def recording_repository(recording_store, clock) -> RecordRepository[Note]:
    return RecordRepository(recording_store, Note, clock=clock)


@pytest.fixture
def note_factory() -> Callable[..., Note]:
    counter = iter(range(1, 10_000))

    def _factory(*, url: str | None = None, **fields: Any) -> Note:
        if url is None:
            url = f"https://example.com/articles/{next(counter)}"
        return Note(url=url, **fields)

    return _factory
