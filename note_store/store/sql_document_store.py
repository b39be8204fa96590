"""SQLAlchemy-backed implementation of the document store contract."""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from typing import Any, ContextManager, Iterator, Mapping

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from note_store.db.schema import DbDocument
from note_store.store.document_store import Document, DocumentExistsError, DocumentStoreError
from note_store.store.filters import build_equality_expression

logger = logging.getLogger(__name__)

QUERY_BATCH_SIZE = 100


def _shares_single_connection(session_factory: sessionmaker[Session]) -> bool:
    """True when every session is handed the same SQLite connection (in-memory engine)."""
    bind = session_factory.kw.get("bind")
    return (
        bind is not None
        and bind.dialect.name == "sqlite"
        and isinstance(bind.pool, StaticPool)
    )


class SqlDocumentStore:
    """Stores each document as a JSON payload keyed by ``(collection, key)``.

    When the engine shares one SQLite connection between threads, every call is
    serialised behind a lock and query results are read in full before they are
    yielded, so no transaction is left open on the shared connection.
    """

    def __init__(self, session_factory: sessionmaker[Session], *, batch_size: int = QUERY_BATCH_SIZE):
        self._session_factory = session_factory
        self._batch_size = batch_size
        self._lock = threading.RLock() if _shares_single_connection(session_factory) else None

    def _guard(self) -> ContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()

    def get(self, collection: str, key: str) -> Document | None:
        try:
            with self._guard(), self._session_factory() as session:
                row = session.get(DbDocument, (collection, key))
                if row is None:
                    return None
                return dict(row.data or {})
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"get {collection}/{key} failed: {exc}") from exc

    def create(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        with self._guard():
            try:
                with self._session_factory() as session:
                    session.add(DbDocument(collection=collection, key=key, data=dict(document)))
                    session.commit()
            except IntegrityError as exc:
                if self._occupied(collection, key):
                    raise DocumentExistsError(f"document already exists: {collection}/{key}") from exc
                raise DocumentStoreError(f"create {collection}/{key} failed: {exc}") from exc
            except SQLAlchemyError as exc:
                raise DocumentStoreError(f"create {collection}/{key} failed: {exc}") from exc

    def set(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        payload = {"collection": collection, "key": key, "data": dict(document)}
        try:
            with self._guard(), self._session_factory() as session:
                bind = session.get_bind()
                if bind is not None and bind.dialect.name == "postgresql":
                    stmt = pg_insert(DbDocument).values(payload)
                    session.execute(
                        stmt.on_conflict_do_update(
                            index_elements=[DbDocument.collection, DbDocument.key],
                            set_={"data": stmt.excluded.data},
                        )
                    )
                else:
                    session.merge(DbDocument(**payload))
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"set {collection}/{key} failed: {exc}") from exc

    def delete(self, collection: str, key: str) -> None:
        try:
            with self._guard(), self._session_factory() as session:
                session.execute(
                    delete(DbDocument).where(
                        DbDocument.collection == collection,
                        DbDocument.key == key,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"delete {collection}/{key} failed: {exc}") from exc

    def query_equal(self, collection: str, field: str, value: Any) -> Iterator[Document]:
        try:
            condition = build_equality_expression(DbDocument.data, field, value)
        except (TypeError, ValueError) as exc:
            raise DocumentStoreError(f"invalid filter {field!r}: {exc}") from exc

        stmt = (
            select(DbDocument.data)
            .where(DbDocument.collection == collection, condition)
            .order_by(DbDocument.key)
            .execution_options(yield_per=self._batch_size)
        )
        if self._lock is not None:
            return self._read_all(stmt, collection)
        return self._stream(stmt, collection)

    def _occupied(self, collection: str, key: str) -> bool:
        try:
            with self._session_factory() as session:
                return session.get(DbDocument, (collection, key)) is not None
        except SQLAlchemyError:
            logger.warning("Could not re-check %s/%s after a failed create", collection, key)
            return False

    def _stream(self, stmt, collection: str) -> Iterator[Document]:
        """Yield rows from ``stmt``; the session closes when the iterator is exhausted or closed."""
        try:
            with self._session_factory() as session:
                for data in session.scalars(stmt):
                    yield dict(data or {})
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"query on {collection} failed: {exc}") from exc

    def _read_all(self, stmt, collection: str) -> Iterator[Document]:
        """Run ``stmt`` to completion under the lock, then yield the buffered rows."""
        try:
            with self._guard(), self._session_factory() as session:
                rows = [dict(data or {}) for data in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"query on {collection} failed: {exc}") from exc
        yield from rows


__all__ = ["SqlDocumentStore"]
