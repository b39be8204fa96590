"""Factory helpers for constructing the document store."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from note_store.config import Settings
from note_store.db.engine import create_engine, create_session_factory
from note_store.db.schema import create_all

from .sql_document_store import SqlDocumentStore


def create_document_store(session_factory: sessionmaker[Session]) -> SqlDocumentStore:
    """Build a document store over the given session factory."""
    return SqlDocumentStore(session_factory)


def create_document_store_from_settings(settings: Settings) -> SqlDocumentStore:
    """Create the engine described by ``settings``, ensure the schema and return a store."""
    engine = create_engine(
        settings.database_url,
        sqlite_path=settings.sqlite_path,
        echo=settings.echo_sql,
    )
    create_all(engine)
    return create_document_store(create_session_factory(engine))


__all__ = ["create_document_store", "create_document_store_from_settings"]
