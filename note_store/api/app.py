"""FastAPI application factory for the note service."""

from __future__ import annotations

from fastapi import FastAPI

from note_store import __version__
from note_store.api.error_handlers import register_error_handlers
from note_store.api.routes import health_router, router
from note_store.config import Settings, configure_logging, get_settings
from note_store.models.note import Note
from note_store.repositories.record_repository import RecordRepository
from note_store.store import DocumentStore, create_document_store_from_settings


def create_app(settings: Settings | None = None, *, store: DocumentStore | None = None) -> FastAPI:
    """Build the app; ``store`` overrides the store described by ``settings``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if store is None:
        store = create_document_store_from_settings(settings)

    app = FastAPI(
        title="Note Store API",
        version=__version__,
        description="CRUD service for research notes keyed by page URL",
    )
    app.state.repository = RecordRepository(store, Note, lenient_exists=settings.lenient_exists)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(router)
    return app


__all__ = ["create_app"]
