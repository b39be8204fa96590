"""Document store contract and implementations."""

from .document_store import Document, DocumentExistsError, DocumentStore, DocumentStoreError
from .factory import create_document_store, create_document_store_from_settings
from .sql_document_store import SqlDocumentStore

__all__ = [
    "Document",
    "DocumentExistsError",
    "DocumentStore",
    "DocumentStoreError",
    "SqlDocumentStore",
    "create_document_store",
    "create_document_store_from_settings",
]
