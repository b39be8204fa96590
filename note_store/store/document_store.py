"""Contract for the schemaless document store behind the record repository."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Protocol, runtime_checkable

Document = dict[str, Any]


class DocumentStoreError(RuntimeError):
    """Raised when the underlying store fails to serve a request."""


class DocumentExistsError(DocumentStoreError):
    """Raised when a create targets a key that is already occupied."""


@runtime_checkable
class DocumentStore(Protocol):
    """Key/document database addressed by collection name and document key.

    Implementations raise :class:`DocumentStoreError` (or a subclass) for every
    failure; ``get`` reports absence by returning ``None`` rather than raising.
    """

    def get(self, collection: str, key: str) -> Document | None:
        """Return the document stored at ``key`` or ``None`` when absent."""
        ...

    def create(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        """Insert ``document`` at ``key``; raise :class:`DocumentExistsError` if occupied."""
        ...

    def set(self, collection: str, key: str, document: Mapping[str, Any]) -> None:
        """Overwrite (or create) the full document stored at ``key``."""
        ...

    def delete(self, collection: str, key: str) -> None:
        """Remove the document at ``key``; absent keys are a no-op."""
        ...

    def query_equal(self, collection: str, field: str, value: Any) -> Iterator[Document]:
        """Lazily yield documents whose ``field`` equals ``value``, ordered by key."""
        ...


__all__ = ["Document", "DocumentExistsError", "DocumentStore", "DocumentStoreError"]
