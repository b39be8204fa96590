"""Generic CRUD access layer translating typed records into document store calls."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, TypeVar

from pydantic import ValidationError

from note_store.context import OperationCancelledError, OperationContext
from note_store.models.record import Record
from note_store.repositories.errors import (
    AlreadyExistsError,
    EmptyInputError,
    GenericStoreError,
    NotFoundError,
    RecordStoreError,
)
from note_store.repositories.results import PostResult
from note_store.store.document_store import (
    Document,
    DocumentExistsError,
    DocumentStore,
    DocumentStoreError,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


class Existence(str, Enum):
    """Outcome of an existence check."""

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordRepository(Generic[RecordT]):
    """Stateless CRUD operations for one record type over an injected document store.

    Every operation accepts an optional :class:`OperationContext`; a cancelled or
    expired context surfaces as :class:`GenericStoreError`. Store failures never
    escape unclassified.

    ``lenient_exists`` restores the historical behaviour where any fetch failure
    during an existence check counts as "absent" (and so becomes ``NotFoundError``
    for put/delete) instead of a ``GenericStoreError``.
    """

    def __init__(
        self,
        store: DocumentStore,
        record_type: type[RecordT],
        *,
        clock: Callable[[], datetime] | None = None,
        lenient_exists: bool = False,
    ):
        self._store = store
        self._record_type = record_type
        self._collection = record_type.collection_name
        self._clock = clock or _utcnow
        self._lenient_exists = lenient_exists

    # ----------------------------------------------------------- Mutating ops
    def post(self, records: Iterable[RecordT], *, ctx: OperationContext | None = None) -> PostResult:
        """Create every record that is not already stored.

        All records are attempted in input order; failures are classified and
        collected rather than raised. Records written before a failure stay
        written.
        """
        accepted: list[RecordT] = []
        failures: list[RecordStoreError] = []

        for record in records:
            key = ""
            now = self._clock()
            stamped = record.model_copy(update={"created_date": now, "last_update": now})
            try:
                key = self._record_key(record)
                logger.debug("POST %s/%s", self._collection, key)
                if ctx is not None:
                    ctx.raise_if_done()
                self._store.create(self._collection, key, stamped.to_document())
            except EmptyInputError as exc:
                failures.append(exc)
            except DocumentExistsError:
                failures.append(AlreadyExistsError(key))
            except (DocumentStoreError, OperationCancelledError) as exc:
                failures.append(GenericStoreError(key, str(exc)))
            else:
                accepted.append(stamped)

        for failure in failures:
            logger.warning("POST %s failed: %s", self._collection, failure)

        return PostResult(accepted=tuple(accepted), failures=tuple(failures))

    def put(self, record: RecordT, *, ctx: OperationContext | None = None) -> RecordT:
        """Replace an existing record, refreshing ``last_update``.

        Identity and every other supplied field are kept as given. When the
        caller omits ``created_date`` the stored value is carried over.
        """
        key = self._record_key(record)

        existence, current = self._lookup(key, ctx=ctx)
        if existence is Existence.UNKNOWN:
            raise GenericStoreError(key, "could not determine whether the record exists")
        if existence is Existence.ABSENT:
            raise NotFoundError(key, "record does not exist to update")

        update: dict[str, Any] = {"last_update": self._clock()}
        if record.created_date is None and current is not None:
            update["created_date"] = current.get("created_date")
        updated = self._record_type.model_validate(
            {**record.model_dump(), **update}
        )

        self._ensure_active(ctx, key)
        try:
            self._store.set(self._collection, key, updated.to_document())
        except DocumentStoreError as exc:
            raise GenericStoreError(key, str(exc)) from exc
        return updated

    def delete(self, key: str, *, ctx: OperationContext | None = None) -> None:
        """Remove the record stored at ``key``."""
        if not key:
            raise EmptyInputError("id", "record id is missing")

        existence = self._exists(key, ctx=ctx)
        if existence is Existence.UNKNOWN:
            raise GenericStoreError(key, "could not determine whether the record exists")
        if existence is Existence.ABSENT:
            raise NotFoundError(key)

        self._ensure_active(ctx, key)
        try:
            self._store.delete(self._collection, key)
        except DocumentStoreError as exc:
            raise GenericStoreError(key, str(exc)) from exc

    # ---------------------------------------------------------------- Queries
    def get_by_id(self, key: str, *, ctx: OperationContext | None = None) -> RecordT:
        """Fetch and decode the record stored at ``key``."""
        if not key:
            raise EmptyInputError("id", "id missing, provide id")

        self._ensure_active(ctx, key)
        try:
            document = self._store.get(self._collection, key)
        except DocumentStoreError as exc:
            raise GenericStoreError(key, str(exc)) from exc
        if document is None:
            raise NotFoundError(key)
        return self._decode(document, key)

    def get(self, field: str, value: Any, *, ctx: OperationContext | None = None) -> list[RecordT]:
        """Return every record whose ``field`` equals ``value`` in store order."""
        return list(self.iter_get(field, value, ctx=ctx))

    def iter_get(
        self,
        field: str,
        value: Any,
        *,
        ctx: OperationContext | None = None,
    ) -> Iterator[RecordT]:
        """Lazily yield records matching ``field == value``.

        The field is validated immediately; the query runs on first iteration.
        Closing the iterator early releases the underlying cursor.
        """
        if not field:
            raise EmptyInputError("field", "field missing, provide field")
        return self._iter_matches(field, value, ctx)

    # ----------------------------------------------------------------- Helpers
    def _iter_matches(
        self,
        field: str,
        value: Any,
        ctx: OperationContext | None,
    ) -> Iterator[RecordT]:
        label = f"{field}={value!r}"
        self._ensure_active(ctx, label)
        try:
            documents = self._store.query_equal(self._collection, field, value)
            try:
                for document in documents:
                    self._ensure_active(ctx, label)
                    yield self._decode(document, label)
            finally:
                close = getattr(documents, "close", None)
                if close is not None:
                    close()
        except DocumentStoreError as exc:
            raise GenericStoreError(label, str(exc)) from exc

    @staticmethod
    def _record_key(record: Record) -> str:
        """Derive the identity key; a missing or underivable key is a caller error."""
        try:
            key = record.record_id()
        except ValueError as exc:
            raise EmptyInputError("id", f"record key could not be derived: {exc}") from exc
        if not key:
            raise EmptyInputError("id", "record key fields are missing")
        return key

    def _exists(self, key: str, *, ctx: OperationContext | None = None) -> Existence:
        existence, _ = self._lookup(key, ctx=ctx)
        return existence

    def _lookup(
        self,
        key: str,
        *,
        ctx: OperationContext | None = None,
    ) -> tuple[Existence, Document | None]:
        self._ensure_active(ctx, key)
        try:
            document = self._store.get(self._collection, key)
        except DocumentStoreError as exc:
            if self._lenient_exists:
                logger.debug("Existence check for %s/%s treated as absent: %s", self._collection, key, exc)
                return Existence.ABSENT, None
            logger.warning("Existence check for %s/%s failed: %s", self._collection, key, exc)
            return Existence.UNKNOWN, None
        if document is None:
            return Existence.ABSENT, None
        return Existence.PRESENT, document

    def _decode(self, document: Mapping[str, Any], key: str) -> RecordT:
        try:
            return self._record_type.from_document(document)
        except ValidationError as exc:
            raise GenericStoreError(key, f"stored document could not be decoded: {exc}") from exc

    @staticmethod
    def _ensure_active(ctx: OperationContext | None, key: str) -> None:
        if ctx is None:
            return
        try:
            ctx.raise_if_done()
        except OperationCancelledError as exc:
            raise GenericStoreError(key, str(exc)) from exc


__all__ = ["Existence", "RecordRepository"]
