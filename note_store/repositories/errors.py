"""Classified errors raised at the record repository boundary."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ErrorKind(str, Enum):
    """Small taxonomy callers use to decide how to react to a failure."""

    GENERIC = "generic"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    EMPTY_INPUT = "empty_input"


class RecordStoreError(RuntimeError):
    """Base class for repository-level errors."""

    kind: ErrorKind = ErrorKind.GENERIC
    summary: str = "record store error"

    def __init__(self, key: str = "", detail: str | None = None):
        self.key = key
        self.detail = detail
        message = f"{self.summary}: {key}" if key else self.summary
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class GenericStoreError(RecordStoreError):
    """Raised for unclassified store, transport and decoding failures."""


class AlreadyExistsError(RecordStoreError):
    """Raised when a create collides with an existing key."""

    kind = ErrorKind.ALREADY_EXISTS
    summary = "record already exists"


class NotFoundError(RecordStoreError):
    """Raised when an operation targets a key absent from the store."""

    kind = ErrorKind.NOT_FOUND
    summary = "record not found"


class EmptyInputError(RecordStoreError):
    """Raised when a required identifying field is missing from caller input."""

    kind = ErrorKind.EMPTY_INPUT
    summary = "required input is empty"


class BatchWriteError(RecordStoreError):
    """Aggregate of per-record failures from a batch write."""

    summary = "batch write failed"

    def __init__(self, failures: Sequence[RecordStoreError]):
        self.failures: tuple[RecordStoreError, ...] = tuple(failures)
        super().__init__(detail="; ".join(str(failure) for failure in self.failures))


__all__ = [
    "AlreadyExistsError",
    "BatchWriteError",
    "EmptyInputError",
    "ErrorKind",
    "GenericStoreError",
    "NotFoundError",
    "RecordStoreError",
]
