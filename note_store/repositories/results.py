"""Result types returned by batch repository operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from note_store.models.record import Record
from note_store.repositories.errors import BatchWriteError, ErrorKind, RecordStoreError


@dataclass(frozen=True, slots=True)
class PostResult:
    """Outcome of a batch create: persisted records and classified failures, both in input order."""

    accepted: tuple[Record, ...] = field(default_factory=tuple)
    failures: tuple[RecordStoreError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def accepted_ids(self) -> list[str]:
        return [record.record_id() for record in self.accepted]

    @property
    def failed_ids(self) -> list[str]:
        return [failure.key for failure in self.failures]

    def failures_of(self, kind: ErrorKind) -> list[RecordStoreError]:
        return [failure for failure in self.failures if failure.kind is kind]

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchWriteError(self.failures)


__all__ = ["PostResult"]
