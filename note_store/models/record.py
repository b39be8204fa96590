"""Base model for records persisted through the record repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """Immutable unit of storage with a derived identity and store-managed timestamps.

    Subclasses set ``collection_name`` and implement :meth:`record_id`, which must
    be a pure function of the record's business fields.
    """

    collection_name: ClassVar[str]

    created_date: datetime | None = None
    last_update: datetime | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    def record_id(self) -> str:
        raise NotImplementedError

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Record:
        return cls.model_validate(dict(document))


__all__ = ["Record"]
