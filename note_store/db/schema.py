"""SQLAlchemy declarative schema for the document store."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.sqltypes import JSON

JSON_TYPE = JSON().with_variant(JSONB, "postgresql")


class Base(DeclarativeBase):
    """Base class for SQLAlchemy declarative mappings."""


class DbDocument(Base):
    """ORM mapping for a schemaless document addressed by collection and key."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection", "collection"),
        # Postgres-specific GIN index for equality lookups (ignored by SQLite)
        Index(
            "ix_documents_data_gin",
            "data",
            postgresql_using="gin",
        ),
    )

    collection: Mapped[str] = mapped_column(String(128), primary_key=True)
    key: Mapped[str] = mapped_column(String(1500), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON_TYPE, default=dict, nullable=False)
    created_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_edited_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


def create_all(engine: Engine) -> None:
    """Create database tables for the schema."""
    Base.metadata.create_all(engine, checkfirst=True)


__all__ = ["Base", "DbDocument", "create_all"]
