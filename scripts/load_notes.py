"""Bulk-load notes from a JSON file into the note store."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import TypeAdapter

from note_store.config import Settings, configure_logging
from note_store.models.note import Note
from note_store.repositories.record_repository import RecordRepository
from note_store.store import create_document_store_from_settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load a JSON array of notes into the note store.")
    parser.add_argument("path", type=Path, help="Path to a JSON file holding a list of notes.")
    parser.add_argument("--database-url", help="SQLAlchemy URL (defaults to NOTE_STORE_DATABASE_URL).")
    parser.add_argument("--sqlite-path", type=Path, help="SQLite database file to write to.")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    configure_logging(logging.WARNING if args.quiet else logging.INFO)
    logger = logging.getLogger("load_notes")

    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.sqlite_path:
        overrides["sqlite_path"] = args.sqlite_path
    settings = Settings(**overrides)

    payload = json.loads(args.path.read_text(encoding="utf-8"))
    notes = TypeAdapter(list[Note]).validate_python(payload)

    store = create_document_store_from_settings(settings)
    repository = RecordRepository(store, Note, lenient_exists=settings.lenient_exists)
    result = repository.post(notes)

    logger.info("Loaded %d of %d note(s) from %s", len(result.accepted), len(notes), args.path)
    for key in result.accepted_ids:
        print(f"accepted {key}")
    for failure in result.failures:
        print(f"{failure.kind.value} {failure.key}: {failure}")

    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
