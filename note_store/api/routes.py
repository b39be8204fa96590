"""HTTP routes for notes; request/response marshalling only."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response, status

from note_store.models.note import Note, decode_key
from note_store.repositories.record_repository import RecordRepository

router = APIRouter(prefix="/notes", tags=["notes"])
health_router = APIRouter(tags=["health"])


def _repository(request: Request) -> RecordRepository[Note]:
    return request.app.state.repository


@health_router.get("/healthz")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("")
def get_notes(
    request: Request,
    encodedurl: str | None = None,
    field: str | None = None,
    value: str = "",
) -> Note | list[Note]:
    """Look a note up by its encoded URL, or list notes where ``field == value``."""
    repository = _repository(request)
    if encodedurl is not None:
        try:
            decode_key(encodedurl)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return repository.get_by_id(encodedurl)
    if field is not None:
        return repository.get(field, value)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="url parameter is missing in URI",
    )


@router.post("")
def post_notes(request: Request, notes: list[Note]) -> list[Note]:
    result = _repository(request).post(notes)
    result.raise_for_failures()
    return list(result.accepted)


@router.put("")
def put_note(request: Request, note: Note) -> Note:
    return _repository(request).put(note)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(request: Request, key: str) -> Response:
    _repository(request).delete(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["health_router", "router"]
