"""Exception handlers translating repository errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from note_store.repositories.errors import BatchWriteError, ErrorKind, RecordStoreError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.EMPTY_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.GENERIC: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register the repository, validation and catch-all handlers on ``app``."""

    @app.exception_handler(BatchWriteError)
    async def batch_write_error_handler(request: Request, exc: BatchWriteError):
        logger.error("Batch write on %s rejected %d record(s)", request.url.path, len(exc.failures))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    **_error_body(exc),
                    "failures": [_error_body(failure) for failure in exc.failures],
                },
            },
        )

    @app.exception_handler(RecordStoreError)
    async def record_store_error_handler(request: Request, exc: RecordStoreError):
        status_code = STATUS_BY_KIND[exc.kind]
        if status_code >= 500:
            logger.error("Store error on %s: %s", request.url.path, exc)
        else:
            logger.info("Rejected request on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": _error_body(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "validation_error",
                    "message": "Invalid request data",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in error["loc"]),
                            "message": error["msg"],
                        }
                        for error in exc.errors()
                    ],
                },
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "internal_error", "message": "An unexpected error occurred"}},
        )


def _error_body(exc: RecordStoreError) -> dict[str, str]:
    return {"code": exc.kind.value, "message": str(exc), "key": exc.key}


__all__ = ["STATUS_BY_KIND", "register_error_handlers"]
