import logging
from typing import Type

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import (
    FullNotFoundError,
    IDNotFoundError,
    InvalidRecordError,
    RecordStoreError,
    ShortNotFoundError,
    UnavailableShortError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"

STATUS_CODES = {
    InvalidRecordError: status.HTTP_400_BAD_REQUEST,
    UnavailableShortError: status.HTTP_409_CONFLICT,
    IDNotFoundError: status.HTTP_404_NOT_FOUND,
    ShortNotFoundError: status.HTTP_404_NOT_FOUND,
    FullNotFoundError: status.HTTP_404_NOT_FOUND,
}


def to_http_error(exc: RecordStoreError, *recognized: Type[RecordStoreError]) -> HTTPException:
    """Translate a store error into the response an operation sends for it.

    Only the kinds an operation lists in `recognized` get their own status;
    every other kind is a 500 carrying the error's message.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if type(exc) in recognized:
        status_code = STATUS_CODES[type(exc)]
    else:
        logger.error(f"Unhandled record store error: {exc!r}")
    return HTTPException(status_code=status_code, detail=str(exc))


def binding_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        # Malformed JSON: surface the parser's own message.
        if err.get("type") == "json_invalid":
            return str(err.get("ctx", {}).get("error", err.get("msg")))
    return "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in errors
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": binding_error_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    # Anything the routers did not translate.
    app.add_exception_handler(Exception, unhandled_exception_handler)
