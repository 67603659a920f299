"""Map ClipDesk errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clipdesk.error_codes import ErrorCode
from clipdesk.exceptions import (
    ClipDeskError,
    ConfigurationError,
    InvalidInputError,
    NotFoundError,
    ProviderError,
    SizeLimitExceededError,
    TransformError,
)

logger = logging.getLogger("clipdesk.api")


class UploadTooLargeError(SizeLimitExceededError):
    """Raw upload body exceeded `upload_max_bytes`."""


_STATUS: tuple[tuple[type[ClipDeskError], int], ...] = (
    (NotFoundError, 404),
    (UploadTooLargeError, 413),
    (SizeLimitExceededError, 400),
    (InvalidInputError, 400),
    (TransformError, 500),
    (ProviderError, 502),
    (ConfigurationError, 503),
)


def status_for(exc: ClipDeskError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 500


def _code(value: ErrorCode | str) -> str:
    return value.value if isinstance(value, ErrorCode) else str(value)


async def _clipdesk_error_handler(request: Request, exc: ClipDeskError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"error": str(exc), "code": _code(exc.error_code)},
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x not in {"body", "query", "path"})
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=400,
        content={
            "error": "; ".join(parts) or "invalid request",
            "code": ErrorCode.INVALID_INPUT.value,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClipDeskError, _clipdesk_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
