"""Exception handlers that render errors in the response envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from codestruct.errors import CodeStructError, UpstreamError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    metadata: dict[str, object] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": message,
            "metadata": metadata or {},
        },
    )


async def _domain_error(
    request: Request, exc: Exception
) -> JSONResponse:
    assert isinstance(exc, CodeStructError)
    metadata: dict[str, object] = {}
    if isinstance(exc, UpstreamError):
        metadata["attempts"] = exc.attempts
        logger.error(
            "event=upstream_failed path=%s attempts=%s",
            request.url.path,
            "; ".join(exc.attempts),
        )
    return error_response(exc.status_code, exc.message, metadata)


async def _request_validation_error(
    request: Request, exc: Exception
) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    details = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return error_response(
        400,
        "Invalid request: " + "; ".join(details),
    )


async def _http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return error_response(exc.status_code, str(exc.detail))


async def _unhandled_error(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception(
        "event=unhandled_error path=%s method=%s",
        request.url.path,
        request.method,
    )
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CodeStructError, _domain_error)
    app.add_exception_handler(
        RequestValidationError, _request_validation_error
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)
