"""
Request logging and exception handlers.

Every failure leaves the API as the JSON envelope
`{"success": false, "message": ..., "error": ...}`.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError

logger = logging.getLogger(__name__)

SLOW_REQUEST_S = 1.0


def _request_id(request: Request) -> str:
    return f"{int(time.time() * 1000)}-{id(request)}"


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    request_id = _request_id(request)

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "request_failed id=%s method=%s path=%s error=%s duration_s=%.2f",
            request_id,
            request.method,
            request.url.path,
            e,
            process_time,
        )
        raise

    process_time = time.time() - start_time
    # Only log slow requests or errors
    if process_time > SLOW_REQUEST_S or response.status_code >= 400:
        logger.info(
            "request id=%s method=%s path=%s status=%s duration_s=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
    return response


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Solicitud inválida", "error": details},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _request_id(request)
    logger.error(
        "unhandled_exception id=%s method=%s path=%s error=%s",
        request_id,
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Error interno del servidor", "error": str(exc)},
    )


def install(app: FastAPI) -> None:
    app.middleware("http")(log_requests)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
