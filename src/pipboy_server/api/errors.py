"""Map service errors to HTTP responses.

Routes never build error responses themselves: they let ``ServiceError``
subclasses propagate and the handlers below turn them into
``{"detail": ..., "code": ...}`` with the error's status code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pipboy_server.api.models import ErrorResponse
from pipboy_server.config import config
from pipboy_server.errors import ServiceError, StorageFailure

logger = logging.getLogger(__name__)

GENERIC_STORAGE_MESSAGE = "Database error"


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    body = ErrorResponse(detail=detail, code=code)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc.status_code, exc.message, exc.code)


async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
    # Engine detail stays in the log; the caller only learns that it failed.
    logger.error(
        "Storage failure on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    detail = str(exc) if config.features.verbose_errors else GENERIC_STORAGE_MESSAGE
    return _error_response(exc.status_code, detail, exc.code)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the service error handlers on ``app``."""
    app.add_exception_handler(StorageFailure, storage_failure_handler)
    app.add_exception_handler(ServiceError, service_error_handler)
