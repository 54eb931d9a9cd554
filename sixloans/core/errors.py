"""
Uniform JSON error envelope for every failure the API returns.

All errors come back as ``{"error": {"code", "message", "status_code"}}``;
validation failures add ``details`` and unhandled exceptions add the
exception text in development only.
"""

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sixloans.core.config import settings

logger = logging.getLogger("sixloans.errors")


def _code_for(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "error"


def error_body(status_code: int, message: Any, code: Optional[str] = None, details: Any = None) -> Dict[str, Any]:
    error = {"code": code or _code_for(status_code), "message": message, "status_code": status_code}
    if details is not None:
        error["details"] = details
    return {"error": error}


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(exc.status_code, exc.detail or HTTPStatus(exc.status_code).phrase)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation failed on %s: %s", request.url.path, exc.errors())
    body = error_body(422, "Request validation failed", code="validation_error", details=exc.errors())
    return JSONResponse(status_code=422, content=jsonable_encoder(body))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    details = str(exc) if settings.is_development else None
    body = error_body(500, "An unexpected error occurred", code="internal_server_error", details=details)
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
