"""
Response envelope and exception handlers.

Every response carries a ``success`` flag.  Failures are rendered as
``{"success": false, "message": ...}`` with the status attached to the
error class: 400 for invalid input and rejected business rules, 404
for unknown ids and 500 for store outages and unexpected errors.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from library_api.app.core.errors import LibraryError, ValidationError


logger = logging.getLogger(__name__)


def success(message: Optional[str] = None, **payload: Any) -> dict:
    """Build a success envelope around ``payload``."""
    body: dict = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return body


def failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts)


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    return failure(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(_describe_validation_error(exc))
    logger.info("%s %s rejected: %s", request.method, request.url.path, error.message)
    return failure(error.status_code, error.message)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Internal error: {exc}")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LibraryError, library_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
