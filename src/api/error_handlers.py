# This file defines the API error type and the global exception handlers.
# It exists so validation, HTTP, and unexpected failures reach clients in the same envelope as successes.
# Validation errors are reported as 400 with one entry per offending field.
# Unexpected exceptions are logged with the request id and never leak stack traces.

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.response_envelope import envelope_response
from src.api.results import ErrorKind, ServiceResult

LOGGER = logging.getLogger("cms.api")

_VALIDATION_SOURCES = {"body", "query", "path", "header", "form"}


class APIError(Exception):
    """Domain error raised from dependencies and routes, rendered as an envelope."""

    def __init__(self, *, status_code: int, message: str, data: Any | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.data = data
        super().__init__(message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _field_name(location: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(part) for part in location]
    if parts and parts[0] in _VALIDATION_SOURCES:
        parts = parts[1:]
    return ".".join(parts) or "request"


def validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {"field": _field_name(error.get("loc", ())), "message": str(error.get("msg", "Invalid value"))}
        for error in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return envelope_response(
            ServiceResult(data=exc.data, success=False, status=exc.status_code, message=exc.message)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = validation_errors(exc)
        message = f"{errors[0]['field']}: {errors[0]['message']}" if errors else "Invalid request"
        return envelope_response(
            ServiceResult.fail(ErrorKind.VALIDATION, message, data={"errors": errors})
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return envelope_response(
            ServiceResult(data=None, success=False, status=exc.status_code, message=str(exc.detail))
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error for request %s", _request_id(request))
        return envelope_response(
            ServiceResult.fail(ErrorKind.INTERNAL, "The server encountered an unexpected error.")
        )
