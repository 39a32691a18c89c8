# This file turns service results into the `{data, success, status, message}` HTTP envelope.
# It exists so every route and error handler renders responses through one adapter.
# Stored rows are also shaped here: audit identities and storage ids never leave the API.

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from src.api.results import ServiceResult

HIDDEN_FIELDS = frozenset({"created_by", "modified_by", "file_id", "password_hash"})


def public_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Drop internal columns and camelCase the remaining keys."""

    return {to_camel(key): value for key, value in record.items() if key not in HIDDEN_FIELDS}


def build_envelope(*, data: Any, success: bool, status: int, message: str) -> dict[str, Any]:
    return {"data": data, "success": success, "status": status, "message": message}


def envelope_response(result: ServiceResult) -> JSONResponse:
    body = build_envelope(
        data=result.data,
        success=result.success,
        status=result.status,
        message=result.message,
    )
    return JSONResponse(status_code=result.status, content=jsonable_encoder(body))
