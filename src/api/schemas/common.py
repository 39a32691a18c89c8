# This file defines shared schema pieces reused by every API endpoint.
# It exists so the `{data, success, status, message}` envelope stays identical across modules.
# Request models inherit the camelCase alias policy defined here.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request model accepting camelCase keys from clients and snake_case from Python callers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def provided_values(self) -> dict[str, Any]:
        """Return snake_case field values that carry content."""

        return {
            key: value
            for key, value in self.model_dump().items()
            if value is not None and value != ""
        }


class EnvelopeResponse(BaseModel):
    data: Any
    success: bool
    status: int
    message: str
