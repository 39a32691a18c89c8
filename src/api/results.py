# This file defines the single result type every service operation returns.
# It exists so status codes and messages are decided in services and rendered in one adapter.
# Database and storage failures are caught here, logged once, and turned into 500 results.

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ParamSpec

from sqlalchemy.exc import SQLAlchemyError

from src.api.repository import DuplicateIdError
from src.api.storage import StorageError

LOGGER = logging.getLogger("cms.services")

FORBIDDEN_MESSAGE = "You do not have necessary permission"
INTERNAL_MESSAGE = "Internal server error"

P = ParamSpec("P")


class ErrorKind(IntEnum):
    VALIDATION = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    UNPROCESSABLE = 422
    INTERNAL = 500


@dataclass(frozen=True)
class ServiceResult:
    data: Any
    success: bool
    status: int
    message: str

    @classmethod
    def ok(cls, data: Any, message: str = "") -> ServiceResult:
        return cls(data=data, success=True, status=200, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, data: Any = None) -> ServiceResult:
        return cls(data=data, success=False, status=int(kind), message=message)

    @classmethod
    def forbidden(cls) -> ServiceResult:
        return cls.fail(ErrorKind.FORBIDDEN, FORBIDDEN_MESSAGE)


def service_operation(func: Callable[P, ServiceResult]) -> Callable[P, ServiceResult]:
    """Convert database, storage and id-generation exceptions raised by `func` into a 500 result."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> ServiceResult:
        try:
            return func(*args, **kwargs)
        except (SQLAlchemyError, StorageError, DuplicateIdError):
            LOGGER.exception("Service operation %s failed", func.__qualname__)
            return ServiceResult.fail(ErrorKind.INTERNAL, INTERNAL_MESSAGE)

    return wrapper
