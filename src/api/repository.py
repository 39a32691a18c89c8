# This file implements the generic persistence helpers shared by every service.
# It exists so find/update/delete/count logic is written once against SQLAlchemy Core tables.
# Field names are checked against the table's columns before any statement is built.
# The admin repository adds the requester check that gates every mutating operation.

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Column, Table, delete, func, insert, select, update
from sqlalchemy.sql import Select

from src.api.db_access import DatabaseClient
from src.api.entities import generate_unique_id

LOGGER = logging.getLogger("cms.repository")

MAX_ID_ATTEMPTS = 5


class DuplicateIdError(RuntimeError):
    """Raised when no free id could be generated for a prefix."""


class TableRepository:
    """Single-table data access used by entity, auth, and dashboard services."""

    def __init__(self, *, db: DatabaseClient, table: Table) -> None:
        self.db = db
        self.table = table

    @property
    def name(self) -> str:
        return self.table.name

    def column(self, field: str) -> Column:
        if field not in self.table.c:
            raise ValueError(f"Unknown column {field!r} for table {self.table.name!r}")
        return self.table.c[field]

    def _filtered(self, statement: Select, filters: Mapping[str, Any] | None) -> Select:
        for field, value in (filters or {}).items():
            statement = statement.where(self.column(field) == value)
        return statement

    def find_by_field(self, field: str, value: Any) -> dict[str, Any] | None:
        statement = select(self.table).where(self.column(field) == value).limit(1)
        return self.db.fetch_one(statement)

    def find_by_id(self, record_id: str) -> dict[str, Any] | None:
        return self.find_by_field("id", record_id)

    def exists_by_field(self, field: str, value: Any) -> bool:
        statement = select(self.column("id")).where(self.column(field) == value).limit(1)
        return self.db.fetch_one(statement) is not None

    def find_all(self, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        statement = self._filtered(select(self.table), filters)
        statement = statement.order_by(self.column("created_at").asc(), self.column("id").asc())
        return self.db.fetch_all(statement)

    def insert(self, values: Mapping[str, Any]) -> int:
        return self.db.execute(insert(self.table).values(**dict(values)))

    def insert_with_generated_id(self, prefix: str, values: Mapping[str, Any]) -> str:
        """Insert a row under a fresh `<prefix>-xxxxxx` id, retrying when the suffix is taken."""

        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            record_id = generate_unique_id(prefix)
            if self.exists_by_field("id", record_id):
                LOGGER.warning("Generated id %s already exists in %s (attempt %d)", record_id, self.name, attempt)
                continue
            self.insert({**dict(values), "id": record_id})
            return record_id
        raise DuplicateIdError(f"Could not generate a unique id for {self.name!r}")

    def update_by_id(self, record_id: str, values: Mapping[str, Any]) -> int:
        for field in values:
            self.column(field)
        statement = update(self.table).where(self.column("id") == record_id).values(**dict(values))
        return self.db.execute(statement)

    def delete_by_field(self, field: str, value: Any) -> int:
        return self.db.execute(delete(self.table).where(self.column(field) == value))

    def delete_by_id(self, record_id: str) -> int:
        return self.delete_by_field("id", record_id)

    def count(self, filters: Mapping[str, Any] | None = None) -> int:
        statement = self._filtered(select(func.count()).select_from(self.table), filters)
        return int(self.db.fetch_scalar(statement))

    def grouped_counts(self, field: str) -> list[tuple[Any, int]]:
        """Return `(value, row count)` pairs for each distinct non-null value of `field`."""

        column = self.column(field)
        statement = (
            select(column, func.count().label("row_count"))
            .where(column.is_not(None))
            .group_by(column)
            .order_by(column.asc())
        )
        return [(row[field], int(row["row_count"])) for row in self.db.fetch_all(statement)]


class AdminRepository(TableRepository):
    def is_valid_request(self, admin_id: str | None) -> bool:
        """Return True only when `admin_id` names an existing admin."""

        if not admin_id:
            return False
        return self.exists_by_field("id", admin_id)

    def find_by_user_name(self, user_name: str) -> dict[str, Any] | None:
        return self.find_by_field("user_name", user_name)
