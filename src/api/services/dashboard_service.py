# This file implements the read-only dashboard aggregations for signed-in admins.
# It exists so count queries across every entity table stay out of the router.
# Both views are gated by the same admin check as mutating operations.

from __future__ import annotations

import logging
from typing import Any

from pydantic.alias_generators import to_camel

from src.api.repository import AdminRepository, TableRepository
from src.api.results import ServiceResult, service_operation

LOGGER = logging.getLogger("cms.dashboard")

STUDENT_KEY = "student"


class DashboardService:
    """Per-table totals and category breakdowns."""

    def __init__(self, *, admins: AdminRepository, tables: dict[str, TableRepository]) -> None:
        self.admins = admins
        self.tables = tables

    @service_operation
    def summary(self, *, admin_id: str, filter_by: str | None = None) -> ServiceResult:
        if not self.admins.is_valid_request(admin_id):
            return ServiceResult.forbidden()

        administration = self.tables["administration"]
        students = self.tables[STUDENT_KEY]
        counts: dict[str, int] = {}
        if filter_by == STUDENT_KEY:
            counts[STUDENT_KEY] = students.count()
        elif filter_by:
            counts[filter_by] = administration.count({"category": filter_by})
        else:
            for category, total in administration.grouped_counts("category"):
                counts[str(category)] = total
            counts[STUDENT_KEY] = students.count()

        return ServiceResult.ok(counts, "Dashboard summary retrieved successfully")

    def _collection_details(self, repository: TableRepository, group_field: str | None) -> dict[str, Any]:
        if group_field is None:
            return {"total": repository.count(), "details": []}
        breakdown = [
            {"category": value, "count": total}
            for value, total in repository.grouped_counts(group_field)
        ]
        return {"total": repository.count(), "details": breakdown}

    @service_operation
    def details(self, *, admin_id: str, collection: str | None = None) -> ServiceResult:
        if not self.admins.is_valid_request(admin_id):
            return ServiceResult.forbidden()

        catalog: dict[str, tuple[TableRepository, str | None]] = {"admin": (self.admins, None)}
        for key, repository in self.tables.items():
            group_field = next(
                (field for field in ("category", "level") if field in repository.table.c),
                None,
            )
            catalog[to_camel(key)] = (repository, group_field)

        if collection and collection in catalog:
            selected = [collection]
        else:
            if collection:
                LOGGER.info("Unknown dashboard collection %r; returning all collections", collection)
            selected = list(catalog)

        data = {name: self._collection_details(*catalog[name]) for name in selected}
        return ServiceResult.ok(data, "Details fetched successfully")
