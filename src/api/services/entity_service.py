# This file implements the create/list/read/update/delete flow shared by every content entity.
# It exists so authorization, id generation, audit stamping, and file handling are written once.
# File-backed entities upload before writing rows and clean up stored files after row changes.
# Every operation returns a ServiceResult; routers only render it.

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.api.entities import EntityDefinition
from src.api.repository import AdminRepository, DuplicateIdError, TableRepository
from src.api.response_envelope import public_record
from src.api.results import ErrorKind, ServiceResult, service_operation
from src.api.schemas.common import CamelModel
from src.api.storage import FileStorage, StorageError, UploadedFile

LOGGER = logging.getLogger("cms.content")


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class EntityService:
    """CRUD operations for one entity table."""

    def __init__(
        self,
        *,
        definition: EntityDefinition,
        records: TableRepository,
        admins: AdminRepository,
        storage: FileStorage,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.definition = definition
        self.records = records
        self.admins = admins
        self.storage = storage
        self.clock = clock

    @property
    def label(self) -> str:
        return self.definition.label

    def validate_file(self, file: UploadedFile | None, *, required: bool) -> ServiceResult | None:
        """Return a 400 result when the upload breaks the entity's file rule, else None."""

        rule = self.definition.file_rule
        if rule is None:
            return None
        if file is None:
            if required:
                return ServiceResult.fail(ErrorKind.VALIDATION, "file is required")
            return None
        if file.extension not in rule.allowed_extensions:
            allowed = ", ".join(rule.allowed_extensions)
            return ServiceResult.fail(
                ErrorKind.VALIDATION,
                f"Unsupported file type {file.extension or 'unknown'!r}; allowed: {allowed}",
            )
        if file.size == 0:
            return ServiceResult.fail(ErrorKind.VALIDATION, "file is empty")
        if file.size > rule.max_size_bytes:
            limit_mb = rule.max_size_bytes // (1024 * 1024)
            return ServiceResult.fail(ErrorKind.VALIDATION, f"file exceeds the {limit_mb} MB limit")
        return None

    def _discard_file(self, file_id: str | None) -> None:
        if not file_id:
            return
        try:
            self.storage.delete(file_id)
        except StorageError:
            LOGGER.exception("Could not delete stored file %s for %s", file_id, self.label)

    def _duplicate_of(self, values: dict[str, Any], *, record_id: str | None = None) -> ServiceResult | None:
        field = self.definition.unique_field
        if not field or field not in values:
            return None
        existing = self.records.find_by_field(field, values[field])
        if existing is not None and existing["id"] != record_id:
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{values[field]} already exists")
        return None

    def _unique_violation(self, values: dict[str, Any]) -> ServiceResult | None:
        """Map a unique-constraint failure on the unique field to the duplicate result."""

        field = self.definition.unique_field
        if not field or field not in values:
            return None
        LOGGER.warning("Concurrent write hit the unique %s constraint on %s", field, self.label)
        return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{values[field]} already exists")

    @service_operation
    def create(
        self,
        *,
        admin_id: str,
        details: CamelModel,
        file: UploadedFile | None = None,
    ) -> ServiceResult:
        rule = self.definition.file_rule
        invalid = self.validate_file(file, required=bool(rule and rule.required))
        if invalid is not None:
            return invalid
        if not self.admins.is_valid_request(admin_id):
            LOGGER.warning("Rejected %s create for unknown admin %s", self.label, admin_id)
            return ServiceResult.forbidden()

        values = details.model_dump()
        duplicate = self._duplicate_of(values)
        if duplicate is not None:
            return duplicate

        stored_file_id = None
        if file is not None and self.definition.is_file_backed:
            try:
                stored = self.storage.upload(file)
            except StorageError:
                LOGGER.exception("Upload failed for new %s", self.label)
                return ServiceResult.fail(ErrorKind.UNPROCESSABLE, "Failed to upload file")
            stored_file_id = stored.file_id
            values.update(
                file_name=file.file_name,
                file_id=stored.file_id,
                shareable_link=stored.shareable_link,
            )

        values.update(created_by=admin_id, created_at=self.clock())
        try:
            record_id = self.records.insert_with_generated_id(self.definition.id_prefix, values)
        except (SQLAlchemyError, DuplicateIdError) as exc:
            self._discard_file(stored_file_id)
            violation = self._unique_violation(values) if isinstance(exc, IntegrityError) else None
            if violation is None:
                raise
            return violation

        LOGGER.info("Created %s %s by %s", self.label, record_id, admin_id)
        latest = self.records.find_by_id(record_id)
        return ServiceResult.ok(public_record(latest or {}), f"{record_id} created successfully")

    @service_operation
    def list_records(self, *, filters: dict[str, str] | None = None) -> ServiceResult:
        active = {key: value for key, value in (filters or {}).items() if value}
        rows = self.records.find_all(active)
        if not rows:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, f"No {self.label} found", data=[])
        return ServiceResult.ok(
            [public_record(row) for row in rows],
            f"{len(rows)} {self.label} found",
        )

    @service_operation
    def get_one(self, record_id: str) -> ServiceResult:
        record = self.records.find_by_id(record_id)
        if record is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, f"{record_id} not found")
        return ServiceResult.ok(public_record(record), f"{record_id} found successfully")

    @service_operation
    def update(
        self,
        *,
        admin_id: str,
        record_id: str,
        details: CamelModel,
        file: UploadedFile | None = None,
    ) -> ServiceResult:
        invalid = self.validate_file(file, required=False)
        if invalid is not None:
            return invalid
        if not self.admins.is_valid_request(admin_id):
            LOGGER.warning("Rejected %s update for unknown admin %s", self.label, admin_id)
            return ServiceResult.forbidden()

        existing = self.records.find_by_id(record_id)
        if existing is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, f"{record_id} not found")

        values = details.provided_values()
        duplicate = self._duplicate_of(values, record_id=record_id)
        if duplicate is not None:
            return duplicate

        new_file_id = None
        if file is not None and self.definition.is_file_backed:
            try:
                stored = self.storage.upload(file)
            except StorageError:
                LOGGER.exception("Upload failed for %s", record_id)
                return ServiceResult.fail(ErrorKind.UNPROCESSABLE, "Failed to upload file")
            new_file_id = stored.file_id
            values.update(
                file_name=file.file_name,
                file_id=stored.file_id,
                shareable_link=stored.shareable_link,
            )

        values.update(modified_by=admin_id, modified_at=self.clock())
        try:
            modified = self.records.update_by_id(record_id, values)
        except SQLAlchemyError as exc:
            self._discard_file(new_file_id)
            violation = self._unique_violation(values) if isinstance(exc, IntegrityError) else None
            if violation is None:
                raise
            return violation
        if not modified:
            self._discard_file(new_file_id)
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{record_id} not updated")

        if new_file_id is not None:
            self._discard_file(existing.get("file_id"))

        LOGGER.info("Updated %s %s by %s", self.label, record_id, admin_id)
        latest = self.records.find_by_id(record_id)
        return ServiceResult.ok(public_record(latest or {}), f"{record_id} updated successfully")

    @service_operation
    def delete(self, *, admin_id: str, record_id: str) -> ServiceResult:
        if not self.admins.is_valid_request(admin_id):
            LOGGER.warning("Rejected %s delete for unknown admin %s", self.label, admin_id)
            return ServiceResult.forbidden()

        existing = self.records.find_by_id(record_id)
        if existing is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, f"{record_id} not found")

        if not self.records.delete_by_id(record_id):
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{record_id} could not be deleted")

        if self.definition.is_file_backed:
            self._discard_file(existing.get("file_id"))

        LOGGER.info("Deleted %s %s by %s", self.label, record_id, admin_id)
        return ServiceResult.ok({}, f"{record_id} deleted successfully")
