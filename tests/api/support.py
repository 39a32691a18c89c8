# This file provides shared helpers for API endpoint tests.
# It exists so tests run against an in-memory SQLite database and a fake file store.
# The helpers build consistent config objects, seeded admins, and scoped TestClient contexts.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.db_access import DatabaseClient
from src.api.dependencies import (
    get_auth_service,
    get_cms_schema,
    get_config,
    get_content_services,
    get_dashboard_service,
    get_database_client,
)
from src.api.entities import ENTITY_DEFINITIONS
from src.api.repository import AdminRepository, TableRepository
from src.api.schemas.auth_schemas import SignupRequest
from src.api.security import create_access_token
from src.api.services.auth_service import AuthService
from src.api.services.dashboard_service import DashboardService
from src.api.services.entity_service import EntityService
from src.api.storage import StorageError, StoredFile, UploadedFile
from src.api.tables import CmsSchema, build_schema

API = "/api/v1"
TEST_PASSWORD = "secret-pass1"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%test document\n"


def build_test_config(**overrides: Any) -> ApiConfig:
    """Create deterministic API config for tests."""

    values: dict[str, Any] = {
        "api_name": "Test School CMS API",
        "api_version_path": API,
        "host": "0.0.0.0",
        "port": 8000,
        "environment": "test",
        "database_url": "sqlite://",
        "jwt_secret": os.environ["API_JWT_SECRET"],
        "jwt_algorithm": "HS256",
        "token_expiry_hours": 24,
        "signup_enabled": True,
        "storage_directory": os.environ["API_STORAGE_DIRECTORY"],
        "public_base_url": "http://testserver",
        "allowed_origins": [],
        "app_version": "0.1.0",
    }
    values.update(overrides)
    return ApiConfig(**values)


class FakeFileStorage:
    """In-memory stand-in for the file store with switchable failures."""

    def __init__(self, *, fail_uploads: bool = False, fail_deletes: bool = False) -> None:
        self.fail_uploads = fail_uploads
        self.fail_deletes = fail_deletes
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._counter = 0

    def upload(self, file: UploadedFile) -> StoredFile:
        if self.fail_uploads:
            raise StorageError("upload rejected")
        self._counter += 1
        file_id = f"file-{self._counter}.{file.extension}"
        self.files[file_id] = file.content
        return StoredFile(file_id=file_id, shareable_link=f"https://files.test/{file_id}")

    def delete(self, file_id: str) -> None:
        if self.fail_deletes:
            raise StorageError("delete rejected")
        self.deleted.append(file_id)
        self.files.pop(file_id, None)


class FakeDBClient:
    """Simple fake DB dependency for readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = existing_tables or set()

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables

    def create_tables(self, _metadata: Any) -> None:
        return None


@dataclass
class CmsTestContext:
    config: ApiConfig
    db: DatabaseClient
    schema: CmsSchema
    storage: FakeFileStorage
    admins: AdminRepository
    content_services: dict[str, EntityService]
    auth_service: AuthService
    dashboard_service: DashboardService

    def records(self, key: str) -> TableRepository:
        return self.content_services[key].records


def build_test_context(
    *,
    config: ApiConfig | None = None,
    storage: FakeFileStorage | None = None,
) -> CmsTestContext:
    """Wire services against a fresh in-memory database."""

    resolved_config = config or build_test_config()
    db = DatabaseClient(database_url="sqlite://")
    schema = build_schema(resolved_config.table_prefix)
    db.create_tables(schema.metadata)
    admins = AdminRepository(db=db, table=schema.admin)
    file_storage = storage or FakeFileStorage()
    content_services = {
        definition.key: EntityService(
            definition=definition,
            records=TableRepository(db=db, table=schema.entity_table(definition.key)),
            admins=admins,
            storage=file_storage,
        )
        for definition in ENTITY_DEFINITIONS
    }
    return CmsTestContext(
        config=resolved_config,
        db=db,
        schema=schema,
        storage=file_storage,
        admins=admins,
        content_services=content_services,
        auth_service=AuthService(config=resolved_config, admins=admins),
        dashboard_service=DashboardService(
            admins=admins,
            tables={key: service.records for key, service in content_services.items()},
        ),
    )


def seed_admin(
    context: CmsTestContext,
    *,
    name: str = "Head Teacher",
    user_name: str = "headteacher",
    password: str = TEST_PASSWORD,
) -> dict[str, Any]:
    result = context.auth_service.register(
        SignupRequest(name=name, user_name=user_name, password=password, confirm_password=password)
    )
    assert result.success, result.message
    admin = context.admins.find_by_user_name(user_name)
    assert admin is not None
    return admin


def auth_headers(context: CmsTestContext, admin_id: str) -> dict[str, str]:
    token = create_access_token(
        admin={"id": admin_id, "name": "Test Admin", "user_name": "testadmin"},
        config=context.config,
    )
    return {"Authorization": f"Bearer {token}"}


@contextmanager
def api_test_client(
    *,
    context: CmsTestContext | None = None,
    db_client: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved = context or build_test_context()

    app.dependency_overrides[get_config] = lambda: resolved.config
    app.dependency_overrides[get_database_client] = lambda: db_client or resolved.db
    app.dependency_overrides[get_cms_schema] = lambda: resolved.schema
    app.dependency_overrides[get_content_services] = lambda: resolved.content_services
    app.dependency_overrides[get_auth_service] = lambda: resolved.auth_service
    app.dependency_overrides[get_dashboard_service] = lambda: resolved.dashboard_service

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
