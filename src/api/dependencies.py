# This file provides dependency factories for FastAPI routes and the app lifespan.
# It exists so the database client, storage, and services are created once and shared.
# The setup keeps routers thin and makes endpoint tests easy to override.
# The bearer-token dependency resolves the signed-in admin id for mutating routes.

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.api.api_config import ApiConfig, get_api_config
from src.api.db_access import DatabaseClient
from src.api.entities import ENTITY_DEFINITIONS
from src.api.error_handlers import APIError
from src.api.repository import AdminRepository, TableRepository
from src.api.security import InvalidTokenError, decode_access_token
from src.api.services.auth_service import AuthService
from src.api.services.dashboard_service import DashboardService
from src.api.services.entity_service import EntityService
from src.api.storage import FileStorage, LocalFileStorage
from src.api.tables import CmsSchema, build_schema

_bearer_scheme = HTTPBearer(auto_error=False)


def get_config() -> ApiConfig:
    return get_api_config()


@lru_cache(maxsize=1)
def get_cms_schema() -> CmsSchema:
    return build_schema(get_api_config().table_prefix)


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


@lru_cache(maxsize=1)
def get_file_storage() -> FileStorage:
    config = get_api_config()
    return LocalFileStorage(directory=config.storage_directory, public_url=config.public_files_url())


@lru_cache(maxsize=1)
def get_admin_repository() -> AdminRepository:
    return AdminRepository(db=get_database_client(), table=get_cms_schema().admin)


@lru_cache(maxsize=1)
def get_content_services() -> dict[str, EntityService]:
    schema = get_cms_schema()
    db_client = get_database_client()
    admins = get_admin_repository()
    storage = get_file_storage()
    return {
        definition.key: EntityService(
            definition=definition,
            records=TableRepository(db=db_client, table=schema.entity_table(definition.key)),
            admins=admins,
            storage=storage,
        )
        for definition in ENTITY_DEFINITIONS
    }


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    return AuthService(config=get_api_config(), admins=get_admin_repository())


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    services = get_content_services()
    return DashboardService(
        admins=get_admin_repository(),
        tables={key: service.records for key, service in services.items()},
    )


def get_current_admin_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    config: Annotated[ApiConfig, Depends(get_config)],
) -> str:
    """Return the admin id carried by a valid bearer token; 401 otherwise."""

    if credentials is None or not credentials.credentials:
        raise APIError(status_code=401, message="Unauthorized access")
    try:
        claims = decode_access_token(credentials.credentials, config)
    except InvalidTokenError as exc:
        raise APIError(status_code=401, message="Invalid or expired token") from exc
    return str(claims["sub"])


CurrentAdminId = Annotated[str, Depends(get_current_admin_id)]
