# This file builds the FastAPI application and registers all API routers.
# It exists so startup behavior, middleware, and error handling are configured in one place.
# The app adds request IDs, timing headers, and Prometheus metrics for operations visibility.
# Startup creates any missing CMS tables and the directory that backs published files.

from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import RequestResponseEndpoint

from src.api.api_config import get_api_config
from src.api.dependencies import get_cms_schema, get_database_client
from src.api.error_handlers import register_error_handlers
from src.api.routers.auth import router as auth_router
from src.api.routers.dashboard import router as dashboard_router
from src.api.routers.entities import entity_routers
from src.api.routers.health import router as health_router
from src.common.logging import configure_logging

LOGGER = logging.getLogger("cms.api")

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "Total number of HTTP requests processed by the API.",
    ["method", "path", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "API request duration in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Number of API requests currently being processed.",
    ["method"],
)


UNMATCHED_ROUTE_LABEL = "unmatched"


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE_LABEL


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    db = app.dependency_overrides.get(get_database_client, get_database_client)()
    schema = app.dependency_overrides.get(get_cms_schema, get_cms_schema)()
    try:
        db.create_tables(schema.metadata)
        app.state.db_connected_at_startup = True
    except SQLAlchemyError:
        LOGGER.exception("Could not create CMS tables at startup")
        app.state.db_connected_at_startup = False
    yield


def create_app() -> FastAPI:
    """Create configured FastAPI application instance."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "Content management API for a school website: staff, students, announcements, "
            "blog posts, admission material, home page content, and downloads. "
            "Every response uses the {data, success, status, message} envelope."
        ),
        version=config.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "auth", "description": "Admin login, signup, password reset, and removal."},
            {"name": "dashboard", "description": "Per-collection totals for the admin panel."},
            {"name": "administration", "description": "Administration staff profiles."},
            {"name": "announcement", "description": "Short announcements."},
            {"name": "student", "description": "Student records."},
            {"name": "class", "description": "Class names."},
            {"name": "level", "description": "Level names."},
            {"name": "blog", "description": "Blog posts with a cover image."},
            {"name": "download", "description": "Downloadable PDF documents."},
            {"name": "admission", "description": "Admission forms and admission information."},
            {"name": "home-page", "description": "Home page carousel, gallery, and posts."},
            {"name": "others-information", "description": "Free-form information pages."},
            {"name": "category", "description": "Category names shared by content pages."},
            {"name": "notice", "description": "Notices published as PDF documents."},
            {"name": "result", "description": "Exam results published as PDF documents."},
            {"name": "routine", "description": "Class routines published as PDF documents."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        method_label = request.method
        started = time.perf_counter()
        status_code = 500
        API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).inc()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0

            response.headers["x-request-id"] = request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
            LOGGER.debug(
                "%s %s -> %s in %.2f ms (request_id=%s)",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
                request_id,
            )
            return response
        finally:
            duration_s = time.perf_counter() - started
            path_label = _route_label(request)
            API_HTTP_REQUESTS_TOTAL.labels(
                method=method_label,
                path=path_label,
                status_code=str(status_code),
            ).inc()
            API_HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method_label,
                path=path_label,
            ).observe(duration_s)
            API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    register_error_handlers(app)

    os.makedirs(config.storage_directory, exist_ok=True)
    app.mount(
        config.files_mount_path,
        StaticFiles(directory=config.storage_directory),
        name="files",
    )

    app.include_router(health_router)
    app.include_router(auth_router, prefix=config.api_version_path)
    app.include_router(dashboard_router, prefix=config.api_version_path)
    for entity_router in entity_routers:
        app.include_router(entity_router, prefix=config.api_version_path)

    return app


app = create_app()
