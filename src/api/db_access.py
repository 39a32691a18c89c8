# This file wraps database access so repositories can run SQLAlchemy Core statements safely.
# It exists to keep engine and connection handling out of services and routers.
# One client is built at startup and injected; every call borrows a pooled connection for one statement.

from __future__ import annotations

from typing import Any

from sqlalchemy import MetaData, create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

from src.api.tables import safe_identifier


def _is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in database_url


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for API read/write access."""

    def __init__(self, *, database_url: str) -> None:
        engine_options: dict[str, Any] = {"pool_pre_ping": True, "future": True}
        if database_url.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
            if _is_in_memory_sqlite(database_url):
                engine_options["poolclass"] = StaticPool
        self._engine: Engine = create_engine(database_url, **engine_options)

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        safe_identifier(table_name)
        return inspect(self._engine).has_table(table_name)

    def create_tables(self, metadata: MetaData) -> None:
        metadata.create_all(self._engine)

    def fetch_all(self, statement: Executable) -> list[dict[str, Any]]:
        with self._engine.connect() as connection:
            rows = connection.execute(statement).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(self, statement: Executable) -> dict[str, Any] | None:
        with self._engine.connect() as connection:
            row = connection.execute(statement).mappings().first()
        return dict(row) if row is not None else None

    def fetch_scalar(self, statement: Executable) -> Any:
        with self._engine.connect() as connection:
            return connection.execute(statement).scalar_one()

    def execute(self, statement: Executable) -> int:
        """Run a write statement in its own transaction and return the affected row count."""

        with self._engine.begin() as connection:
            result = connection.execute(statement)
            affected = int(result.rowcount or 0)
        return affected

    def dispose(self) -> None:
        self._engine.dispose()
