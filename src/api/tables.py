# This file declares the relational layout: one table per content entity plus the admin table.
# It exists so DDL and every query are generated from SQLAlchemy Core objects instead of string SQL.
# Table names may carry a deployment prefix; identifiers are validated before use.

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, UniqueConstraint

from src.api.entities import ENTITY_DEFINITIONS, EntityDefinition

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

ID_COLUMN_LENGTH = 64
AUDIT_COLUMNS: tuple[str, ...] = ("created_by", "created_at", "modified_by", "modified_at")
FILE_COLUMNS: tuple[str, ...] = ("file_name", "file_id", "shareable_link")


@dataclass(frozen=True)
class CmsSchema:
    metadata: MetaData
    admin: Table
    entities: dict[str, Table]

    def entity_table(self, key: str) -> Table:
        return self.entities[key]

    def all_tables(self) -> list[Table]:
        return [self.admin, *self.entities.values()]


def safe_identifier(identifier: str) -> str:
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
    return identifier


def _entity_table(metadata: MetaData, definition: EntityDefinition, table_prefix: str) -> Table:
    columns: list[Column] = [Column("id", String(ID_COLUMN_LENGTH), primary_key=True)]
    columns.extend(Column(field, Text, nullable=True) for field in definition.fields)
    if definition.is_file_backed:
        columns.extend(
            [
                Column("file_name", String(255), nullable=True),
                Column("file_id", String(255), nullable=True),
                Column("shareable_link", String(1024), nullable=True),
            ]
        )
    columns.extend(
        [
            Column("created_by", String(ID_COLUMN_LENGTH), nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
            Column("modified_by", String(ID_COLUMN_LENGTH), nullable=True),
            Column("modified_at", DateTime(timezone=True), nullable=True),
        ]
    )
    table_name = safe_identifier(f"{table_prefix}{definition.table_name}")
    constraints = []
    if definition.unique_field:
        constraints.append(
            UniqueConstraint(definition.unique_field, name=f"uq_{table_name}_{definition.unique_field}")
        )
    return Table(table_name, metadata, *columns, *constraints)


def build_schema(table_prefix: str = "") -> CmsSchema:
    """Build table objects for a deployment, optionally prefixing every table name."""

    if table_prefix:
        safe_identifier(table_prefix)

    metadata = MetaData()
    admin = Table(
        safe_identifier(f"{table_prefix}admin"),
        metadata,
        Column("id", String(ID_COLUMN_LENGTH), primary_key=True),
        Column("name", String(100), nullable=False),
        Column("user_name", String(100), nullable=False, unique=True),
        Column("password_hash", String(255), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("modified_at", DateTime(timezone=True), nullable=True),
    )
    entities = {
        definition.key: _entity_table(metadata, definition, table_prefix)
        for definition in ENTITY_DEFINITIONS
    }
    return CmsSchema(metadata=metadata, admin=admin, entities=entities)
