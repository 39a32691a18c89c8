# This file registers every content entity the CMS manages and how each one is stored.
# It exists so routers, services, tables, and the dashboard all read one catalog of entities.
# Each definition names its id prefix, base path, request models, and optional file rules.

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

from src.api.schemas.common import CamelModel
from src.api.schemas.entity_schemas import (
    AdministrationCreate,
    AdministrationUpdate,
    AdmissionInformationCreate,
    AdmissionInformationUpdate,
    AnnouncementCreate,
    AnnouncementUpdate,
    ArticleCreate,
    ArticleUpdate,
    NamedItemCreate,
    NamedItemUpdate,
    StudentCreate,
    StudentUpdate,
    TitledFileCreate,
    TitledFileUpdate,
)

ID_SUFFIX_LENGTH = 6
IMAGE_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png")
DOCUMENT_EXTENSIONS: tuple[str, ...] = ("pdf",)
MAX_IMAGE_FILE_SIZE = 2 * 1024 * 1024
MAX_DOCUMENT_FILE_SIZE = 25 * 1024 * 1024


@dataclass(frozen=True)
class FileRule:
    required: bool
    allowed_extensions: tuple[str, ...]
    max_size_bytes: int


@dataclass(frozen=True)
class EntityDefinition:
    key: str
    label: str
    id_prefix: str
    path: str
    tag: str
    create_model: type[CamelModel]
    update_model: type[CamelModel]
    file_rule: FileRule | None = None
    unique_field: str | None = None

    @property
    def table_name(self) -> str:
        return self.key

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.create_model.model_fields)

    @property
    def is_file_backed(self) -> bool:
        return self.file_rule is not None

    @property
    def filterable_fields(self) -> tuple[str, ...]:
        return tuple(name for name in ("category", "level") if name in self.fields)

    @property
    def id_pattern(self) -> str:
        return rf"^{re.escape(self.id_prefix)}-\w+$"


def generate_unique_id(prefix: str) -> str:
    """Return `<prefix>-<6 lowercase hex chars>`."""

    return f"{prefix}-{uuid.uuid4().hex[:ID_SUFFIX_LENGTH]}"


_IMAGE_OPTIONAL = FileRule(
    required=False,
    allowed_extensions=IMAGE_EXTENSIONS,
    max_size_bytes=MAX_IMAGE_FILE_SIZE,
)
_IMAGE_REQUIRED = FileRule(
    required=True,
    allowed_extensions=IMAGE_EXTENSIONS,
    max_size_bytes=MAX_IMAGE_FILE_SIZE,
)
_DOCUMENT_REQUIRED = FileRule(
    required=True,
    allowed_extensions=DOCUMENT_EXTENSIONS,
    max_size_bytes=MAX_DOCUMENT_FILE_SIZE,
)

ENTITY_DEFINITIONS: tuple[EntityDefinition, ...] = (
    EntityDefinition(
        key="administration",
        label="administration",
        id_prefix="administration",
        path="/administration",
        tag="administration",
        create_model=AdministrationCreate,
        update_model=AdministrationUpdate,
        file_rule=_IMAGE_OPTIONAL,
    ),
    EntityDefinition(
        key="announcement",
        label="announcement",
        id_prefix="announcement",
        path="/announcement",
        tag="announcement",
        create_model=AnnouncementCreate,
        update_model=AnnouncementUpdate,
    ),
    EntityDefinition(
        key="student",
        label="student",
        id_prefix="student",
        path="/student",
        tag="student",
        create_model=StudentCreate,
        update_model=StudentUpdate,
    ),
    EntityDefinition(
        key="class",
        label="class",
        id_prefix="class",
        path="/class",
        tag="class",
        create_model=NamedItemCreate,
        update_model=NamedItemUpdate,
        unique_field="name",
    ),
    EntityDefinition(
        key="level",
        label="level",
        id_prefix="level",
        path="/level",
        tag="level",
        create_model=NamedItemCreate,
        update_model=NamedItemUpdate,
        unique_field="name",
    ),
    EntityDefinition(
        key="blog",
        label="blog",
        id_prefix="blog",
        path="/blog",
        tag="blog",
        create_model=ArticleCreate,
        update_model=ArticleUpdate,
        file_rule=_IMAGE_REQUIRED,
    ),
    EntityDefinition(
        key="download",
        label="download",
        id_prefix="download",
        path="/download",
        tag="download",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_DOCUMENT_REQUIRED,
    ),
    EntityDefinition(
        key="admission_form",
        label="admission form",
        id_prefix="admissionForm",
        path="/admission/form",
        tag="admission",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_DOCUMENT_REQUIRED,
    ),
    EntityDefinition(
        key="admission_information",
        label="admission information",
        id_prefix="admissionInformation",
        path="/admission/information",
        tag="admission",
        create_model=AdmissionInformationCreate,
        update_model=AdmissionInformationUpdate,
    ),
    EntityDefinition(
        key="home_page_carousel",
        label="home page carousel",
        id_prefix="homePageCarousel",
        path="/home-page/carousel",
        tag="home-page",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_IMAGE_REQUIRED,
    ),
    EntityDefinition(
        key="home_page_gallery",
        label="home page gallery",
        id_prefix="homePageGallery",
        path="/home-page/gallery",
        tag="home-page",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_IMAGE_REQUIRED,
    ),
    EntityDefinition(
        key="home_page_post",
        label="home page post",
        id_prefix="homePagePost",
        path="/home-page/post",
        tag="home-page",
        create_model=ArticleCreate,
        update_model=ArticleUpdate,
    ),
    EntityDefinition(
        key="others_information",
        label="others information",
        id_prefix="othersInformation",
        path="/others-information",
        tag="others-information",
        create_model=ArticleCreate,
        update_model=ArticleUpdate,
    ),
    EntityDefinition(
        key="category",
        label="category",
        id_prefix="category",
        path="/category",
        tag="category",
        create_model=NamedItemCreate,
        update_model=NamedItemUpdate,
        unique_field="name",
    ),
    EntityDefinition(
        key="notice",
        label="notice",
        id_prefix="notice",
        path="/notice",
        tag="notice",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_DOCUMENT_REQUIRED,
    ),
    EntityDefinition(
        key="result",
        label="result",
        id_prefix="result",
        path="/result",
        tag="result",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_DOCUMENT_REQUIRED,
    ),
    EntityDefinition(
        key="routine",
        label="routine",
        id_prefix="routine",
        path="/routine",
        tag="routine",
        create_model=TitledFileCreate,
        update_model=TitledFileUpdate,
        file_rule=_DOCUMENT_REQUIRED,
    ),
)

ENTITIES_BY_KEY: dict[str, EntityDefinition] = {
    definition.key: definition for definition in ENTITY_DEFINITIONS
}


def get_entity_definition(key: str) -> EntityDefinition:
    try:
        return ENTITIES_BY_KEY[key]
    except KeyError as exc:
        raise KeyError(f"Unknown entity: {key!r}") from exc
