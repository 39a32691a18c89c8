# This file defines request models for every content entity managed by the CMS.
# It exists so field shape and length rules are validated before any handler runs.
# Create models carry required fields; update models make every field optional for partial merges.
# File-backed entities receive these models as multipart form fields alongside the `file` part.

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, Field, field_validator

from src.api.schemas.common import CamelModel

Name = Annotated[str, Field(min_length=3, max_length=100)]
ShortName = Annotated[str, Field(min_length=1, max_length=50)]
Title = Annotated[str, Field(min_length=3, max_length=200)]
Category = Annotated[str, Field(min_length=3, max_length=100)]
Description = Annotated[str, Field(min_length=3, max_length=5000)]
Amount = Annotated[str, Field(min_length=1, max_length=10)]
DateText = Annotated[str, Field(min_length=3, max_length=20)]
Contact = Annotated[str, Field(min_length=3, max_length=1000)]
StudentName = Annotated[str, Field(min_length=3, max_length=30)]
StudentLevel = Annotated[str, Field(min_length=2, max_length=20)]
ImageLink = Annotated[str, Field(max_length=1024, pattern=r"[a-zA-Z0-9]+\.(jpg|png|jpeg|gif)$")]

# The dashboard summary reports the student total under this key.
RESERVED_ADMINISTRATION_CATEGORY = "student"


def _reject_reserved_category(value: str) -> str:
    if value.strip().lower() == RESERVED_ADMINISTRATION_CATEGORY:
        raise ValueError(f"category {value!r} is reserved")
    return value


AdministrationCategory = Annotated[Category, AfterValidator(_reject_reserved_category)]


class PartialUpdate(CamelModel):
    """Base for update models: blank strings mean "leave this field unchanged"."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AdministrationCreate(CamelModel):
    name: Name
    category: AdministrationCategory
    designation: Name


class AdministrationUpdate(PartialUpdate):
    name: Name | None = None
    category: AdministrationCategory | None = None
    designation: Name | None = None


class AnnouncementCreate(CamelModel):
    name: Title


class AnnouncementUpdate(PartialUpdate):
    name: Title | None = None


class StudentCreate(CamelModel):
    name: StudentName
    level: StudentLevel
    image: ImageLink | None = None


class StudentUpdate(PartialUpdate):
    name: StudentName | None = None
    level: StudentLevel | None = None
    image: ImageLink | None = None


class NamedItemCreate(CamelModel):
    """Shared by classes, levels and categories, whose only attribute is a unique name."""

    name: ShortName


class NamedItemUpdate(PartialUpdate):
    name: ShortName | None = None


class TitledFileCreate(CamelModel):
    """Downloads, notices, results, routines, admission forms, carousel slides and gallery images."""

    title: Title


class TitledFileUpdate(PartialUpdate):
    title: Title | None = None


class AdmissionInformationCreate(CamelModel):
    title: Title
    description: Annotated[str, Field(min_length=3, max_length=3000)]
    form_price: Amount
    admission_fee: Amount
    last_form_submission_date: DateText
    contact: Contact


class AdmissionInformationUpdate(PartialUpdate):
    title: Title | None = None
    description: Annotated[str, Field(min_length=3, max_length=3000)] | None = None
    form_price: Amount | None = None
    admission_fee: Amount | None = None
    last_form_submission_date: DateText | None = None
    contact: Contact | None = None


class ArticleCreate(CamelModel):
    """Blog posts, home page posts and "others information" pages."""

    title: Title
    category: Category
    description: Description


class ArticleUpdate(PartialUpdate):
    title: Title | None = None
    category: Category | None = None
    description: Description | None = None
