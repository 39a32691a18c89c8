# This file builds the create/list/read/update/delete routes for every registered content entity.
# It exists so one route factory serves all entities instead of one near-identical module per entity.
# Plain entities take JSON bodies; file-backed entities take multipart forms with a `file` part.
# Handlers only collect inputs and render the service result through the envelope adapter.

import inspect
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Body, Depends, File, Form, Path, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.dependencies import CurrentAdminId, get_content_services
from src.api.entities import ENTITY_DEFINITIONS, EntityDefinition, FileRule
from src.api.response_envelope import envelope_response
from src.api.schemas.common import CamelModel, EnvelopeResponse
from src.api.services.entity_service import EntityService
from src.api.storage import UploadedFile


def form_dependency(model: type[CamelModel]) -> Callable[..., CamelModel]:
    """Build a dependency that reads `model`'s fields from multipart form data."""

    parameters = [
        inspect.Parameter(
            name,
            inspect.Parameter.KEYWORD_ONLY,
            default=Form(None, alias=field.alias or name),
            annotation=str | None,
        )
        for name, field in model.model_fields.items()
    ]

    def parse_form(**values: str | None) -> CamelModel:
        provided = {name: value for name, value in values.items() if value not in (None, "")}
        try:
            return model.model_validate(provided)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    parse_form.__signature__ = inspect.Signature(parameters)  # type: ignore[attr-defined]
    return parse_form


def read_upload(file: UploadFile | None, rule: FileRule) -> UploadedFile | None:
    """Read at most one byte past the size limit; oversize uploads are rejected from that prefix."""

    if file is None or not file.filename:
        return None
    return UploadedFile(
        file_name=file.filename,
        content=file.file.read(rule.max_size_bytes + 1),
        content_type=file.content_type,
    )


def _service_dependency(key: str) -> Callable[..., EntityService]:
    def get_service(
        services: Annotated[dict[str, EntityService], Depends(get_content_services)],
    ) -> EntityService:
        return services[key]

    return get_service


def build_entity_router(definition: EntityDefinition) -> APIRouter:
    router = APIRouter(prefix=definition.path, tags=[definition.tag])
    ServiceDep = Annotated[EntityService, Depends(_service_dependency(definition.key))]
    RecordId = Annotated[
        str,
        Path(pattern=definition.id_pattern, description=f"{definition.label} id"),
    ]
    responses = {"response_model": EnvelopeResponse}

    if definition.file_rule is not None:
        file_rule = definition.file_rule
        CreateDetails = Annotated[CamelModel, Depends(form_dependency(definition.create_model))]
        UpdateDetails = Annotated[CamelModel, Depends(form_dependency(definition.update_model))]

        @router.post("", **responses)
        def create_record(
            admin_id: CurrentAdminId,
            service: ServiceDep,
            details: CreateDetails,
            file: Annotated[UploadFile | None, File()] = None,
        ) -> JSONResponse:
            result = service.create(admin_id=admin_id, details=details, file=read_upload(file, file_rule))
            return envelope_response(result)

        @router.put("/{record_id}", **responses)
        def update_record(
            admin_id: CurrentAdminId,
            record_id: RecordId,
            service: ServiceDep,
            details: UpdateDetails,
            file: Annotated[UploadFile | None, File()] = None,
        ) -> JSONResponse:
            result = service.update(
                admin_id=admin_id,
                record_id=record_id,
                details=details,
                file=read_upload(file, file_rule),
            )
            return envelope_response(result)

    else:
        create_model = definition.create_model
        update_model = definition.update_model

        @router.post("", **responses)
        def create_record(
            admin_id: CurrentAdminId,
            service: ServiceDep,
            details: Annotated[create_model, Body()],
        ) -> JSONResponse:
            return envelope_response(service.create(admin_id=admin_id, details=details))

        @router.put("/{record_id}", **responses)
        def update_record(
            admin_id: CurrentAdminId,
            record_id: RecordId,
            service: ServiceDep,
            details: Annotated[update_model, Body()],
        ) -> JSONResponse:
            return envelope_response(
                service.update(admin_id=admin_id, record_id=record_id, details=details)
            )

    if definition.filterable_fields:
        filter_field = definition.filterable_fields[0]

        @router.get("", **responses)
        def list_records(
            service: ServiceDep,
            value: Annotated[str | None, Query(alias=filter_field, max_length=100)] = None,
        ) -> JSONResponse:
            return envelope_response(service.list_records(filters={filter_field: value}))

    else:

        @router.get("", **responses)
        def list_records(service: ServiceDep) -> JSONResponse:
            return envelope_response(service.list_records())

    @router.get("/{record_id}", **responses)
    def get_record(record_id: RecordId, service: ServiceDep) -> JSONResponse:
        return envelope_response(service.get_one(record_id))

    @router.delete("/{record_id}", **responses)
    def delete_record(
        admin_id: CurrentAdminId,
        record_id: RecordId,
        service: ServiceDep,
    ) -> JSONResponse:
        return envelope_response(service.delete(admin_id=admin_id, record_id=record_id))

    return router


entity_routers: list[APIRouter] = [build_entity_router(definition) for definition in ENTITY_DEFINITIONS]
