# This file defines the dashboard endpoints used by the admin panel landing page.
# It exists so count aggregations are exposed behind the same bearer-token check as mutations.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import CurrentAdminId, get_dashboard_service
from src.api.response_envelope import envelope_response
from src.api.schemas.common import EnvelopeResponse
from src.api.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]


@router.get("/summary", response_model=EnvelopeResponse)
def summary(
    admin_id: CurrentAdminId,
    service: DashboardServiceDep,
    filter_by: Annotated[str | None, Query(alias="filterBy", max_length=100)] = None,
) -> JSONResponse:
    return envelope_response(service.summary(admin_id=admin_id, filter_by=filter_by))


@router.get("/details", response_model=EnvelopeResponse)
def details(
    admin_id: CurrentAdminId,
    service: DashboardServiceDep,
    collection: Annotated[str | None, Query(max_length=100)] = None,
) -> JSONResponse:
    return envelope_response(service.details(admin_id=admin_id, collection=collection))
