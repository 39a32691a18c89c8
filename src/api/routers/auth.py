# This file defines admin authentication endpoints: login, signup, password reset, and account removal.
# It exists so credential flows share the same envelope and error handling as content routes.
# Reset and delete require a bearer token issued to the same admin named in the path.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from src.api.dependencies import CurrentAdminId, get_auth_service
from src.api.response_envelope import envelope_response
from src.api.schemas.auth_schemas import LoginRequest, ResetPasswordRequest, SignupRequest
from src.api.schemas.common import EnvelopeResponse
from src.api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AdminIdPath = Annotated[str, Path(pattern=r"^admin-\w+$")]


@router.post("/login", response_model=EnvelopeResponse)
def login(payload: LoginRequest, service: AuthServiceDep) -> JSONResponse:
    return envelope_response(service.login(payload))


@router.post("/signup", response_model=EnvelopeResponse)
def signup(payload: SignupRequest, service: AuthServiceDep) -> JSONResponse:
    return envelope_response(service.signup(payload))


@router.put("/reset-password/{admin_id}", response_model=EnvelopeResponse)
def reset_password(
    requester_id: CurrentAdminId,
    admin_id: AdminIdPath,
    payload: ResetPasswordRequest,
    service: AuthServiceDep,
) -> JSONResponse:
    return envelope_response(
        service.reset_password(requester_id=requester_id, admin_id=admin_id, request=payload)
    )


@router.delete("/delete-user/{admin_id}", response_model=EnvelopeResponse)
def delete_user(
    requester_id: CurrentAdminId,
    admin_id: AdminIdPath,
    service: AuthServiceDep,
) -> JSONResponse:
    return envelope_response(service.delete_admin(requester_id=requester_id, admin_id=admin_id))
