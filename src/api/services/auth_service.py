# This file implements admin account operations: login, signup, password reset, and removal.
# It exists so credential checks and token issuing stay out of the router.
# Password hashes and ids are never returned to clients.

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from src.api.api_config import ApiConfig
from src.api.repository import AdminRepository
from src.api.response_envelope import public_record
from src.api.results import ErrorKind, ServiceResult, service_operation
from src.api.schemas.auth_schemas import LoginRequest, ResetPasswordRequest, SignupRequest
from src.api.security import create_access_token, hash_password, verify_password
from src.api.services.entity_service import utc_now

LOGGER = logging.getLogger("cms.auth")

ADMIN_ID_PREFIX = "admin"
PASSWORD_MISMATCH_MESSAGE = "Password did not match"


class AuthService:
    def __init__(
        self,
        *,
        config: ApiConfig,
        admins: AdminRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config
        self.admins = admins
        self.clock = clock

    @service_operation
    def login(self, request: LoginRequest) -> ServiceResult:
        admin = self.admins.find_by_user_name(request.user_name)
        if admin is None or not verify_password(request.password, admin["password_hash"]):
            LOGGER.info("Failed login for %s", request.user_name)
            return ServiceResult.fail(ErrorKind.UNAUTHORIZED, "Unauthorized")

        token = create_access_token(admin=admin, config=self.config, now=self.clock())
        data = {"name": admin["name"], "userName": admin["user_name"], "token": token}
        return ServiceResult.ok(data, "Authorized")

    @service_operation
    def signup(self, request: SignupRequest) -> ServiceResult:
        if not self.config.signup_enabled:
            return ServiceResult.fail(ErrorKind.FORBIDDEN, "Signup is disabled")
        return self.register(request)

    @service_operation
    def register(self, request: SignupRequest) -> ServiceResult:
        """Create an admin account regardless of the signup toggle."""

        if request.password != request.confirm_password:
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, PASSWORD_MISMATCH_MESSAGE)
        if self.admins.find_by_user_name(request.user_name) is not None:
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{request.user_name} already exists")

        admin_id = self.admins.insert_with_generated_id(
            ADMIN_ID_PREFIX,
            {
                "name": request.name,
                "user_name": request.user_name,
                "password_hash": hash_password(request.password),
                "created_at": self.clock(),
            },
        )
        LOGGER.info("Created admin %s (%s)", admin_id, request.user_name)
        latest = public_record(self.admins.find_by_id(admin_id) or {})
        latest.pop("id", None)
        return ServiceResult.ok(latest, f"{request.user_name} created successfully")

    @service_operation
    def reset_password(
        self,
        *,
        requester_id: str,
        admin_id: str,
        request: ResetPasswordRequest,
    ) -> ServiceResult:
        if requester_id != admin_id:
            return ServiceResult.forbidden()
        admin = self.admins.find_by_id(admin_id)
        if admin is None:
            return ServiceResult.forbidden()
        if request.new_password != request.confirm_new_password:
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, PASSWORD_MISMATCH_MESSAGE)
        if not verify_password(request.old_password, admin["password_hash"]):
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, "Wrong password")

        modified = self.admins.update_by_id(
            admin_id,
            {"password_hash": hash_password(request.new_password), "modified_at": self.clock()},
        )
        if not modified:
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{admin_id} not updated")
        LOGGER.info("Password reset for admin %s", admin_id)
        return ServiceResult.ok({}, f"{admin_id} updated successfully")

    @service_operation
    def delete_admin(self, *, requester_id: str, admin_id: str) -> ServiceResult:
        if requester_id != admin_id or not self.admins.is_valid_request(admin_id):
            return ServiceResult.forbidden()
        if not self.admins.delete_by_id(admin_id):
            return ServiceResult.fail(ErrorKind.UNPROCESSABLE, f"{admin_id} could not be deleted")
        LOGGER.info("Deleted admin %s", admin_id)
        return ServiceResult.ok({}, f"{admin_id} deleted successfully")
