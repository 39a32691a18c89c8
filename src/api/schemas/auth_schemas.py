# This file defines request models for admin login, signup, and password reset.
# It exists so credential fields are length-checked before the auth service runs.

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from src.api.schemas.common import CamelModel

UserName = Annotated[str, Field(min_length=3, max_length=20)]
Password = Annotated[str, Field(min_length=8, max_length=20)]


class LoginRequest(CamelModel):
    user_name: UserName
    password: Password


class SignupRequest(CamelModel):
    name: Annotated[str, Field(min_length=3, max_length=30)]
    user_name: UserName
    password: Password
    confirm_password: Password


class ResetPasswordRequest(CamelModel):
    old_password: Password
    new_password: Password
    confirm_new_password: Password
