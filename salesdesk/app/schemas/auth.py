from __future__ import annotations

import re
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from salesdesk.app.models.user import RoleEnum
from salesdesk.app.schemas.common import CamelModel

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(CamelModel):
    name: str | None = None
    email: str
    password: str = Field(min_length=6)
    role: RoleEnum | None = None

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)


class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=6)

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str | None) -> str | None:
        return _check_email(v) if v is not None else None


class UserOut(CamelModel):
    id: UUID
    name: str | None
    email: str
    role: RoleEnum
    last_login: datetime | None = None


class LoginResponse(CamelModel):
    token: str
    user: UserOut


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserOut


class UserStatsOut(CamelModel):
    invoices_created: int
    customers_added: int
    products_managed: int


class ActiveUsersOut(CamelModel):
    active_users: int
