"""Request/response schemas for user management."""

from datetime import datetime

from pydantic import EmailStr, Field, PositiveInt, field_validator

from app.core.security import NAME_MAX_LEN, NAME_MIN_LEN, check_password_strength
from app.schemas.base import CamelModel
from app.schemas.role import RoleOut


class UserCreate(CamelModel):
    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str
    role_ids: list[PositiveInt] = Field(default_factory=list)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        problem = check_password_strength(v)
        if problem:
            raise ValueError(problem)
        return v


class UserUpdate(CamelModel):
    """
    Partial update. Only fields present in the payload are applied.

    password: "" (or null) means keep the current password.
    role_ids: omitted leaves roles alone; [] removes every role.
    """

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    password: str | None = None
    role_ids: list[PositiveInt] | None = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        if not v:
            return v
        problem = check_password_strength(v)
        if problem:
            raise ValueError(problem)
        return v


class UserOut(CamelModel):
    """User with resolved roles. The password hash is never part of this schema."""

    id: int
    name: str
    email: str
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    roles: list[RoleOut] = Field(default_factory=list)


class DeletedUser(CamelModel):
    id: int
    name: str
    email: str


class UserDeleteResponse(CamelModel):
    message: str = "User deleted"
    user: DeletedUser
