"""Request/response schemas for roles and role assignment."""

from typing import Annotated

from pydantic import Field, PositiveInt

from app.core.security import NAME_MAX_LEN, NAME_MIN_LEN
from app.schemas.base import CamelModel

Permission = Annotated[str, Field(min_length=1, max_length=100)]


class RoleOut(CamelModel):
    id: int
    name: str
    permissions: list[str]


class RoleCreate(CamelModel):
    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    permissions: list[Permission] = Field(default_factory=list)


class RoleUpdate(CamelModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    permissions: list[Permission] | None = None


class AssignRoleRequest(CamelModel):
    user_id: PositiveInt
    role_id: PositiveInt


class UserRoleOut(CamelModel):
    id: int
    user_id: int
    role_id: int


class AssignRoleResponse(CamelModel):
    message: str = "Role assigned successfully"
    user_role: UserRoleOut
