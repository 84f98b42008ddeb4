"""Superadmin role management and role assignment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import SuperAdmin
from app.core.database import get_db
from app.schemas.role import (
    AssignRoleRequest,
    AssignRoleResponse,
    RoleCreate,
    RoleOut,
    RoleUpdate,
    UserRoleOut,
)
from app.services import roles as role_service

router = APIRouter()


@router.get("", response_model=list[RoleOut])
def list_roles(
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> list[RoleOut]:
    return [RoleOut.model_validate(r) for r in role_service.list_roles(db)]


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> RoleOut:
    return RoleOut.model_validate(role_service.create_role(db, body, actor_user_id=admin.id))


@router.put("/{role_id}", response_model=RoleOut)
def update_role(
    role_id: int,
    body: RoleUpdate,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> RoleOut:
    return RoleOut.model_validate(
        role_service.update_role(db, role_id, body, actor_user_id=admin.id)
    )


@router.post("/assign-role", response_model=AssignRoleResponse)
def assign_role(
    body: AssignRoleRequest,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> AssignRoleResponse:
    """Give a user a role; assigning a role the user already holds is a no-op."""
    link = role_service.assign_role(db, body.user_id, body.role_id, actor_user_id=admin.id)
    return AssignRoleResponse(user_role=UserRoleOut.model_validate(link))
