"""Superadmin user management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import SuperAdmin
from app.core.database import get_db
from app.schemas.user import UserCreate, UserDeleteResponse, UserOut, UserUpdate
from app.services import users as user_service

router = APIRouter()


@router.get("", response_model=list[UserOut])
def list_users(
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
    skip: Annotated[int, Query(ge=0)] = 0,
    take: Annotated[int, Query(ge=1, le=100)] = user_service.DEFAULT_PAGE_SIZE,
) -> list[UserOut]:
    """List users, newest first, with their roles."""
    users = user_service.list_users(db, skip=skip, take=take)
    return [UserOut.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    return UserOut.model_validate(user_service.get_user(db, user_id))


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """Create a user with an optional role set; audited as USER_CREATE."""
    user = user_service.create_user(db, body, actor_user_id=admin.id)
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserUpdate,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """
    Partial update. Send roleIds to replace the role set ([] clears it);
    omit it to keep the current roles. An empty password keeps the current one.
    """
    user = user_service.update_user(db, user_id, body, actor_user_id=admin.id)
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=UserDeleteResponse)
def delete_user(
    user_id: int,
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> UserDeleteResponse:
    deleted = user_service.delete_user(db, user_id, actor_user_id=admin.id)
    return UserDeleteResponse(user=deleted)
