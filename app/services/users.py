"""
User create/update/delete together with the user's role set and audit trail.

Every mutation runs in a single transaction: the user row, its UserRole rows and
the audit entry commit together or not at all. Input validation and role
existence checks happen before the transaction opens, so a rejected request
writes nothing.
"""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFoundError, ValidationError
from app.core.security import hash_password
from app.core.transaction import atomic
from app.models import Role, User, UserRole
from app.schemas.user import DeletedUser, UserCreate, UserUpdate
from app.services import audit
from app.services.audit import AuditAction

logger = logging.getLogger(__name__)

TARGET_USER = "User"
DEFAULT_PAGE_SIZE = 20
REDACTED = "[REDACTED]"


def _dedupe(role_ids: list[int]) -> list[int]:
    return list(dict.fromkeys(role_ids))


def validate_role_ids(db: Session, role_ids: list[int]) -> None:
    """Raise ValidationError unless every id refers to an existing role."""
    if not role_ids:
        return
    found = db.query(func.count(Role.id)).filter(Role.id.in_(role_ids)).scalar()
    if found != len(set(role_ids)):
        raise ValidationError("Some roles do not exist")


def _insert_role_links(db: Session, user_id: int, role_ids: list[int]) -> None:
    if role_ids:
        db.add_all([UserRole(user_id=user_id, role_id=role_id) for role_id in role_ids])


def _audit_payload(payload: UserUpdate) -> dict[str, Any]:
    """The update payload as submitted (camelCase), with any new password masked."""
    data = payload.model_dump(mode="json", exclude_unset=True, by_alias=True)
    if data.get("password"):
        data["password"] = REDACTED
    return data


def get_user(db: Session, user_id: int) -> User:
    user = (
        db.query(User)
        .options(selectinload(User.roles))
        .filter(User.id == user_id)
        .first()
    )
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session, skip: int = 0, take: int = DEFAULT_PAGE_SIZE) -> list[User]:
    """Newest users first, each with resolved roles."""
    return (
        db.query(User)
        .options(selectinload(User.roles))
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(skip)
        .limit(take)
        .all()
    )


def create_user(db: Session, payload: UserCreate, actor_user_id: int | None) -> User:
    """
    Insert a user, its role links and a USER_CREATE audit entry atomically.

    Raises ValidationError for unknown role ids and ConflictError when the email is taken.
    """
    role_ids = _dedupe(payload.role_ids)
    validate_role_ids(db, role_ids)
    hashed = hash_password(payload.password)

    with atomic(db):
        user = User(name=payload.name, email=payload.email, hashed_password=hashed)
        db.add(user)
        db.flush()
        user_id = user.id
        _insert_role_links(db, user_id, role_ids)
        audit.record(
            db,
            AuditAction.USER_CREATE,
            TARGET_USER,
            user_id,
            details={"name": payload.name, "email": payload.email, "roles": role_ids},
            actor_user_id=actor_user_id,
        )

    logger.info("User created: id=%s roles=%s actor=%s", user_id, role_ids, actor_user_id)
    return get_user(db, user_id)


def update_user(
    db: Session,
    user_id: int,
    payload: UserUpdate,
    actor_user_id: int | None,
) -> User:
    """
    Apply a partial update and, if role_ids was supplied, replace the role set.

    The role set is replaced by delete-then-insert inside the same transaction,
    so readers never see the intermediate empty set. An empty list removes all
    roles; omitting role_ids keeps them.
    """
    replace_roles = "role_ids" in payload.model_fields_set and payload.role_ids is not None
    role_ids = _dedupe(payload.role_ids) if replace_roles else []
    validate_role_ids(db, role_ids)

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    hashed = hash_password(payload.password) if payload.password else None

    with atomic(db):
        if payload.name:
            user.name = payload.name
        if payload.email:
            user.email = payload.email
        if hashed:
            user.hashed_password = hashed
        if replace_roles:
            db.query(UserRole).filter(UserRole.user_id == user_id).delete(
                synchronize_session=False
            )
            _insert_role_links(db, user_id, role_ids)
        audit.record(
            db,
            AuditAction.USER_UPDATE,
            TARGET_USER,
            user_id,
            details=_audit_payload(payload),
            actor_user_id=actor_user_id,
        )

    logger.info(
        "User updated: id=%s fields=%s actor=%s",
        user_id,
        sorted(payload.model_fields_set),
        actor_user_id,
    )
    return get_user(db, user_id)


def delete_user(db: Session, user_id: int, actor_user_id: int | None) -> DeletedUser:
    """
    Hard-delete a user (role links cascade) and write USER_DELETE in the same transaction.

    The returned snapshot is taken before the row disappears.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if actor_user_id is not None and actor_user_id == user_id:
        raise ValidationError("You cannot delete your own account")

    deleted = DeletedUser(id=user.id, name=user.name, email=user.email)

    with atomic(db):
        db.delete(user)
        db.flush()
        audit.record(
            db,
            AuditAction.USER_DELETE,
            TARGET_USER,
            user_id,
            details={"name": deleted.name, "email": deleted.email},
            actor_user_id=actor_user_id,
        )

    logger.info("User deleted: id=%s actor=%s", user_id, actor_user_id)
    return deleted
