"""Role CRUD and direct, idempotent role assignment."""

import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.transaction import atomic
from app.models import Role, User, UserRole
from app.schemas.role import RoleCreate, RoleUpdate
from app.services import audit
from app.services.audit import AuditAction

logger = logging.getLogger(__name__)

TARGET_ROLE = "Role"
TARGET_USER = "User"

# Dialects whose INSERT supports ON CONFLICT DO NOTHING.
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.id).all()


def get_role(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return role


def create_role(db: Session, payload: RoleCreate, actor_user_id: int | None) -> Role:
    """Insert a role; a duplicate name raises ConflictError."""
    with atomic(db):
        role = Role(name=payload.name, permissions=list(payload.permissions))
        db.add(role)
        db.flush()
        role_id = role.id
        audit.record(
            db,
            AuditAction.ROLE_CREATE,
            TARGET_ROLE,
            role_id,
            details={"name": payload.name, "permissions": list(payload.permissions)},
            actor_user_id=actor_user_id,
        )
    logger.info("Role created: id=%s name=%s actor=%s", role_id, payload.name, actor_user_id)
    return get_role(db, role_id)


def update_role(
    db: Session,
    role_id: int,
    payload: RoleUpdate,
    actor_user_id: int | None,
) -> Role:
    """Apply the supplied fields only; unknown id raises NotFoundError."""
    role = get_role(db, role_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    with atomic(db):
        if "name" in changes:
            role.name = changes["name"]
        if "permissions" in changes:
            role.permissions = list(changes["permissions"])
        audit.record(
            db,
            AuditAction.ROLE_UPDATE,
            TARGET_ROLE,
            role_id,
            details=changes,
            actor_user_id=actor_user_id,
        )
    logger.info("Role updated: id=%s fields=%s actor=%s", role_id, sorted(changes), actor_user_id)
    return get_role(db, role_id)


def _link_user_role(db: Session, user_id: int, role_id: int) -> None:
    """Insert the (user, role) link unless it already exists."""
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        exists = (
            db.query(UserRole.id)
            .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
            .first()
        )
        if exists is None:
            db.add(UserRole(user_id=user_id, role_id=role_id))
        return
    stmt = (
        insert(UserRole)
        .values(user_id=user_id, role_id=role_id)
        .on_conflict_do_nothing(index_elements=["user_id", "role_id"])
    )
    db.execute(stmt)


def assign_role(
    db: Session,
    user_id: int,
    role_id: int,
    actor_user_id: int | None,
) -> UserRole:
    """
    Give a user a role. Re-assigning a held role is a no-op, not an error.

    The link and the ROLE_ASSIGN audit entry commit together.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")
    get_role(db, role_id)

    with atomic(db):
        _link_user_role(db, user_id, role_id)
        audit.record(
            db,
            AuditAction.ROLE_ASSIGN,
            TARGET_USER,
            user_id,
            details={"roleId": role_id},
            actor_user_id=actor_user_id,
        )

    logger.info("Role assigned: user=%s role=%s actor=%s", user_id, role_id, actor_user_id)
    return (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
        .one()
    )
