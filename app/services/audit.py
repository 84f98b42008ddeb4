"""Append-only audit trail: record entries and page through them."""

import logging
from enum import Enum
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models import AuditLog, User

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    AUTH_LOGIN = "AUTH_LOGIN"
    USER_CREATE = "USER_CREATE"
    USER_UPDATE = "USER_UPDATE"
    USER_DELETE = "USER_DELETE"
    ROLE_CREATE = "ROLE_CREATE"
    ROLE_UPDATE = "ROLE_UPDATE"
    ROLE_ASSIGN = "ROLE_ASSIGN"
    SYSTEM_SEED = "SYSTEM_SEED"


def record(
    db: Session,
    action: AuditAction,
    target_type: str,
    target_id: str | int,
    details: dict[str, Any] | None = None,
    actor_user_id: int | None = None,
) -> AuditLog:
    """
    Add an audit entry to the session's open transaction.

    Does not commit: the entry lands or vanishes together with the action it
    describes when the caller's transaction commits or rolls back.
    """
    entry = AuditLog(
        actor_user_id=actor_user_id,
        action=action.value,
        target_type=target_type,
        target_id=str(target_id),
        details=details,
    )
    db.add(entry)
    return entry


def record_best_effort(
    db: Session,
    action: AuditAction,
    target_type: str,
    target_id: str | int,
    details: dict[str, Any] | None = None,
    actor_user_id: int | None = None,
) -> bool:
    """
    Record and commit an entry for an action that has already committed.

    Failures are logged and swallowed so they never overturn the primary action.
    Returns True when the entry was stored.
    """
    try:
        record(db, action, target_type, target_id, details, actor_user_id)
        db.commit()
        return True
    except Exception:
        db.rollback()
        logger.exception(
            "Audit log failed: action=%s target=%s:%s", action.value, target_type, target_id
        )
        return False


def list_audit_logs(
    db: Session,
    skip: int = 0,
    take: int = 20,
    search_term: str | None = None,
) -> tuple[list[AuditLog], int]:
    """
    Newest-first page of audit entries and the total matching count.

    search_term matches (substring) target type, target id, actor name or actor email.
    """
    query = db.query(AuditLog).outerjoin(User, AuditLog.actor_user_id == User.id)
    if search_term:
        query = query.filter(
            or_(
                AuditLog.target_type.contains(search_term, autoescape=True),
                AuditLog.target_id.contains(search_term, autoescape=True),
                User.name.contains(search_term, autoescape=True),
                User.email.contains(search_term, autoescape=True),
            )
        )
    total = query.with_entities(func.count(AuditLog.id)).scalar() or 0
    logs = (
        query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(skip)
        .limit(take)
        .all()
    )
    return logs, total
