"""Read-only aggregate counts for the dashboard."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import AuditLog, Role, User, UserRole
from app.schemas.analytics import AnalyticsSummary


def get_summary(db: Session, window_days: int = 7) -> AnalyticsSummary:
    """
    Totals plus activity in the trailing window.

    active: lastLogin within window_days; new: created within window_days.
    """
    since = datetime.now(UTC) - timedelta(days=window_days)

    total_users = db.query(func.count(User.id)).scalar() or 0
    active_users = db.query(func.count(User.id)).filter(User.last_login >= since).scalar() or 0
    new_users = db.query(func.count(User.id)).filter(User.created_at >= since).scalar() or 0
    total_roles = db.query(func.count(Role.id)).scalar() or 0
    total_audit_logs = db.query(func.count(AuditLog.id)).scalar() or 0

    rows = (
        db.query(Role.name, func.count(UserRole.user_id))
        .join(UserRole, UserRole.role_id == Role.id)
        .group_by(Role.name)
        .all()
    )

    return AnalyticsSummary(
        total_users=total_users,
        active_users=active_users,
        inactive_users=total_users - active_users,
        total_roles=total_roles,
        new_users=new_users,
        users_by_role={name: count for name, count in rows},
        total_audit_logs=total_audit_logs,
    )
