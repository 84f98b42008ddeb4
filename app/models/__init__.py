"""SQLAlchemy ORM models."""

from app.models.audit_log import AuditLog
from app.models.base import Base
from app.models.role import Role
from app.models.user import User, UserRole

__all__ = ["AuditLog", "Base", "Role", "User", "UserRole"]
