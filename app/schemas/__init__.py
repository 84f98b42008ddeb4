"""Pydantic request/response schemas."""

from app.schemas.analytics import AnalyticsSummary
from app.schemas.audit_log import AuditActor, AuditLogListResponse, AuditLogOut
from app.schemas.auth import CurrentUser, LoginRequest, LoginResponse, LoginUser
from app.schemas.health import HealthResponse
from app.schemas.role import (
    AssignRoleRequest,
    AssignRoleResponse,
    RoleCreate,
    RoleOut,
    RoleUpdate,
    UserRoleOut,
)
from app.schemas.user import (
    DeletedUser,
    UserCreate,
    UserDeleteResponse,
    UserOut,
    UserUpdate,
)

__all__ = [
    "AnalyticsSummary",
    "AssignRoleRequest",
    "AssignRoleResponse",
    "AuditActor",
    "AuditLogListResponse",
    "AuditLogOut",
    "CurrentUser",
    "DeletedUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LoginUser",
    "RoleCreate",
    "RoleOut",
    "RoleUpdate",
    "UserCreate",
    "UserDeleteResponse",
    "UserOut",
    "UserRoleOut",
    "UserUpdate",
]
