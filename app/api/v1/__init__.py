"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import analytics, audit_logs, auth, health, roles, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/superadmin/users", tags=["users"])
router.include_router(roles.router, prefix="/superadmin/roles", tags=["roles"])
router.include_router(audit_logs.router, prefix="/superadmin/audit-logs", tags=["audit"])
router.include_router(analytics.router, prefix="/superadmin/analytics", tags=["analytics"])
