"""Response schema for the analytics summary."""

from app.schemas.base import CamelModel


class AnalyticsSummary(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    total_roles: int
    new_users: int
    users_by_role: dict[str, int]
    total_audit_logs: int
