"""Response schemas for the audit log listing."""

from datetime import datetime
from typing import Any

from app.schemas.base import CamelModel


class AuditActor(CamelModel):
    name: str
    email: str


class AuditLogOut(CamelModel):
    id: int
    actor_user_id: int | None = None
    action: str
    target_type: str
    target_id: str
    details: Any = None
    timestamp: datetime
    actor: AuditActor | None = None


class AuditLogListResponse(CamelModel):
    logs: list[AuditLogOut]
    total_count: int
