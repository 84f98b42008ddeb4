"""Superadmin audit log listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import SuperAdmin
from app.core.database import get_db
from app.schemas.audit_log import AuditLogListResponse, AuditLogOut
from app.services import audit as audit_service

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
def list_audit_logs(
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
    skip: Annotated[int, Query(ge=0)] = 0,
    take: Annotated[int, Query(ge=1, le=100)] = 20,
    search_term: Annotated[str | None, Query(alias="searchTerm", max_length=255)] = None,
) -> AuditLogListResponse:
    """Newest entries first; searchTerm matches target type/id and actor name/email."""
    logs, total = audit_service.list_audit_logs(db, skip=skip, take=take, search_term=search_term)
    return AuditLogListResponse(
        logs=[AuditLogOut.model_validate(entry) for entry in logs],
        total_count=total,
    )
