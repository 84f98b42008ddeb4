"""Superadmin analytics summary."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import SuperAdmin
from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.analytics import AnalyticsSummary
from app.services.analytics import get_summary

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
def summary(
    admin: SuperAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> AnalyticsSummary:
    return get_summary(db, window_days=get_settings().ACTIVE_USER_DAYS)
