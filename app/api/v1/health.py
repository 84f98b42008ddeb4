"""Health check endpoint with database and rate-limit storage checks."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.core.rate_limit import LoginRateLimiter, get_login_rate_limiter
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    limiter: Annotated[LoginRateLimiter, Depends(get_login_rate_limiter)],
) -> HealthResponse:
    """
    Return service health, database connectivity and whether the login
    rate-limit storage answers. Used by load balancers and monitoring.
    """
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        rate_limiter="connected" if limiter.storage_available() else "disconnected",
    )
