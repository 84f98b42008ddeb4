"""Login: rate limit, credential check, superadmin gate, token issuance, last-login and audit."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session, selectinload

from app.core.config import get_settings
from app.core.errors import AuthenticationError, AuthorizationError, ValidationError
from app.core.rate_limit import LoginRateLimiter
from app.core.security import (
    burn_password_check,
    create_access_token,
    normalize_email,
    verify_password,
)
from app.core.transaction import atomic
from app.models import User
from app.schemas.auth import LoginResponse, LoginUser
from app.services import audit
from app.services.audit import AuditAction

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def login(
    db: Session,
    limiter: LoginRateLimiter,
    email: str,
    password: str,
    client_id: str,
) -> LoginResponse:
    """
    Authenticate a superadmin and return a signed token plus a minimal user summary.

    Order matters: the rate limiter runs before any lookup, and an unknown email
    and a wrong password produce the same error after the same bcrypt work.
    A non-superadmin with valid credentials gets AuthorizationError and no audit entry.
    """
    if not email or not password:
        raise ValidationError("Email and password required")

    # Same canonical form the user was stored under, so lookup and rate-limit key agree.
    email = normalize_email(email)
    limiter.check(email, client_id)

    user = (
        db.query(User)
        .options(selectinload(User.roles))
        .filter(User.email == email)
        .first()
    )
    if user is None:
        burn_password_check(password)
        logger.warning("Login failed for client=%s: unknown email", client_id)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not verify_password(password, user.hashed_password):
        logger.warning("Login failed for user=%s client=%s: bad password", user.id, client_id)
        raise AuthenticationError(INVALID_CREDENTIALS)

    roles = user.role_names
    superadmin_role = get_settings().SUPERADMIN_ROLE
    if superadmin_role not in roles:
        logger.warning("Login refused for user=%s: missing role %s", user.id, superadmin_role)
        raise AuthorizationError(f"You need to be {superadmin_role} to login.")

    user_id, user_email = user.id, user.email
    token = create_access_token(sub=user_id, email=user_email, roles=roles)

    with atomic(db):
        user.last_login = datetime.now(UTC)

    audit.record_best_effort(
        db,
        AuditAction.AUTH_LOGIN,
        "User",
        user_id,
        details={"email": user_email},
        actor_user_id=user_id,
    )
    logger.info("Login succeeded for user=%s", user_id)
    return LoginResponse(token=token, user=LoginUser(id=user_id, email=user_email, roles=roles))
