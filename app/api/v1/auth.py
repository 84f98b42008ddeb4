"""Login route and the authorization gate dependencies (get_current_user, require_superadmin)."""

from typing import Annotated, Any

import jwt
from fastapi import APIRouter, Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import AuthenticationError, AuthorizationError
from app.core.rate_limit import LoginRateLimiter, get_login_rate_limiter
from app.core.security import decode_access_token
from app.schemas.auth import CurrentUser, LoginRequest, LoginResponse
from app.services import auth as auth_service

router = APIRouter()
# Missing and malformed Authorization headers get different errors, which HTTPBearer
# cannot tell apart; APIKeyHeader hands over the raw value and still shows in the OpenAPI docs.
bearer_header = APIKeyHeader(
    name="Authorization",
    scheme_name="BearerToken",
    description="Bearer <token> from POST /auth/login",
    auto_error=False,
)


def client_identity(request: Request) -> str:
    """Network identity of the caller, used in the login rate-limit key."""
    return request.client.host if request.client else "unknown"


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    limiter: Annotated[LoginRateLimiter, Depends(get_login_rate_limiter)],
) -> LoginResponse:
    """
    Authenticate with email and password; only superadmins may log in.
    Include the token in the Authorization header as: Bearer <token>
    """
    return auth_service.login(
        db,
        limiter,
        email=body.email,
        password=body.password,
        client_id=client_identity(request),
    )


def principal_from_claims(payload: dict[str, Any]) -> CurrentUser:
    """Build the request principal from verified claims (id, falling back to sub); roles become a list of names."""
    raw_id = payload.get("id", payload.get("sub"))
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")
    roles = payload.get("roles") or []
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise AuthenticationError("Invalid token payload")
    return CurrentUser(id=user_id, email=str(payload.get("email", "")), roles=roles)


def get_current_user(
    authorization: Annotated[str | None, Depends(bearer_header)],
) -> CurrentUser:
    """
    Dependency: verify the Bearer token and return its claims as the principal.

    Claims are trusted as issued; roles are the snapshot taken at login.
    """
    if not authorization:
        raise AuthenticationError("Missing token")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise AuthenticationError("Invalid token format")
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")
    return principal_from_claims(payload)


def ensure_role(principal: CurrentUser | None, role: str) -> CurrentUser:
    """Raise AuthenticationError without a principal, AuthorizationError without the role."""
    if principal is None:
        raise AuthenticationError("Unauthorized")
    if not principal.has_role(role):
        raise AuthorizationError(f"{role.capitalize()} role required")
    return principal


def require_superadmin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require an authenticated principal holding the superadmin role (403 otherwise)."""
    return ensure_role(current_user, get_settings().SUPERADMIN_ROLE)


SuperAdmin = Annotated[CurrentUser, Depends(require_superadmin)]
