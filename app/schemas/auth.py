"""Request/response schemas for auth endpoints."""

from pydantic import Field

from app.schemas.base import CamelModel


class LoginRequest(CamelModel):
    """Credentials for login. Both fields are required and non-empty."""

    email: str = Field(..., min_length=1, max_length=255, description="Email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class LoginUser(CamelModel):
    """Minimal user summary returned with the token (never the password hash)."""

    id: int
    email: str
    roles: list[str]


class LoginResponse(CamelModel):
    """JWT returned after successful login. Send it as: Authorization: Bearer <token>"""

    token: str = Field(..., description="JWT access token")
    user: LoginUser


class CurrentUser(CamelModel):
    """
    Request principal decoded from a verified token.

    roles is the snapshot taken at login; it is not re-read from storage.
    """

    id: int
    email: str
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        return role in self.roles
