"""Shared helpers: fresh in-memory schema, seeded rows and bearer headers."""

import unittest
from datetime import datetime

from sqlalchemy.orm import Session

from app.core.database import SessionLocal, engine
from app.core.rate_limit import get_login_rate_limiter
from app.core.security import create_access_token, hash_password
from app.models import AuditLog, Base, Role, User, UserRole

API = "/api/v1"
STRONG_PASSWORD = "Test1234!"


def reset_database() -> None:
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


def make_role(db: Session, name: str, permissions: list[str] | None = None) -> Role:
    role = Role(name=name, permissions=permissions or [])
    db.add(role)
    db.commit()
    return role


def make_user(
    db: Session,
    email: str,
    roles: list[Role] | None = None,
    name: str = "Test User",
    password: str = STRONG_PASSWORD,
) -> User:
    user = User(name=name, email=email, hashed_password=hash_password(password))
    db.add(user)
    db.flush()
    for role in roles or []:
        db.add(UserRole(user_id=user.id, role_id=role.id))
    db.commit()
    return user


def bearer(user_id: int, email: str, roles: list[str], now: datetime | None = None) -> dict[str, str]:
    token = create_access_token(sub=user_id, email=email, roles=roles, now=now)
    return {"Authorization": f"Bearer {token}"}


def audit_actions(db: Session, target_id: int | str | None = None) -> list[str]:
    query = db.query(AuditLog)
    if target_id is not None:
        query = query.filter(AuditLog.target_id == str(target_id))
    return [entry.action for entry in query.order_by(AuditLog.id).all()]


class DatabaseTestCase(unittest.TestCase):
    """
    Fresh schema per test, with a superadmin role/user and a staff role.

    self.db is for setup and assertions; close or commit before making API calls,
    since every session shares the one in-memory connection.
    """

    def setUp(self) -> None:
        reset_database()
        get_login_rate_limiter().reset()
        self.db = SessionLocal()
        self.superadmin_role = make_role(self.db, "superadmin", ["users:read", "users:create"])
        self.staff_role = make_role(self.db, "staff", ["users:read"])
        self.admin = make_user(
            self.db, "superadmin@example.com", roles=[self.superadmin_role], name="Super Admin"
        )
        self.admin_id = self.admin.id
        self.superadmin_role_id = self.superadmin_role.id
        self.staff_role_id = self.staff_role.id
        self.db.close()

    def tearDown(self) -> None:
        self.db.close()

    def admin_headers(self) -> dict[str, str]:
        return bearer(self.admin_id, "superadmin@example.com", ["superadmin"])
