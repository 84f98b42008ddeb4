"""
Seed the base roles and the first superadmin (there is no registration UI). Run from project root:
  python -m app.scripts.seed [--email EMAIL] [--password PASSWORD] [--name NAME]
Example:
  python -m app.scripts.seed --email admin@example.com --password 'Your-secure-pass1!'

Idempotent: existing roles, user and role link are left as they are.
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import ServiceError
from app.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    check_password_strength,
    hash_password,
    normalize_email,
)
from app.core.transaction import atomic
from app.models import Role, User, UserRole
from app.services import audit
from app.services.audit import AuditAction

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

SUPERADMIN_PERMISSIONS = [
    "users:read", "users:create", "users:update", "users:delete",
    "roles:read", "roles:create", "roles:update", "roles:assign",
    "audit:read", "analytics:read", "settings:read", "settings:update",
]
STAFF_ROLE = "staff"
STAFF_PERMISSIONS = ["users:read"]


def _get_or_create_role(db: Session, name: str, permissions: list[str]) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, permissions=permissions)
        db.add(role)
        db.flush()
    return role


def seed(db: Session, name: str, email: str, password: str) -> User:
    """Create superadmin + staff roles, the superadmin user and its link, plus one SYSTEM_SEED entry."""
    superadmin_role = get_settings().SUPERADMIN_ROLE
    email = normalize_email(email)
    with atomic(db):
        super_role = _get_or_create_role(db, superadmin_role, SUPERADMIN_PERMISSIONS)
        _get_or_create_role(db, STAFF_ROLE, STAFF_PERMISSIONS)

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(name=name, email=email, hashed_password=hash_password(password))
            db.add(user)
            db.flush()

        link = (
            db.query(UserRole)
            .filter(UserRole.user_id == user.id, UserRole.role_id == super_role.id)
            .first()
        )
        if link is None:
            db.add(UserRole(user_id=user.id, role_id=super_role.id))

        audit.record(
            db,
            AuditAction.SYSTEM_SEED,
            "SYSTEM",
            "INIT",
            details={"note": f"Database seeded with {superadmin_role} + base roles"},
            actor_user_id=user.id,
        )
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed base roles and a superadmin user.")
    parser.add_argument("--name", default="Super Admin", help="Display name (2-50 chars)")
    parser.add_argument("--email", default="superadmin@example.com", help="Login email")
    parser.add_argument("--password", default="Test1234!", help="Password (8+ chars, mixed case, digit, special)")
    args = parser.parse_args(argv)

    name = args.name.strip()
    try:
        email = normalize_email(args.email, strict=True)
    except ValueError as e:
        print(f"Invalid email: {e}", file=sys.stderr)
        return 1
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        print(f"Name must be {NAME_MIN_LEN}-{NAME_MAX_LEN} characters.", file=sys.stderr)
        return 1
    problem = check_password_strength(args.password)
    if problem:
        print(problem, file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = seed(db, name, email, args.password)
        logger.info("Seed complete. Login email: %s", user.email)
        return 0
    except ServiceError as e:
        logger.error("Seed failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
