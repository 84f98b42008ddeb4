"""Atomic unit of work over a Session, with storage errors translated to domain errors."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Substrings identifying a unique violation in SQLite ("users.email") and
# PostgreSQL ("ix_users_email", "Key (email)=...") error messages.
_EMAIL_MARKERS = ("users.email", "ix_users_email", "(email)")
_ROLE_NAME_MARKERS = ("roles.name", "ix_roles_name")


def translate_integrity_error(exc: IntegrityError) -> ServiceError:
    """Map a constraint violation to the domain error a caller can act on."""
    text = str(exc.orig).lower()
    if any(marker in text for marker in _EMAIL_MARKERS):
        return ConflictError("Email already exists", cause=exc)
    if any(marker in text for marker in _ROLE_NAME_MARKERS):
        return ConflictError("Role name already exists", cause=exc)
    if "foreign key" in text:
        return ValidationError("Referenced record does not exist", cause=exc)
    return InternalError("Internal server error", cause=exc)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block, or nothing.

    Any error rolls the whole transaction back. IntegrityError becomes a
    ConflictError/ValidationError, a vanished row becomes NotFoundError, and
    other storage failures become InternalError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e) from e
    except StaleDataError as e:
        db.rollback()
        raise NotFoundError("Record not found", cause=e) from e
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Transaction failed: %s", e)
        raise InternalError("Internal server error", cause=e) from e
    except Exception:
        db.rollback()
        raise
