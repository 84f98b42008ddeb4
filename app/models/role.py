"""ORM model for roles (named bundles of permission strings)."""

from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.dialects.postgresql import JSONB

from app.models.base import Base


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    # Ordered list of capability strings, e.g. ["users:read", "users:create"]
    permissions = Column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
