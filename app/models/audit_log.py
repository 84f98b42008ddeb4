"""ORM model for the append-only audit trail."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.models.base import Base


class AuditLog(Base):
    """
    Immutable record of a mutating action: who did it (actor, null for system
    actions), what kind (action tag), and what it targeted.

    actor_user_id is SET NULL when the actor is deleted so the trail survives.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(64), nullable=False, index=True)
    target_type = Column(String(64), nullable=False)
    target_id = Column(String(255), nullable=False)
    details = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    actor = relationship("User", foreign_keys=[actor_user_id], lazy="joined")
