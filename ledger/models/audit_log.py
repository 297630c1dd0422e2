"""
Audit log database model.
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String

from ledger.database import Base
from ledger.models.account import utcnow


class AuditLog(Base):
    """
    Audit log table - immutable before/after snapshot of a mutation.
    ``user_id`` is the acting account, or NULL for system actions.
    """
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=True)
    action = Column(String(255), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), index=True, nullable=False)
    changes = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<AuditLog(action={self.action}, entity={self.entity_type}:{self.entity_id})>"
