"""
Audit recorder.

Entries are added to the caller's session and become durable only when the
enclosing atomic unit commits.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ledger.models.audit_log import AuditLog


class AuditRecorder:
    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        changes: Dict[str, Any],
        actor_id: Optional[str] = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=changes,
        )
        self.db.add(entry)
        return entry

    def list_for_account(self, account_id: str, skip: int = 0, limit: int = 100) -> List[AuditLog]:
        """Entries where the account is the subject or the actor, newest first."""
        return (
            self.db.query(AuditLog)
            .filter(or_(AuditLog.entity_id == account_id, AuditLog.user_id == account_id))
            .order_by(AuditLog.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self, entity_type: Optional[str] = None) -> int:
        query = self.db.query(AuditLog)
        if entity_type is not None:
            query = query.filter(AuditLog.entity_type == entity_type)
        return query.count()
