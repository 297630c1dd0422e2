"""
Transfer database model.
Append-only record of money moved between two accounts.
"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String

from ledger.database import Base
from ledger.models.account import utcnow
from ledger.models.types import Money


class Transfer(Base):
    """
    Transfers table - written once, in the same unit as the balance changes.
    """
    __tablename__ = "transfers"
    __table_args__ = (
        CheckConstraint("sender_id != recipient_id", name="ck_transfers_different_accounts"),
        CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    recipient_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    amount = Column(Money, nullable=False)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Transfer(id={self.id}, from={self.sender_id}, to={self.recipient_id}, amount={self.amount})>"
