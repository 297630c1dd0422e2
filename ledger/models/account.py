"""
Account database model.
Represents ledger accounts and their balances.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SQLEnum, String

from ledger.database import Base
from ledger.models.types import Money


def utcnow():
    return datetime.now(timezone.utc)


class AccountStatus(enum.Enum):
    """Account lifecycle states."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CLOSED = "closed"


class Account(Base):
    """
    Account table - one balance per account.
    The balance is only ever written through the balance mutator.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    balance = Column(Money, nullable=False, default=0)
    status = Column(SQLEnum(AccountStatus), nullable=False, default=AccountStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def is_active(self):
        return self.status == AccountStatus.ACTIVE

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email}, balance={self.balance}, status={self.status})>"
