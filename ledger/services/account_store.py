"""
Account store.

Owns account records. Every mutation path takes ``lock_for_update`` inside an
atomic unit before touching a balance.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger.core.exceptions import AccountNotFound, Conflict
from ledger.models.account import Account, AccountStatus, utcnow

logger = logging.getLogger(__name__)


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, account_id: str) -> Account:
        account = self.db.query(Account).filter(Account.id == account_id).first()
        if not account:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    def get_by_email(self, email: str) -> Optional[Account]:
        return self.db.query(Account).filter(Account.email == email).first()

    def require_by_email(self, email: str) -> Account:
        account = self.get_by_email(email)
        if not account:
            raise AccountNotFound(f"Account with email {email} not found")
        return account

    def resolve_actor(self, actor_id: Optional[str]) -> None:
        """Actors are accounts; system actions carry no actor."""
        if actor_id is None:
            return
        if not self.db.query(Account.id).filter(Account.id == actor_id).first():
            raise AccountNotFound(f"Actor {actor_id} is not a known account")

    def create(self, email: str, full_name: str) -> Account:
        """
        Insert a new active account with a zero balance.

        The insert runs in a savepoint so a duplicate email raises
        ``Conflict`` without aborting the caller's atomic unit.
        """
        account = Account(
            email=email,
            full_name=full_name,
            balance=Decimal("0"),
            status=AccountStatus.ACTIVE,
        )
        try:
            with self.db.begin_nested():
                self.db.add(account)
                self.db.flush()
        except IntegrityError:
            logger.warning("Duplicate account email rejected: %s", email)
            raise Conflict(f"Account with email {email} already exists")
        return account

    def lock_for_update(self, account_id: str) -> Account:
        """
        Take an exclusive row lock on the account for the rest of the unit.

        ``populate_existing`` overwrites any copy already in the session so the
        caller sees the balance as of lock acquisition.
        """
        account = (
            self.db.query(Account)
            .filter(Account.id == account_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
        if not account:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    def update_profile(
        self,
        account: Account,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Account:
        """Change name and/or email of a locked account; a taken email raises ``Conflict``."""
        try:
            with self.db.begin_nested():
                if full_name is not None:
                    account.full_name = full_name
                if email is not None:
                    account.email = email
                account.updated_at = utcnow()
                self.db.flush()
        except IntegrityError:
            logger.warning("Duplicate account email rejected: %s", email)
            raise Conflict(f"Account with email {email} already exists")
        return account

    def set_status(self, account: Account, status: AccountStatus) -> Account:
        account.status = status
        account.updated_at = utcnow()
        return account

    def list(self, skip: int = 0, limit: int = 100) -> List[Account]:
        return (
            self.db.query(Account)
            .order_by(Account.created_at, Account.id)
            .offset(skip)
            .limit(limit)
            .all()
        )
