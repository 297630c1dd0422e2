"""
Account administration: explicit opening, profile and status changes, all audited.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ledger.database import atomic, snapshot
from ledger.models.account import Account, AccountStatus
from ledger.services.account_store import AccountStore
from ledger.services.audit import AuditRecorder

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.audit = AuditRecorder(db)

    def open_account(self, email: str, full_name: str, actor_id: Optional[str] = None) -> Account:
        with snapshot(self.db):
            self.accounts.resolve_actor(actor_id)

        with atomic(self.db):
            account = self.accounts.create(email, full_name)
            self.audit.record(
                action="account_created",
                entity_type="account",
                entity_id=account.id,
                actor_id=actor_id,
                changes={"email": email, "full_name": full_name},
            )

        logger.info("Account opened", extra={"actor_id": actor_id, "account_id": account.id})
        return account

    def update_profile(
        self,
        account_id: str,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Account:
        """
        Rename an account or move it to another email.

        Fields left as None keep their value. An email already used by
        another account raises ``Conflict`` and nothing changes.
        """
        with snapshot(self.db):
            self.accounts.resolve_actor(actor_id)

        with atomic(self.db):
            account = self.accounts.lock_for_update(account_id)
            before = {"email": account.email, "full_name": account.full_name}
            self.accounts.update_profile(account, full_name=full_name, email=email)
            after = {"email": account.email, "full_name": account.full_name}
            self.audit.record(
                action="account_updated",
                entity_type="account",
                entity_id=account.id,
                actor_id=actor_id,
                changes={"before": before, "after": after},
            )

        logger.info("Account profile updated", extra={"actor_id": actor_id, "account_id": account_id})
        return account

    def change_status(
        self,
        account_id: str,
        status: AccountStatus,
        actor_id: Optional[str] = None,
    ) -> Account:
        with snapshot(self.db):
            self.accounts.resolve_actor(actor_id)

        with atomic(self.db):
            account = self.accounts.lock_for_update(account_id)
            previous = account.status
            self.accounts.set_status(account, status)
            self.audit.record(
                action="status_change",
                entity_type="account",
                entity_id=account.id,
                actor_id=actor_id,
                changes={"status_before": previous.value, "status_after": status.value},
            )

        logger.info(
            "Account status changed from %s to %s", previous.value, status.value,
            extra={"actor_id": actor_id, "account_id": account_id},
        )
        return account
