"""
Transfer engine.

Moves money between two accounts as one atomic unit:
- Validation happens before any lock is taken
- Locks are acquired in sorted account id order, whatever the direction
- Debit, credit, transfer record and audit entry commit together or not at all
"""

import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ledger.core.exceptions import AccountInactive, InsufficientFunds, SameAccount, TransferNotFound
from ledger.core.money import format_amount, parse_amount
from ledger.database import atomic, snapshot
from ledger.models.account import Account
from ledger.models.transfer import Transfer
from ledger.services.account_store import AccountStore
from ledger.services.audit import AuditRecorder
from ledger.services.balance import apply_delta

logger = logging.getLogger(__name__)


def _require_active(account: Account) -> None:
    if not account.is_active:
        raise AccountInactive(f"Account {account.id} is {account.status.value}")


class TransferEngine:
    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.audit = AuditRecorder(db)

    def transfer(
        self,
        sender_id: str,
        recipient_id: str,
        amount: Union[str, int, Decimal],
        actor_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Transfer:
        amount = parse_amount(amount)
        if sender_id == recipient_id:
            raise SameAccount()

        # Fail fast on unknown actors and unknown or inactive accounts
        # before locking anything.
        with snapshot(self.db):
            self.accounts.resolve_actor(actor_id)
            for account_id in (sender_id, recipient_id):
                _require_active(self.accounts.get_by_id(account_id))

        try:
            with atomic(self.db):
                locked = {}
                for account_id in sorted([sender_id, recipient_id]):
                    locked[account_id] = self.accounts.lock_for_update(account_id)

                sender = locked[sender_id]
                recipient = locked[recipient_id]
                # Status may have changed between the check and the lock.
                _require_active(sender)
                _require_active(recipient)

                sender_before = sender.balance
                recipient_before = recipient.balance
                sender_after = apply_delta(sender, -amount)
                recipient_after = apply_delta(recipient, amount)

                transfer = Transfer(
                    id=str(uuid.uuid4()),
                    sender_id=sender_id,
                    recipient_id=recipient_id,
                    amount=amount,
                    description=description,
                )
                self.db.add(transfer)

                self.audit.record(
                    action="transfer",
                    entity_type="transfer",
                    entity_id=transfer.id,
                    actor_id=actor_id,
                    changes={
                        "amount": format_amount(amount),
                        "sender": {
                            "account_id": sender_id,
                            "balance_before": format_amount(sender_before),
                            "balance_after": format_amount(sender_after),
                        },
                        "recipient": {
                            "account_id": recipient_id,
                            "balance_before": format_amount(recipient_before),
                            "balance_after": format_amount(recipient_after),
                        },
                    },
                )
        except (AccountInactive, InsufficientFunds) as exc:
            logger.warning(
                "Transfer rejected: %s", exc.detail,
                extra={"actor_id": actor_id, "account_id": sender_id},
            )
            raise

        logger.info(
            "Transfer of %s committed", format_amount(amount),
            extra={"actor_id": actor_id, "transfer_id": transfer.id},
        )
        return transfer

    def get(self, transfer_id: str) -> Transfer:
        transfer = self.db.query(Transfer).filter(Transfer.id == transfer_id).first()
        if not transfer:
            raise TransferNotFound(f"Transfer {transfer_id} not found")
        return transfer

    def list_for_account(self, account_id: str, skip: int = 0, limit: int = 100) -> List[Transfer]:
        """Transfers sent or received by the account, newest first."""
        self.accounts.get_by_id(account_id)
        return (
            self.db.query(Transfer)
            .filter(or_(Transfer.sender_id == account_id, Transfer.recipient_id == account_id))
            .order_by(Transfer.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
