"""
Deposit handler: credits one account, creating it on first deposit.
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.orm import Session

from ledger.core.exceptions import AccountInactive, Conflict
from ledger.core.money import format_amount, parse_amount
from ledger.database import atomic, snapshot
from ledger.services.account_store import AccountStore
from ledger.services.audit import AuditRecorder
from ledger.services.balance import apply_delta

logger = logging.getLogger(__name__)


class DepositHandler:
    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.audit = AuditRecorder(db)

    def deposit(
        self,
        email: str,
        full_name: str,
        amount: Union[str, int, Decimal],
        actor_id: Optional[str] = None,
    ) -> Decimal:
        """
        Credit ``amount`` to the account registered under ``email``.

        A missing account is created with a zero balance first. ``full_name``
        only applies to that creation; an existing account keeps its name.
        Returns the balance after the credit.
        """
        amount = parse_amount(amount)
        with snapshot(self.db):
            self.accounts.resolve_actor(actor_id)

        with atomic(self.db):
            created = False
            account = self.accounts.get_by_email(email)
            if account is None:
                try:
                    account = self.accounts.create(email, full_name)
                    created = True
                except Conflict:
                    # Lost a race with a concurrent first deposit.
                    account = self.accounts.require_by_email(email)

            account = self.accounts.lock_for_update(account.id)
            if not account.is_active:
                raise AccountInactive(f"Account {account.id} is {account.status.value}")

            balance_before = account.balance
            new_balance = apply_delta(account, amount)

            self.audit.record(
                action="deposit",
                entity_type="account",
                entity_id=account.id,
                actor_id=actor_id,
                changes={
                    "amount": format_amount(amount),
                    "account_created": created,
                    "balance_before": format_amount(balance_before),
                    "balance_after": format_amount(new_balance),
                },
            )

        logger.info(
            "Deposit of %s committed", format_amount(amount),
            extra={"actor_id": actor_id, "account_id": account.id},
        )
        return new_balance
