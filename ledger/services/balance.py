"""
Balance mutator: the only code that writes ``Account.balance``.
"""

from decimal import Decimal

from ledger.core.exceptions import InsufficientFunds, InvalidAmount
from ledger.core.money import UPPER_BOUND
from ledger.models.account import Account, utcnow


def apply_delta(account: Account, delta: Decimal) -> Decimal:
    """
    Add a signed ``delta`` to a locked account and return the new balance.

    The caller must hold the account's lock inside an atomic unit. A result
    below zero raises ``InsufficientFunds`` and one that no longer fits the
    balance column raises ``InvalidAmount``. Either way the account is left
    untouched so the caller can abort the whole unit.
    """
    new_balance = Decimal(account.balance) + delta
    if new_balance < 0:
        raise InsufficientFunds(
            f"Insufficient funds. Balance: {account.balance}, Required: {-delta}"
        )
    if new_balance >= UPPER_BOUND:
        raise InvalidAmount("Resulting balance exceeds the supported range")

    account.balance = new_balance
    account.updated_at = utcnow()
    return new_balance
