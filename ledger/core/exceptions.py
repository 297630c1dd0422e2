"""
Typed ledger errors.

Every failure the core can report is a ``LedgerError`` subclass carrying a
stable ``code`` and the HTTP status the API layer maps it to.
"""


class LedgerError(Exception):
    """Base class for ledger domain errors."""

    code = "ledger_error"
    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidAmount(LedgerError):
    """Raised when an amount is malformed, non-positive or out of range."""

    code = "invalid_amount"
    default_detail = "Amount must be a positive decimal with at most 4 fractional digits"


class SameAccount(LedgerError):
    """Raised when a transfer names the same account on both sides."""

    code = "same_account"
    default_detail = "Cannot transfer to the same account"


class NotFound(LedgerError):
    code = "not_found"
    status_code = 404
    default_detail = "Resource not found"


class AccountNotFound(NotFound):
    default_detail = "Account not found"


class TransferNotFound(NotFound):
    default_detail = "Transfer not found"


class AccountInactive(LedgerError):
    """Raised when a mutation targets a suspended or closed account."""

    code = "account_inactive"
    status_code = 403
    default_detail = "Account is not active"


class InsufficientFunds(LedgerError):
    """Raised when a debit would drive a balance below zero."""

    code = "insufficient_funds"
    status_code = 422
    default_detail = "Insufficient funds"


class Conflict(LedgerError):
    code = "conflict"
    status_code = 409
    default_detail = "Resource already exists"


class StorageFailure(LedgerError):
    """Raised when the database is unavailable or an atomic unit cannot commit."""

    code = "storage_failure"
    status_code = 503
    default_detail = "Storage is temporarily unavailable"
