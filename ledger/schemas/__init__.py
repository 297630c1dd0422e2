"""
Pydantic schemas package.
"""

from ledger.schemas.account import (
    AccountBalance,
    AccountCreate,
    AccountResponse,
    AccountStatusUpdate,
    AccountUpdate,
    AuditLogResponse,
    DepositRequest,
    DepositResponse,
)
from ledger.schemas.transfer import TransferRequest, TransferResponse, TransferResult

__all__ = [
    "AccountBalance",
    "AccountCreate",
    "AccountResponse",
    "AccountStatusUpdate",
    "AccountUpdate",
    "AuditLogResponse",
    "DepositRequest",
    "DepositResponse",
    "TransferRequest",
    "TransferResponse",
    "TransferResult",
]
