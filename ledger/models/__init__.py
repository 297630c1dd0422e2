"""
Database models package.
"""

from ledger.models.account import Account, AccountStatus
from ledger.models.audit_log import AuditLog
from ledger.models.transfer import Transfer

__all__ = ["Account", "AccountStatus", "AuditLog", "Transfer"]
