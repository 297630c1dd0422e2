"""
Account API endpoints.
Handles deposits, account opening, profile and status changes, and balance queries.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ledger.api.deps import get_actor_id
from ledger.database import get_db
from ledger.services.account_store import AccountStore
from ledger.services.accounts import AccountService
from ledger.services.audit import AuditRecorder
from ledger.services.deposits import DepositHandler
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

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("/deposit", response_model=DepositResponse)
def deposit(
    deposit_data: DepositRequest,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id)
):
    """
    Credit an account by email, creating it on first deposit.

    - **email**: Account email (created if unknown)
    - **full_name**: Holder name, only used when the account is created
    - **amount**: Positive decimal string
    """
    new_balance = DepositHandler(db).deposit(
        email=deposit_data.email,
        full_name=deposit_data.full_name,
        amount=deposit_data.amount,
        actor_id=actor_id,
    )
    return DepositResponse(new_balance=new_balance)


@router.post("/", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id)
):
    """
    Open a new account with a zero balance.
    """
    return AccountService(db).open_account(
        email=account_data.email,
        full_name=account_data.full_name,
        actor_id=actor_id,
    )


@router.get("/", response_model=List[AccountResponse])
def list_accounts(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """
    List all accounts with pagination.

    - **skip**: Number of records to skip (default: 0)
    - **limit**: Maximum number of records to return (default: 100)
    """
    return AccountStore(db).list(skip=skip, limit=limit)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    db: Session = Depends(get_db)
):
    """
    Get account details by account ID.
    """
    return AccountStore(db).get_by_id(account_id)


@router.get("/{account_id}/balance", response_model=AccountBalance)
def get_account_balance(
    account_id: str,
    db: Session = Depends(get_db)
):
    """
    Get account balance.
    """
    account = AccountStore(db).get_by_id(account_id)
    return AccountBalance(account_id=account.id, balance=account.balance)


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    account_data: AccountUpdate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id)
):
    """
    Change the holder name and/or email of an account.

    - **email**: New unique email (optional)
    - **full_name**: New holder name (optional)
    """
    return AccountService(db).update_profile(
        account_id,
        full_name=account_data.full_name,
        email=account_data.email,
        actor_id=actor_id,
    )


@router.patch("/{account_id}/status", response_model=AccountResponse)
def update_account_status(
    account_id: str,
    status_data: AccountStatusUpdate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id)
):
    """
    Activate, suspend or close an account.
    """
    return AccountService(db).change_status(account_id, status_data.status, actor_id=actor_id)


@router.get("/{account_id}/audit-logs", response_model=List[AuditLogResponse])
def get_account_audit_logs(
    account_id: str,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """
    Audit entries where the account is the subject or the actor.
    """
    AccountStore(db).get_by_id(account_id)
    return AuditRecorder(db).list_for_account(account_id, skip=skip, limit=limit)
