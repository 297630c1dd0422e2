"""
Transfer API endpoints.
Handles money transfers between accounts.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ledger.api.deps import get_actor_id
from ledger.database import get_db
from ledger.services.transfers import TransferEngine
from ledger.schemas.transfer import TransferRequest, TransferResponse, TransferResult

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("/", response_model=TransferResult, status_code=status.HTTP_201_CREATED)
def create_transfer(
    transfer_data: TransferRequest,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id)
):
    """
    Move money from one account to another.

    The debit, credit, transfer record and audit entry commit together.
    Concurrent transfers sharing an account serialize on row locks taken
    in account id order.

    - **sender_id**: Account to debit
    - **receiver_id**: Account to credit
    - **amount**: Positive decimal string
    - **description**: Optional transfer description
    """
    transfer = TransferEngine(db).transfer(
        sender_id=transfer_data.sender_id,
        recipient_id=transfer_data.receiver_id,
        amount=transfer_data.amount,
        actor_id=actor_id,
        description=transfer_data.description,
    )
    return TransferResult(transaction_id=transfer.id)


@router.get("/{transfer_id}", response_model=TransferResponse)
def get_transfer(
    transfer_id: str,
    db: Session = Depends(get_db)
):
    """
    Get transfer details by transfer ID.
    """
    return TransferEngine(db).get(transfer_id)


@router.get("/account/{account_id}", response_model=List[TransferResponse])
def get_account_transfers(
    account_id: str,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """
    Get all transfers for a specific account (sent and received).

    - **account_id**: Account to query
    - **skip**: Number of records to skip (default: 0)
    - **limit**: Maximum number of records to return (default: 100)
    """
    return TransferEngine(db).list_for_account(account_id, skip=skip, limit=limit)
