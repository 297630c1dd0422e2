"""
Pydantic schemas for Transfer API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger.schemas.account import coerce_amount_text


class TransferRequest(BaseModel):
    """Schema for initiating a transfer."""
    sender_id: str = Field(..., min_length=1, max_length=36, description="Account to debit")
    receiver_id: str = Field(..., min_length=1, max_length=36, description="Account to credit")
    amount: str = Field(..., description="Transfer amount as a decimal string")
    description: Optional[str] = Field(None, max_length=500, description="Optional transfer description")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_text(cls, value):
        return coerce_amount_text(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sender_id": "3f1c2a9e-7d4b-4b8e-9a51-0c6f2d8e1b7a",
                "receiver_id": "a4e9b0c2-51d7-4f3a-8e26-9b1d7c0f4e35",
                "amount": "250.00",
                "description": "Payment for services"
            }
        }
    )


class TransferResult(BaseModel):
    transaction_id: str


class TransferResponse(BaseModel):
    """Schema for transfer detail response."""
    id: str
    sender_id: str
    recipient_id: str
    amount: Decimal
    description: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
