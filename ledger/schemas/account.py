"""
Pydantic schemas for Account and Deposit API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ledger.models.account import AccountStatus


def coerce_amount_text(value):
    """Keep amounts as decimal text; JSON numbers are converted to their literal form."""
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


class AccountCreate(BaseModel):
    """Schema for opening a new account."""
    email: str = Field(..., min_length=3, max_length=255, description="Unique account email")
    full_name: str = Field(..., min_length=1, max_length=255, description="Account holder name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jane@example.com",
                "full_name": "Jane Doe"
            }
        }
    )


class AccountResponse(BaseModel):
    """Schema for account response."""
    id: str
    email: str
    full_name: str
    balance: Decimal
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountBalance(BaseModel):
    """Schema for account balance response."""
    account_id: str
    balance: Decimal


class AccountUpdate(BaseModel):
    """Schema for changing an account's holder name and/or email."""
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)

    @model_validator(mode="after")
    def require_a_field(self):
        if self.email is None and self.full_name is None:
            raise ValueError("Provide email, full_name or both")
        return self


class AccountStatusUpdate(BaseModel):
    status: AccountStatus


class DepositRequest(BaseModel):
    """Schema for crediting an account, creating it if the email is new."""
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    amount: str = Field(..., description="Deposit amount as a decimal string")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_text(cls, value):
        return coerce_amount_text(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jane@example.com",
                "full_name": "Jane Doe",
                "amount": "800.00"
            }
        }
    )


class DepositResponse(BaseModel):
    new_balance: Decimal


class AuditLogResponse(BaseModel):
    """Schema for audit log entries."""
    id: str
    user_id: Optional[str]
    action: str
    entity_type: str
    entity_id: str
    changes: Optional[Dict[str, Any]]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
