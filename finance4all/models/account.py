from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from finance4all.db.core import AccountType, AccountCategory
from finance4all.models.validation import round_money


# ===== ACCOUNT PYDANTIC MODELS =====

class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Account name")
    type: AccountType = Field(..., description="Type of account")
    subtype: Optional[str] = Field(None, max_length=50)
    balance: Decimal = Field(..., description="Current balance; debts are usually negative")
    currency: str = Field(default="USD", min_length=3, max_length=3, description="ISO currency code (e.g., USD)")
    institution: Optional[str] = Field(None, max_length=100, description="Financial institution name")
    account_number: Optional[str] = Field(None, max_length=20)
    interest_rate: Optional[Decimal] = Field(None, ge=0, le=100, description="Interest rate in percent (18.99 for 18.99%)")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Account name is required')
        return v

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator('balance')
    @classmethod
    def validate_balance(cls, v: Decimal) -> Decimal:
        return round_money(v)


class AccountUpdate(BaseModel):
    """Update account - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[AccountType] = None
    subtype: Optional[str] = Field(None, max_length=50)
    balance: Optional[Decimal] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    institution: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, max_length=20)
    interest_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Account name is required')
        return v

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @field_validator('balance')
    @classmethod
    def validate_balance(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round_money(v) if v is not None else v


class AccountResponse(BaseModel):
    """Account data returned to client"""
    id: UUID
    user_id: UUID
    name: str
    type: AccountType
    category: AccountCategory
    subtype: Optional[str]
    balance: Decimal
    currency: str
    institution: Optional[str]
    account_number: Optional[str]
    interest_rate: Optional[Decimal]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
