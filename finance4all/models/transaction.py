from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID
from typing_extensions import Self

from finance4all.db.core import TransactionType
from finance4all.models.validation import round_positive_money


def _check_positive(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is None:
        return v
    return round_positive_money(v)


# ===== TRANSACTION PYDANTIC MODELS =====

class TransactionCreate(BaseModel):
    account_id: UUID = Field(..., description="Account ID for this transaction")
    category_id: Optional[UUID] = Field(None, description="Category ID; omitted means uncategorized")
    amount: Decimal = Field(..., description="Positive amount; direction comes from the type")
    type: TransactionType = Field(..., description="INCOME or EXPENSE")
    description: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=500)
    transaction_date: date = Field(..., description="Date of the transaction")
    is_recurring: bool = False
    recurring_id: Optional[UUID] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return _check_positive(v)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionUpdate(BaseModel):
    """Update transaction - all fields optional"""
    account_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    amount: Optional[Decimal] = None
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=500)
    transaction_date: Optional[date] = None
    is_recurring: Optional[bool] = None
    recurring_id: Optional[UUID] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _check_positive(v)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionBulkCreate(BaseModel):
    transactions: List[TransactionCreate] = Field(..., min_length=1, max_length=500)


class TransactionFilter(BaseModel):
    """Filter parameters for transaction queries"""
    account_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    type: Optional[TransactionType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, gt=0)
    description_search: Optional[str] = Field(None, max_length=200, description="Case-insensitive match on the description")

    @model_validator(mode="after")
    def check_ranges(self) -> Self:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date must be before end date")
        if self.min_amount is not None and self.max_amount is not None and self.min_amount > self.max_amount:
            raise ValueError("Minimum amount must be less than maximum amount")
        return self


class Pagination(BaseModel):
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=100)


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: UUID
    user_id: UUID
    account_id: UUID
    category_id: Optional[UUID]
    amount: Decimal
    type: TransactionType
    description: Optional[str]
    notes: Optional[str]
    transaction_date: date
    is_recurring: bool
    recurring_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    total: int
    has_more: bool
