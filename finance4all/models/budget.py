from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID
from typing_extensions import Self

from finance4all.db.core import BudgetPeriod
from finance4all.models.validation import round_positive_money


# ===== BUDGET PYDANTIC MODELS =====

class BudgetCreate(BaseModel):
    category_id: UUID = Field(..., description="The ID of the budgeted category")
    amount: Decimal = Field(..., description="Budgeted amount per period")
    period: BudgetPeriod
    start_date: date
    end_date: Optional[date] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round_positive_money(v, 'Budget amount must be positive')

    @model_validator(mode="after")
    def check_dates(self) -> Self:
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("Start date must be before end date")
        return self


class BudgetUpdate(BaseModel):
    category_id: Optional[UUID] = None
    amount: Optional[Decimal] = None
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        return round_positive_money(v, 'Budget amount must be positive')

    @model_validator(mode="after")
    def check_dates(self) -> Self:
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("Start date must be before end date")
        return self


class BudgetResponse(BaseModel):
    id: UUID
    user_id: UUID
    category_id: UUID
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: Optional[date]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BudgetProgress(BaseModel):
    """Spending against a budget over its window"""
    budget_id: UUID
    category_id: UUID
    category_name: str
    window_start: date
    window_end: date
    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: float
    status: str  # "over_budget", "on_track"
