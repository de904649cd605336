from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from finance4all.db.core import ExpenseGrowth


# ===== PROJECTION PYDANTIC MODELS =====

class ProjectionAssumptions(BaseModel):
    """Growth assumptions, in percent (7.0 means 7%)"""
    income_growth_rate: Decimal = Field(..., ge=-100, le=100)
    investment_return: Decimal = Field(..., ge=-100, le=100)
    inflation_rate: Decimal = Field(..., ge=-10, le=50)
    expense_growth: ExpenseGrowth = ExpenseGrowth.INFLATION
    expected_salary: Optional[Decimal] = Field(None, ge=0, description="Override for the baseline annual income")
    expected_expenses: Optional[Decimal] = Field(None, ge=0, description="Override for the baseline annual expenses")
    years: int = Field(default=30, ge=1, le=100)


class ProjectionCreate(ProjectionAssumptions):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class ProjectionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    income_growth_rate: Optional[Decimal] = Field(None, ge=-100, le=100)
    investment_return: Optional[Decimal] = Field(None, ge=-100, le=100)
    inflation_rate: Optional[Decimal] = Field(None, ge=-10, le=50)
    expense_growth: Optional[ExpenseGrowth] = None
    expected_salary: Optional[Decimal] = Field(None, ge=0)
    expected_expenses: Optional[Decimal] = Field(None, ge=0)
    years: Optional[int] = Field(None, ge=1, le=100)


class ProjectionResponse(ProjectionCreate):
    id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
