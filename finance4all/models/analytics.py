from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID

from finance4all.db.core import AccountType, AccountCategory
from finance4all.models.projection import ProjectionAssumptions


# ===== NET WORTH =====

class NetWorthAccount(BaseModel):
    id: UUID
    name: str
    type: AccountType
    category: AccountCategory
    balance: Decimal


class NetWorthResult(BaseModel):
    total_assets: Decimal
    total_investments: Decimal
    total_debts: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    accounts: List[NetWorthAccount]
    calculated_at: datetime


# ===== CASH FLOW =====

class CategoryAmount(BaseModel):
    category_id: Optional[UUID]  # None for uncategorized transactions
    category_name: str
    amount: Decimal


class MonthlyCashFlow(BaseModel):
    month: str  # YYYY-MM
    income: Decimal
    expenses: Decimal
    net_cash_flow: Decimal


class Period(BaseModel):
    start_date: date
    end_date: date


class CashFlowResult(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    net_cash_flow: Decimal
    income_by_category: List[CategoryAmount]
    expenses_by_category: List[CategoryAmount]
    monthly_breakdown: List[MonthlyCashFlow]
    period: Period
    calculated_at: datetime


# ===== PROJECTION =====

class ProjectionRequest(ProjectionAssumptions):
    pass


class ProjectionYear(BaseModel):
    year: int
    age: int
    net_worth: Decimal
    total_assets: Decimal
    total_investments: Decimal
    total_debts: Decimal
    total_liabilities: Decimal
    annual_income: Decimal
    annual_expenses: Decimal
    annual_savings: Decimal


class Milestones(BaseModel):
    millionaire_year: Optional[int] = None
    debt_free_year: Optional[int] = None
    retirement_ready_year: Optional[int] = None


class ProjectionResult(BaseModel):
    current_net_worth: Decimal
    base_age: int
    assumptions: ProjectionAssumptions
    projected_years: List[ProjectionYear]
    milestones: Milestones
    calculated_at: datetime
