"""
Financial aggregations: net worth, cash flow, multi-year projections and
budget progress.

The ``summarize_*`` and ``project_*`` functions are pure and work on any
objects shaped like the ORM rows; the ``calculate_*`` functions load the
rows for a user and delegate to them.
"""
from collections import OrderedDict
from datetime import date, datetime, timezone
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from finance4all.db.core import (
    AccountDB, AccountCategory, BudgetDB, TransactionDB, TransactionType, UserDB, ExpenseGrowth
)
from finance4all.logging_config import get_logger
from finance4all.models.analytics import (
    NetWorthAccount, NetWorthResult, CategoryAmount, MonthlyCashFlow, Period, CashFlowResult,
    ProjectionYear, Milestones, ProjectionResult,
)
from finance4all.models.budget import BudgetProgress
from finance4all.models.projection import ProjectionAssumptions
from finance4all.services.date_ranges import get_date_range


logger = get_logger(__name__)

CENTS = Decimal("0.01")
# Long projections can outgrow the default 28 digits once quantized to cents
MONEY_CONTEXT = Context(prec=60)
ZERO = Decimal("0")
HUNDRED = Decimal("100")

MILLIONAIRE_THRESHOLD = Decimal("1000000")
RETIREMENT_MULTIPLE = Decimal("25")       # 4% withdrawal rule
DEBT_PAYDOWN_SHARE = Decimal("0.10")      # share of positive savings sent to debts
TRAILING_MONTHS = 12

UNCATEGORIZED = "Uncategorized"


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP, context=MONEY_CONTEXT)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ===== NET WORTH =====

def summarize_net_worth(accounts: Iterable[AccountDB]) -> NetWorthResult:
    """
    Partition balances by account category.

    Assets and investments are summed as stored; debts and liabilities are
    summed by absolute value so every total is non-negative.
    """
    totals = {category: ZERO for category in AccountCategory}
    rows = []

    for account in accounts:
        balance = Decimal(account.balance or 0)
        category = account.category
        if category in (AccountCategory.DEBT, AccountCategory.LIABILITY):
            totals[category] += abs(balance)
        else:
            totals[category] += balance
        rows.append(NetWorthAccount(
            id=account.id,
            name=account.name,
            type=account.type,
            category=category,
            balance=to_money(balance),
        ))

    net_worth = (totals[AccountCategory.ASSET] + totals[AccountCategory.INVESTMENT]
                 - totals[AccountCategory.DEBT] - totals[AccountCategory.LIABILITY])

    return NetWorthResult(
        total_assets=to_money(totals[AccountCategory.ASSET]),
        total_investments=to_money(totals[AccountCategory.INVESTMENT]),
        total_debts=to_money(totals[AccountCategory.DEBT]),
        total_liabilities=to_money(totals[AccountCategory.LIABILITY]),
        net_worth=to_money(net_worth),
        accounts=rows,
        calculated_at=_now(),
    )


def calculate_net_worth(db: Session, user_id: UUID) -> NetWorthResult:
    accounts = db.query(AccountDB).filter(
        AccountDB.user_id == user_id,
        AccountDB.is_active.is_(True)
    ).order_by(AccountDB.created_at).all()
    return summarize_net_worth(accounts)


# ===== CASH FLOW =====

def _category_key(transaction: TransactionDB) -> Tuple[Optional[UUID], str]:
    category = transaction.category
    if category is None:
        return transaction.category_id, UNCATEGORIZED
    return category.id or transaction.category_id, category.name


def summarize_cash_flow(transactions: Iterable[TransactionDB], start_date: date, end_date: date) -> CashFlowResult:
    """
    Total income and expenses, grouped by category and by calendar month.

    Months without transactions are left out of the breakdown. Category
    groups keep the order in which they first appear chronologically.
    """
    total_income = ZERO
    total_expenses = ZERO
    income_by_category: "OrderedDict[Optional[UUID], list]" = OrderedDict()
    expenses_by_category: "OrderedDict[Optional[UUID], list]" = OrderedDict()
    monthly = {}

    for transaction in sorted(transactions, key=lambda t: t.transaction_date):
        amount = Decimal(transaction.amount)
        month = transaction.transaction_date.strftime("%Y-%m")
        bucket = monthly.setdefault(month, {"income": ZERO, "expenses": ZERO})
        category_id, category_name = _category_key(transaction)

        if transaction.type == TransactionType.INCOME:
            total_income += amount
            bucket["income"] += amount
            group = income_by_category
        elif transaction.type == TransactionType.EXPENSE:
            total_expenses += amount
            bucket["expenses"] += amount
            group = expenses_by_category
        else:
            logger.warning("Skipping transaction %s with unknown type %r", transaction.id, transaction.type)
            continue

        entry = group.setdefault(category_id, [category_name, ZERO])
        entry[1] += amount

    def _category_amounts(groups) -> list:
        return [
            CategoryAmount(category_id=category_id, category_name=name, amount=to_money(amount))
            for category_id, (name, amount) in groups.items()
        ]

    breakdown = [
        MonthlyCashFlow(
            month=month,
            income=to_money(data["income"]),
            expenses=to_money(data["expenses"]),
            net_cash_flow=to_money(data["income"] - data["expenses"]),
        )
        for month, data in sorted(monthly.items())
    ]

    return CashFlowResult(
        total_income=to_money(total_income),
        total_expenses=to_money(total_expenses),
        net_cash_flow=to_money(total_income - total_expenses),
        income_by_category=_category_amounts(income_by_category),
        expenses_by_category=_category_amounts(expenses_by_category),
        monthly_breakdown=breakdown,
        period=Period(start_date=start_date, end_date=end_date),
        calculated_at=_now(),
    )


def calculate_cash_flow(db: Session, user_id: UUID, start_date: date, end_date: date) -> CashFlowResult:
    transactions = db.query(TransactionDB).options(joinedload(TransactionDB.category)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_date >= start_date,
        TransactionDB.transaction_date <= end_date
    ).order_by(TransactionDB.transaction_date, TransactionDB.created_at).all()
    return summarize_cash_flow(transactions, start_date, end_date)


# ===== PROJECTION =====

def _rate(percent) -> Decimal:
    return Decimal(percent) / HUNDRED


def project_net_worth(
    net_worth: NetWorthResult,
    annual_income: Decimal,
    annual_expenses: Decimal,
    assumptions: ProjectionAssumptions,
    base_age: int,
) -> ProjectionResult:
    """
    Compound the current position forward one year at a time.

    Year 0 is today. Each following year income grows by the income growth
    rate, expenses follow the expense growth policy and investments earn the
    investment return. Positive savings are invested and a tenth of them is
    moved from investments to pay down debts; negative savings draw down
    cash assets first, then investments. Liabilities are carried at their
    current value.
    """
    income = Decimal(assumptions.expected_salary) if assumptions.expected_salary is not None else Decimal(annual_income)
    expenses = Decimal(assumptions.expected_expenses) if assumptions.expected_expenses is not None else Decimal(annual_expenses)
    baseline_expenses = expenses

    income_growth = 1 + _rate(assumptions.income_growth_rate)
    expense_growth = 1 + _rate(assumptions.inflation_rate) if assumptions.expense_growth == ExpenseGrowth.INFLATION else Decimal(1)
    investment_growth = 1 + _rate(assumptions.investment_return)

    assets = net_worth.total_assets
    investments = net_worth.total_investments
    debts = net_worth.total_debts
    liabilities = net_worth.total_liabilities

    years = []
    milestones = Milestones()

    for year in range(assumptions.years + 1):
        if year > 0:
            income *= income_growth
            expenses *= expense_growth
            # A negative balance (margin, overdrawn) earns no return
            if investments > 0:
                investments *= investment_growth

            savings = income - expenses
            if savings > 0:
                investments += savings
            elif assets >= -savings:
                assets += savings
            else:
                investments += savings + assets
                assets = ZERO

            if debts > 0 and savings > 0:
                payment = min(savings * DEBT_PAYDOWN_SHARE, debts)
                debts -= payment
                investments -= payment

        total = assets + investments - debts - liabilities
        years.append(ProjectionYear(
            year=year,
            age=base_age + year,
            net_worth=to_money(total),
            total_assets=to_money(assets),
            total_investments=to_money(investments),
            total_debts=to_money(debts),
            total_liabilities=to_money(liabilities),
            annual_income=to_money(income),
            annual_expenses=to_money(expenses),
            annual_savings=to_money(income - expenses),
        ))

        if milestones.debt_free_year is None and debts <= 0:
            milestones.debt_free_year = year
        if milestones.millionaire_year is None and total >= MILLIONAIRE_THRESHOLD:
            milestones.millionaire_year = year
        if milestones.retirement_ready_year is None and total >= baseline_expenses * RETIREMENT_MULTIPLE:
            milestones.retirement_ready_year = year

    return ProjectionResult(
        current_net_worth=net_worth.net_worth,
        base_age=base_age,
        assumptions=assumptions,
        projected_years=years,
        milestones=milestones,
        calculated_at=_now(),
    )


def age_on(date_of_birth: date, today: date) -> int:
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


def calculate_projection(
    db: Session,
    user: UserDB,
    assumptions: ProjectionAssumptions,
    default_age: int,
    today: Optional[date] = None,
) -> ProjectionResult:
    """Project from the user's current net worth and trailing twelve months of cash flow"""
    today = today or date.today()
    net_worth = calculate_net_worth(db, user.id)

    start, end = get_date_range(TRAILING_MONTHS, today)
    cash_flow = calculate_cash_flow(db, user.id, start, end)

    base_age = age_on(user.date_of_birth, today) if user.date_of_birth else default_age
    logger.debug(
        "Projecting %s years for user %s from net worth %s (income %s, expenses %s)",
        assumptions.years, user.id, net_worth.net_worth, cash_flow.total_income, cash_flow.total_expenses
    )
    return project_net_worth(net_worth, cash_flow.total_income, cash_flow.total_expenses, assumptions, base_age)


# ===== BUDGETS =====

def summarize_budget_progress(budget: BudgetDB, category_name: str, spent: Decimal,
                              window_start: date, window_end: date) -> BudgetProgress:
    budgeted = Decimal(budget.amount)
    spent = Decimal(spent)
    percentage = float(spent / budgeted * HUNDRED) if budgeted > 0 else 0.0
    return BudgetProgress(
        budget_id=budget.id,
        category_id=budget.category_id,
        category_name=category_name,
        window_start=window_start,
        window_end=window_end,
        budgeted=to_money(budgeted),
        spent=to_money(spent),
        remaining=to_money(budgeted - spent),
        percentage_used=round(percentage, 2),
        status="over_budget" if spent > budgeted else "on_track",
    )


def calculate_budget_progress(db: Session, budget: BudgetDB, today: Optional[date] = None) -> BudgetProgress:
    """Expenses booked in the budget's category between its start date and its end date (or today)"""
    window_start = budget.start_date
    window_end = budget.end_date or today or date.today()

    spent = db.query(func.coalesce(func.sum(TransactionDB.amount), 0)).filter(
        TransactionDB.user_id == budget.user_id,
        TransactionDB.category_id == budget.category_id,
        TransactionDB.type == TransactionType.EXPENSE,
        TransactionDB.transaction_date >= window_start,
        TransactionDB.transaction_date <= window_end
    ).scalar()

    return summarize_budget_progress(budget, budget.category.name, Decimal(str(spent)), window_start, window_end)
