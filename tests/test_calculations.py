from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

from finance4all.db.core import (
    AccountDB, AccountType, BudgetDB, BudgetPeriod, CategoryDB, CategoryType, ExpenseGrowth,
    TransactionDB, TransactionType,
)
from finance4all.models.projection import ProjectionAssumptions
from finance4all.services.calculations import (
    age_on, project_net_worth, summarize_budget_progress, summarize_cash_flow, summarize_net_worth,
)


def account(account_type: AccountType, balance: str, name: str = "acct") -> AccountDB:
    return AccountDB(id=uuid4(), name=name, type=account_type, balance=Decimal(balance))


def txn(kind: TransactionType, amount: str, day: date, category: CategoryDB | None = None) -> TransactionDB:
    t = TransactionDB(id=uuid4(), type=kind, amount=Decimal(amount), transaction_date=day)
    if category is not None:
        t.category = category
        t.category_id = category.id
    return t


def assumptions(**overrides) -> ProjectionAssumptions:
    values = dict(income_growth_rate=5, investment_return=7, inflation_rate=2.5)
    values.update(overrides)
    return ProjectionAssumptions(**values)


# ===== NET WORTH =====

def test_net_worth_mixed_accounts():
    result = summarize_net_worth([
        account(AccountType.CHECKING, "5000"),
        account(AccountType.INVESTMENT, "50000"),
        account(AccountType.CREDIT_CARD, "-2000"),
        account(AccountType.MORTGAGE, "-200000"),
    ])
    assert result.total_assets == Decimal("5000")
    assert result.total_investments == Decimal("50000")
    assert result.total_debts == Decimal("2000")
    assert result.total_liabilities == Decimal("200000")
    assert result.net_worth == Decimal("-147000")
    assert [a.category.value for a in result.accounts] == ["ASSET", "INVESTMENT", "DEBT", "LIABILITY"]


def test_net_worth_totals_non_negative_regardless_of_debt_sign():
    result = summarize_net_worth([
        account(AccountType.LOAN, "3000"),
        account(AccountType.OTHER_LIABILITY, "-150"),
        account(AccountType.SAVINGS, "1000.10"),
    ])
    assert result.total_debts == Decimal("3000")
    assert result.total_liabilities == Decimal("150")
    assert result.net_worth == result.total_assets + result.total_investments - result.total_debts - result.total_liabilities
    assert result.net_worth == Decimal("-2149.90")


def test_net_worth_empty():
    result = summarize_net_worth([])
    assert result.net_worth == 0
    assert result.total_assets == 0
    assert result.accounts == []


def test_net_worth_keeps_cents_exact():
    result = summarize_net_worth([account(AccountType.CHECKING, "0.10")] * 3)
    assert result.total_assets == Decimal("0.30")


# ===== CASH FLOW =====

def test_cash_flow_monthly_breakdown_skips_empty_months():
    transactions = [
        txn(TransactionType.INCOME, "1000", date(2024, 1, 5)),
        txn(TransactionType.EXPENSE, "500", date(2024, 1, 20)),
        txn(TransactionType.INCOME, "1000", date(2024, 2, 5)),
    ]
    result = summarize_cash_flow(transactions, date(2024, 1, 1), date(2024, 3, 31))

    assert [m.month for m in result.monthly_breakdown] == ["2024-01", "2024-02"]
    jan, feb = result.monthly_breakdown
    assert (jan.income, jan.expenses, jan.net_cash_flow) == (Decimal("1000"), Decimal("500"), Decimal("500"))
    assert (feb.income, feb.expenses, feb.net_cash_flow) == (Decimal("1000"), Decimal("0"), Decimal("1000"))
    assert result.period.start_date == date(2024, 1, 1)
    assert result.period.end_date == date(2024, 3, 31)


def test_cash_flow_uncategorized_transaction():
    result = summarize_cash_flow(
        [txn(TransactionType.EXPENSE, "42.50", date(2024, 3, 1))], date(2024, 3, 1), date(2024, 3, 31)
    )
    assert len(result.expenses_by_category) == 1
    entry = result.expenses_by_category[0]
    assert entry.category_id is None
    assert entry.category_name == "Uncategorized"
    assert entry.amount == Decimal("42.50")
    assert result.income_by_category == []


def test_cash_flow_conservation_by_category():
    food = CategoryDB(id=uuid4(), name="Food & Dining", type=CategoryType.EXPENSE)
    salary = CategoryDB(id=uuid4(), name="Salary", type=CategoryType.INCOME)
    transactions = [
        txn(TransactionType.INCOME, "3000", date(2024, 1, 1), salary),
        txn(TransactionType.INCOME, "250.25", date(2024, 1, 2)),
        txn(TransactionType.EXPENSE, "80.10", date(2024, 1, 3), food),
        txn(TransactionType.EXPENSE, "19.90", date(2024, 1, 9), food),
        txn(TransactionType.EXPENSE, "5", date(2024, 1, 10)),
    ]
    result = summarize_cash_flow(transactions, date(2024, 1, 1), date(2024, 1, 31))

    assert result.total_income == Decimal("3250.25")
    assert result.total_expenses == Decimal("105.00")
    assert result.net_cash_flow == result.total_income - result.total_expenses
    assert sum(c.amount for c in result.income_by_category) == result.total_income
    assert sum(c.amount for c in result.expenses_by_category) == result.total_expenses

    by_name = {c.category_name: c for c in result.expenses_by_category}
    assert by_name["Food & Dining"].amount == Decimal("100.00")
    assert by_name["Food & Dining"].category_id == food.id


def test_cash_flow_empty():
    result = summarize_cash_flow([], date(2024, 1, 1), date(2024, 1, 31))
    assert result.total_income == 0
    assert result.net_cash_flow == 0
    assert result.monthly_breakdown == []
    assert result.expenses_by_category == []


# ===== PROJECTION =====

def _net_worth(**balances):
    accounts = []
    for name, (account_type, balance) in balances.items():
        accounts.append(account(account_type, balance, name))
    return summarize_net_worth(accounts)


def test_projection_has_one_entry_per_year_including_today():
    result = project_net_worth(_net_worth(), Decimal("50000"), Decimal("40000"), assumptions(), base_age=30)
    assert len(result.projected_years) == 31
    assert [y.year for y in result.projected_years] == list(range(31))
    assert result.projected_years[0].age == 30
    assert result.projected_years[-1].age == 60


def test_projection_income_compounds_annually():
    result = project_net_worth(_net_worth(), Decimal("50000"), Decimal("30000"), assumptions(), base_age=30)
    years = result.projected_years
    assert years[0].annual_income == Decimal("50000")
    assert years[1].annual_income == Decimal("52500")
    expected = Decimal("50000") * Decimal("1.05") ** 10
    assert abs(years[10].annual_income - expected) < Decimal("0.01")


def test_projection_monotonic_under_positive_savings():
    start = _net_worth(cash=(AccountType.CHECKING, "10000"), card=(AccountType.CREDIT_CARD, "-5000"))
    result = project_net_worth(start, Decimal("80000"), Decimal("50000"), assumptions(), base_age=40)
    worths = [y.net_worth for y in result.projected_years]
    assert all(a <= b for a, b in zip(worths, worths[1:]))


def test_projection_negative_investment_balance_earns_no_return():
    start = _net_worth(margin=(AccountType.INVESTMENT, "-10000"))
    flat = assumptions(income_growth_rate=0, investment_return=10, expense_growth=ExpenseGrowth.FLAT, years=5)
    result = project_net_worth(start, Decimal("50000"), Decimal("49500"), flat, base_age=30)
    worths = [y.net_worth for y in result.projected_years]
    assert worths[:3] == [Decimal("-10000.00"), Decimal("-9500.00"), Decimal("-9000.00")]
    assert all(a <= b for a, b in zip(worths, worths[1:]))


def test_projection_expense_growth_policy():
    inflating = project_net_worth(_net_worth(), Decimal("50000"), Decimal("40000"),
                                  assumptions(inflation_rate=10), base_age=30)
    flat = project_net_worth(_net_worth(), Decimal("50000"), Decimal("40000"),
                             assumptions(inflation_rate=10, expense_growth=ExpenseGrowth.FLAT), base_age=30)
    assert inflating.projected_years[1].annual_expenses == Decimal("44000")
    assert flat.projected_years[1].annual_expenses == Decimal("40000")
    assert flat.projected_years[30].annual_expenses == Decimal("40000")


def test_projection_overrides_replace_cash_flow_baseline():
    result = project_net_worth(
        _net_worth(), Decimal("1"), Decimal("1"),
        assumptions(expected_salary=Decimal("90000"), expected_expenses=Decimal("60000"), years=5),
        base_age=30,
    )
    assert result.projected_years[0].annual_income == Decimal("90000")
    assert result.projected_years[0].annual_expenses == Decimal("60000")
    assert len(result.projected_years) == 6


def test_projection_pays_down_debt_with_tenth_of_savings():
    start = _net_worth(card=(AccountType.CREDIT_CARD, "-2000"))
    result = project_net_worth(start, Decimal("60000"), Decimal("50000"),
                               assumptions(income_growth_rate=0, investment_return=0, inflation_rate=0, years=3),
                               base_age=30)
    year1 = result.projected_years[1]
    assert year1.total_debts == Decimal("1000")
    assert year1.total_investments == Decimal("9000")
    assert year1.net_worth == Decimal("8000")
    assert result.milestones.debt_free_year == 2


def test_projection_negative_savings_draw_assets_then_investments():
    start = _net_worth(cash=(AccountType.CHECKING, "3000"), brokerage=(AccountType.INVESTMENT, "10000"))
    result = project_net_worth(start, Decimal("40000"), Decimal("45000"),
                               assumptions(income_growth_rate=0, investment_return=0, inflation_rate=0, years=2),
                               base_age=30)
    year1 = result.projected_years[1]
    assert year1.total_assets == Decimal("0")
    assert year1.total_investments == Decimal("8000")
    assert year1.annual_savings == Decimal("-5000")


def test_projection_liabilities_carried_constant():
    start = _net_worth(house=(AccountType.MORTGAGE, "-100000"), brokerage=(AccountType.INVESTMENT, "20000"))
    result = project_net_worth(start, Decimal("0"), Decimal("0"), assumptions(years=3), base_age=30)
    assert all(y.total_liabilities == Decimal("100000") for y in result.projected_years)
    assert result.current_net_worth == Decimal("-80000")


def test_projection_milestones():
    start = _net_worth(brokerage=(AccountType.INVESTMENT, "900000"))
    result = project_net_worth(start, Decimal("100000"), Decimal("40000"),
                               assumptions(income_growth_rate=0, investment_return=0, inflation_rate=0, years=5),
                               base_age=30)
    assert result.milestones.millionaire_year == 2
    assert result.milestones.debt_free_year == 0
    # 25 x 40000 = 1,000,000
    assert result.milestones.retirement_ready_year == 2


def test_projection_milestone_not_reached():
    result = project_net_worth(_net_worth(), Decimal("30000"), Decimal("29000"),
                               assumptions(investment_return=0, years=3), base_age=30)
    assert result.milestones.millionaire_year is None


def test_age_on_birthday_boundary():
    assert age_on(date(1990, 6, 15), date(2024, 6, 14)) == 33
    assert age_on(date(1990, 6, 15), date(2024, 6, 15)) == 34


# ===== BUDGETS =====

def test_budget_progress_summary():
    budget = BudgetDB(id=uuid4(), category_id=uuid4(), amount=Decimal("400"), period=BudgetPeriod.MONTHLY,
                      start_date=date(2024, 1, 1))
    progress = summarize_budget_progress(budget, "Food & Dining", Decimal("100"), date(2024, 1, 1), date(2024, 1, 31))
    assert progress.remaining == Decimal("300")
    assert progress.percentage_used == 25.0
    assert progress.status == "on_track"

    over = summarize_budget_progress(budget, "Food & Dining", Decimal("450"), date(2024, 1, 1), date(2024, 1, 31))
    assert over.remaining == Decimal("-50")
    assert over.status == "over_budget"
