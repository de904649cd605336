from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from finance4all.errors import InputValidationError
from finance4all.models.account import AccountCreate
from finance4all.models.budget import BudgetCreate
from finance4all.models.category import CategoryCreate
from finance4all.models.projection import ProjectionCreate
from finance4all.models.transaction import Pagination, TransactionCreate, TransactionFilter
from finance4all.models.user import UserCreate
from finance4all.models.validation import round_money, round_positive_money, validate_input


def transaction_payload(**overrides):
    payload = {
        "account_id": str(uuid4()),
        "amount": "10.00",
        "type": "EXPENSE",
        "transaction_date": "2024-01-01",
    }
    payload.update(overrides)
    return payload


# ===== CATEGORY =====

@pytest.mark.parametrize("color", ["#FFFFFF", "#1a73e8", "#00ff00"])
def test_category_color_accepts_six_digit_hex(color):
    assert CategoryCreate(name="Food", type="EXPENSE", color=color).color == color


@pytest.mark.parametrize("color", ["#FFF", "red", "FFFFFF", "#GGGGGG", "#FFFFFFF"])
def test_category_color_rejects_everything_else(color):
    with pytest.raises(ValidationError):
        CategoryCreate(name="Food", type="EXPENSE", color=color)


def test_category_requires_name_and_known_type():
    with pytest.raises(ValidationError):
        CategoryCreate(name="", type="EXPENSE")
    with pytest.raises(ValidationError):
        CategoryCreate(name="Food", type="TRANSFER")


# ===== TRANSACTION =====

def test_transaction_amount_zero_fails():
    with pytest.raises(InputValidationError) as exc:
        validate_input(TransactionCreate, transaction_payload(amount=0))
    assert exc.value.field_errors[0]["field"] == "amount"
    assert "must be positive" in exc.value.field_errors[0]["message"]


def test_transaction_amount_one_cent_passes():
    assert validate_input(TransactionCreate, transaction_payload(amount="0.01")).amount == Decimal("0.01")


@pytest.mark.parametrize("amount", ["-5", "NaN", "Infinity"])
def test_transaction_amount_must_be_finite_and_positive(amount):
    with pytest.raises(InputValidationError):
        validate_input(TransactionCreate, transaction_payload(amount=amount))


def test_transaction_requires_uuid_account_and_short_description():
    with pytest.raises(InputValidationError) as exc:
        validate_input(TransactionCreate, transaction_payload(account_id="not-a-uuid", description="x" * 201))
    fields = {e["field"] for e in exc.value.field_errors}
    assert fields == {"account_id", "description"}
    assert exc.value.code == "BAD_USER_INPUT"
    assert exc.value.message.startswith("Validation error: ")


def test_transaction_category_is_optional():
    assert validate_input(TransactionCreate, transaction_payload()).category_id is None


def test_transaction_filter_ranges():
    with pytest.raises(InputValidationError):
        validate_input(TransactionFilter, {"start_date": "2024-02-01", "end_date": "2024-01-01"})
    with pytest.raises(InputValidationError):
        validate_input(TransactionFilter, {"min_amount": 50, "max_amount": 10})
    assert validate_input(TransactionFilter, {"start_date": "2024-01-01", "end_date": "2024-01-01"})


def test_pagination_bounds():
    assert Pagination().limit == 50
    for bad in ({"offset": -1}, {"limit": 0}, {"limit": 101}):
        with pytest.raises(ValidationError):
            Pagination(**bad)


# ===== MONEY =====

@pytest.mark.parametrize(
    "value,expected",
    [("0.005", "0.01"), ("2.675", "2.68"), ("-1.005", "-1.01"), ("9999999999999.99", "9999999999999.99")],
)
def test_round_money_rounds_half_up_to_cents(value, expected):
    assert round_money(Decimal(value)) == Decimal(expected)


@pytest.mark.parametrize("value", ["1e30", "-1e30", "10000000000000", "1E+100"])
def test_round_money_rejects_values_too_large_to_store(value):
    with pytest.raises(ValueError):
        round_money(Decimal(value))


@pytest.mark.parametrize("value", ["0.004", "0.001", "0"])
def test_positive_money_checks_the_rounded_value(value):
    with pytest.raises(ValueError):
        round_positive_money(Decimal(value))
    assert round_positive_money(Decimal("0.005")) == Decimal("0.01")


def test_budget_amount_rounding_to_zero_fails():
    with pytest.raises(ValidationError):
        BudgetCreate(category_id=uuid4(), amount="0.004", period="MONTHLY", start_date=date(2024, 1, 1))


# ===== ACCOUNT =====

def test_account_defaults_and_normalization():
    account = AccountCreate(name="  Checking ", type="CHECKING", balance="12.346", currency="usd")
    assert account.name == "Checking"
    assert account.currency == "USD"
    assert account.balance == Decimal("12.35")
    assert AccountCreate(name="Savings", type="SAVINGS", balance=0).currency == "USD"


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "   "},
        {"name": "x" * 101},
        {"type": "CRYPTO"},
        {"currency": "US"},
        {"interest_rate": 101},
        {"interest_rate": -1},
        {"balance": "NaN"},
        {"balance": "1e30"},
    ],
)
def test_account_rejects_invalid_fields(overrides):
    payload = {"name": "Checking", "type": "CHECKING", "balance": 100}
    payload.update(overrides)
    with pytest.raises(ValidationError):
        AccountCreate(**payload)


# ===== BUDGET =====

def test_budget_end_date_must_follow_start_date():
    base = {"category_id": uuid4(), "amount": 100, "period": "MONTHLY", "start_date": date(2024, 1, 1)}
    assert BudgetCreate(**base, end_date=date(2024, 1, 31)).end_date == date(2024, 1, 31)
    with pytest.raises(ValidationError):
        BudgetCreate(**base, end_date=date(2024, 1, 1))
    with pytest.raises(ValidationError):
        BudgetCreate(**{**base, "amount": 0})
    with pytest.raises(ValidationError):
        BudgetCreate(**{**base, "period": "DAILY"})


# ===== PROJECTION =====

@pytest.mark.parametrize(
    "field,value,ok",
    [
        ("income_growth_rate", 100, True),
        ("income_growth_rate", 100.1, False),
        ("investment_return", -100, True),
        ("investment_return", -101, False),
        ("inflation_rate", -10, True),
        ("inflation_rate", 50.5, False),
        ("years", 0, False),
        ("years", 100, True),
    ],
)
def test_projection_bounds(field, value, ok):
    payload = {"name": "Base case", "income_growth_rate": 3, "investment_return": 7, "inflation_rate": 2.5}
    payload[field] = value
    if ok:
        ProjectionCreate(**payload)
    else:
        with pytest.raises(ValidationError):
            ProjectionCreate(**payload)


def test_projection_requires_name():
    with pytest.raises(ValidationError):
        ProjectionCreate(name="", income_growth_rate=3, investment_return=7, inflation_rate=2)


# ===== USER =====

def test_user_email_is_normalized_and_validated():
    assert UserCreate(email=" Alice@Example.COM ").email == "alice@example.com"
    with pytest.raises(ValidationError):
        UserCreate(email="not-an-email")
    with pytest.raises(ValidationError):
        UserCreate(email="a@example.com", photo_url="ftp://nope")
