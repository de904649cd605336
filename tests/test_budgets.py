from __future__ import annotations

from decimal import Decimal
from datetime import date

from conftest import ALICE, BOB, category_named, create_account, create_transaction, error_code


def _create_budget(client, headers, category_id, **overrides):
    payload = {"category_id": category_id, "amount": 120, "period": "MONTHLY",
               "start_date": "2024-01-01", "end_date": "2024-01-31"}
    payload.update(overrides)
    res = client.post("/budgets", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_budget(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    budget = _create_budget(client, ALICE, food["id"], amount="450.556")
    assert Decimal(budget["amount"]) == Decimal("450.56")
    assert budget["is_active"] is True
    assert budget["period"] == "MONTHLY"


def test_budget_validation(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    res = client.post("/budgets", json={"category_id": food["id"], "amount": 0, "period": "MONTHLY",
                                        "start_date": "2024-01-01"}, headers=ALICE)
    assert res.status_code == 422
    assert error_code(res) == "BAD_USER_INPUT"

    res = client.post("/budgets", json={"category_id": food["id"], "amount": 10, "period": "MONTHLY",
                                        "start_date": "2024-02-01", "end_date": "2024-01-01"}, headers=ALICE)
    assert res.status_code == 422
    assert "Start date must be before end date" in res.json()["errors"][0]["message"]


def test_budget_for_foreign_category_is_forbidden(client, alice, bob):
    bobs_food = category_named(client, BOB, "Food & Dining")
    res = client.post("/budgets", json={"category_id": bobs_food["id"], "amount": 10, "period": "MONTHLY",
                                        "start_date": "2024-01-01"}, headers=ALICE)
    assert res.status_code == 403


def test_update_cannot_invert_stored_dates(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    budget = _create_budget(client, ALICE, food["id"])

    res = client.put(f"/budgets/{budget['id']}", json={"start_date": "2024-03-01"}, headers=ALICE)
    assert res.status_code == 422

    res = client.put(f"/budgets/{budget['id']}", json={"amount": 200, "is_active": False}, headers=ALICE)
    assert res.status_code == 200
    assert Decimal(res.json()["amount"]) == Decimal("200")
    assert res.json()["is_active"] is False


def test_active_only_listing(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    housing = category_named(client, ALICE, "Housing")
    _create_budget(client, ALICE, food["id"])  # ended in January 2024
    current = _create_budget(client, ALICE, housing["id"], start_date=date.today().isoformat(), end_date=None)

    assert len(client.get("/budgets", headers=ALICE).json()) == 2
    active = client.get("/budgets", params={"active_only": True}, headers=ALICE).json()
    assert [b["id"] for b in active] == [current["id"]]


def test_budget_progress(client, alice):
    account = create_account(client, ALICE)
    food = category_named(client, ALICE, "Food & Dining")
    salary = category_named(client, ALICE, "Salary")
    budget = _create_budget(client, ALICE, food["id"])

    create_transaction(client, ALICE, account["id"], amount=100, category_id=food["id"], transaction_date="2024-01-05")
    create_transaction(client, ALICE, account["id"], amount=50, category_id=food["id"], transaction_date="2024-01-31")
    # Outside the window, other category, or not an expense
    create_transaction(client, ALICE, account["id"], amount=999, category_id=food["id"], transaction_date="2024-02-01")
    create_transaction(client, ALICE, account["id"], amount=999, transaction_date="2024-01-10")
    create_transaction(client, ALICE, account["id"], amount=999, type="INCOME", category_id=salary["id"],
                       transaction_date="2024-01-10")

    res = client.get(f"/budgets/{budget['id']}/progress", headers=ALICE)
    assert res.status_code == 200
    progress = res.json()
    assert progress["category_name"] == "Food & Dining"
    assert Decimal(progress["spent"]) == Decimal("150")
    assert Decimal(progress["remaining"]) == Decimal("-30")
    assert progress["percentage_used"] == 125.0
    assert progress["status"] == "over_budget"
    assert progress["window_start"] == "2024-01-01"
    assert progress["window_end"] == "2024-01-31"


def test_budget_progress_without_spending(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    budget = _create_budget(client, ALICE, food["id"])
    progress = client.get(f"/budgets/{budget['id']}/progress", headers=ALICE).json()
    assert Decimal(progress["spent"]) == 0
    assert progress["status"] == "on_track"
    assert progress["percentage_used"] == 0.0


def test_budgets_are_private_and_deletable(client, alice, bob):
    food = category_named(client, ALICE, "Food & Dining")
    budget = _create_budget(client, ALICE, food["id"])

    assert client.get(f"/budgets/{budget['id']}/progress", headers=BOB).status_code == 403
    assert client.delete(f"/budgets/{budget['id']}", headers=ALICE).status_code == 204
    assert client.get(f"/budgets/{budget['id']}", headers=ALICE).status_code == 404


def test_sub_cent_budget_amount_rejected(client, alice):
    food = category_named(client, ALICE, "Food & Dining")
    for amount in (0.004, 0.001):
        res = client.post("/budgets", json={"category_id": food["id"], "amount": amount, "period": "MONTHLY",
                                            "start_date": "2024-01-01"}, headers=ALICE)
        assert res.status_code == 422, amount

    budget = _create_budget(client, ALICE, food["id"])
    res = client.put(f"/budgets/{budget['id']}", json={"amount": 0.004}, headers=ALICE)
    assert res.status_code == 422
