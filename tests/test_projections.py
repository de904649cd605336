from __future__ import annotations

from decimal import Decimal

from conftest import ALICE, BOB, create_account, error_code

SCENARIO = {
    "name": "Baseline",
    "income_growth_rate": 3,
    "investment_return": 7,
    "inflation_rate": 2.5,
    "years": 5,
}


def _create_projection(client, headers, **overrides):
    payload = dict(SCENARIO, **overrides)
    res = client.post("/projections", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_and_list_projections(client, alice):
    projection = _create_projection(client, ALICE, name="  Baseline ", description="Steady career")
    assert projection["name"] == "Baseline"
    assert projection["expense_growth"] == "INFLATION"
    assert Decimal(projection["inflation_rate"]) == Decimal("2.5")

    _create_projection(client, ALICE, name="Aggressive", investment_return=10)
    names = [p["name"] for p in client.get("/projections", headers=ALICE).json()]
    assert sorted(names) == ["Aggressive", "Baseline"]


def test_duplicate_name_conflicts(client, alice, bob):
    _create_projection(client, ALICE)
    res = client.post("/projections", json=SCENARIO, headers=ALICE)
    assert res.status_code == 409
    assert error_code(res) == "CONFLICT"
    # Names are unique per user only
    _create_projection(client, BOB)


def test_out_of_range_assumptions_rejected(client, alice):
    res = client.post("/projections", json=dict(SCENARIO, inflation_rate=75), headers=ALICE)
    assert res.status_code == 422
    assert res.json()["errors"][0]["extensions"]["field_errors"][0]["field"] == "inflation_rate"

    res = client.post("/projections", json=dict(SCENARIO, years=0), headers=ALICE)
    assert res.status_code == 422


def test_update_projection(client, alice):
    _create_projection(client, ALICE, name="Other")
    projection = _create_projection(client, ALICE)

    res = client.put(f"/projections/{projection['id']}", json={"years": 10, "expense_growth": "FLAT"},
                     headers=ALICE)
    assert res.status_code == 200
    assert res.json()["years"] == 10
    assert res.json()["expense_growth"] == "FLAT"

    res = client.put(f"/projections/{projection['id']}", json={"name": "Other"}, headers=ALICE)
    assert res.status_code == 409


def test_run_saved_projection(client, alice):
    create_account(client, ALICE, balance=1000)
    projection = _create_projection(client, ALICE, expected_salary=50000, expected_expenses=40000)

    res = client.post(f"/projections/{projection['id']}/run", headers=ALICE)
    assert res.status_code == 200
    result = res.json()
    assert Decimal(result["current_net_worth"]) == Decimal("1000")
    # No date of birth on file, so the configured default age is used
    assert result["base_age"] == 30
    years = result["projected_years"]
    assert len(years) == 6
    assert [y["age"] for y in years] == [30, 31, 32, 33, 34, 35]
    assert Decimal(years[0]["annual_income"]) == Decimal("50000")
    assert Decimal(years[1]["annual_income"]) == Decimal("51500")
    assert Decimal(years[0]["net_worth"]) == Decimal("1000")
    assert Decimal(years[-1]["net_worth"]) > Decimal(years[0]["net_worth"])


def test_projections_are_private(client, alice, bob):
    projection = _create_projection(client, ALICE)
    assert client.post(f"/projections/{projection['id']}/run", headers=BOB).status_code == 403
    assert client.delete(f"/projections/{projection['id']}", headers=BOB).status_code == 403
    assert client.delete(f"/projections/{projection['id']}", headers=ALICE).status_code == 204
    assert client.get(f"/projections/{projection['id']}", headers=ALICE).status_code == 404
