from __future__ import annotations

from conftest import ADMIN, ALICE, BOB, bearer, error_code, register

from finance4all.auth import Claims
from finance4all.db.core import UserRole


def test_claims_role_defaults_to_user():
    claims = Claims.from_token({"uid": "u1", "email": "u1@example.com"})
    assert claims.role == UserRole.USER
    assert claims.email_verified is False


def test_claims_reads_admin_role_and_ignores_unknown_roles():
    assert Claims.from_token({"uid": "u1", "role": "ADMIN"}).role == UserRole.ADMIN
    assert Claims.from_token({"uid": "u1", "role": "superuser"}).role == UserRole.USER


def test_missing_token_is_unauthenticated(client):
    res = client.get("/users/me")
    assert res.status_code == 401
    assert error_code(res) == "UNAUTHENTICATED"
    assert res.json()["errors"][0]["message"] == "Not authenticated"


def test_invalid_token_is_unauthenticated(client):
    res = client.get("/accounts", headers=bearer("forged"))
    assert res.status_code == 401
    assert error_code(res) == "UNAUTHENTICATED"


def test_non_bearer_scheme_is_unauthenticated(client):
    res = client.get("/users/me", headers={"Authorization": "Basic abc"})
    assert res.status_code == 401


def test_authenticated_but_unregistered_user_is_not_found(client):
    res = client.get("/users/me", headers=ALICE)
    assert res.status_code == 404
    assert error_code(res) == "NOT_FOUND"


def test_users_listing_is_admin_only(client, alice, bob):
    res = client.get("/users", headers=ALICE)
    assert res.status_code == 403
    assert error_code(res) == "FORBIDDEN"

    res = client.get("/users", headers=ADMIN)
    assert res.status_code == 200
    assert {u["email"] for u in res.json()} == {"alice@example.com", "bob@example.com"}


def test_user_by_id_self_or_admin(client, alice, bob):
    assert client.get(f"/users/{alice['id']}", headers=ALICE).status_code == 200

    res = client.get(f"/users/{alice['id']}", headers=BOB)
    assert res.status_code == 403
    assert error_code(res) == "FORBIDDEN"

    assert client.get(f"/users/{alice['id']}", headers=ADMIN).status_code == 200


def test_admin_registration_keeps_user_role(client):
    # The token role drives authorization; the stored role is always USER on signup
    user = register(client, ADMIN, "admin@example.com")
    assert user["role"] == "USER"
