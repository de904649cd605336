from __future__ import annotations

from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

from finance4all.auth import Claims, InvalidTokenError, TokenVerifier
from finance4all.config import Settings
from finance4all.db.core import UserRole
from finance4all.main import create_app


class FakeVerifier(TokenVerifier):
    """Maps fixed test tokens to claims instead of calling Firebase"""

    def __init__(self):
        self.tokens: Dict[str, Claims] = {}

    def add(self, token: str, uid: str, email: str | None = None, role: UserRole = UserRole.USER) -> None:
        self.tokens[token] = Claims(uid=uid, email=email, email_verified=True, role=role)

    def verify(self, token: str) -> Claims:
        try:
            return self.tokens[token]
        except KeyError:
            raise InvalidTokenError("unknown token")


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


ALICE = bearer("alice-token")
BOB = bearer("bob-token")
ADMIN = bearer("admin-token")


@pytest.fixture()
def settings(tmp_path) -> Settings:
    # Temporary SQLite file so the developer database is never touched
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'finance4all_test.sqlite3'}",
        ENVIRONMENT="test",
        APP_LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def verifier() -> FakeVerifier:
    v = FakeVerifier()
    v.add("alice-token", uid="alice-uid", email="alice@example.com")
    v.add("bob-token", uid="bob-uid", email="bob@example.com")
    v.add("admin-token", uid="admin-uid", email="admin@example.com", role=UserRole.ADMIN)
    return v


@pytest.fixture()
def app(settings, verifier):
    return create_app(settings=settings, token_verifier=verifier)


@pytest.fixture()
def client(app) -> Generator[TestClient, Any, Any]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session(client):
    session = client.app.state.db.session_local()
    try:
        yield session
    finally:
        session.close()


def register(client: TestClient, headers: Dict[str, str], email: str, **extra) -> Dict[str, Any]:
    res = client.post("/users", json={"email": email, **extra}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture()
def alice(client) -> Dict[str, Any]:
    return register(client, ALICE, "alice@example.com", display_name="Alice")


@pytest.fixture()
def bob(client) -> Dict[str, Any]:
    return register(client, BOB, "bob@example.com", display_name="Bob")


def create_account(client: TestClient, headers: Dict[str, str], **overrides) -> Dict[str, Any]:
    payload = {"name": "Checking", "type": "CHECKING", "balance": 1000}
    payload.update(overrides)
    res = client.post("/accounts", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def category_named(client: TestClient, headers: Dict[str, str], name: str) -> Dict[str, Any]:
    categories = client.get("/categories", headers=headers).json()
    return next(c for c in categories if c["name"] == name)


def create_transaction(client: TestClient, headers: Dict[str, str], account_id: str, **overrides) -> Dict[str, Any]:
    payload = {
        "account_id": account_id,
        "amount": 100,
        "type": "EXPENSE",
        "transaction_date": "2024-01-15",
    }
    payload.update(overrides)
    res = client.post("/transactions", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def error_code(res) -> str:
    return res.json()["errors"][0]["extensions"]["code"]
