from datetime import timedelta

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db import dynamo
from app.main import app

ALICE = "user-alice"
BOB = "user-bob"
BASE = "/api/transactions"

groceries = {
    "amount": 42.5,
    "kind": "expense",
    "category": "Groceries",
    "description": "Weekly shop",
    "date": "2025-11-03",
}


def _create(client, headers, **overrides):
    response = client.post(BASE, json={**groceries, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_requires_bearer_token(client):
    response = client.get(BASE)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token required"


def test_rejects_invalid_and_expired_tokens(client):
    response = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

    expired = create_access_token({"sub": ALICE}, expires_delta=timedelta(minutes=-5))
    response = client.get(BASE, headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_create_injects_owner_from_token(client, auth_headers):
    created = _create(client, auth_headers(ALICE), owner=BOB, user_id=BOB, id="forged")

    assert created["owner"] == ALICE
    assert created["id"] != "forged"
    assert created["amount"] == 42.5
    assert created["kind"] == "expense"
    assert created["created_at"]


def test_create_then_list_round_trip(client, auth_headers):
    created = _create(client, auth_headers())

    response = client.get(BASE, headers=auth_headers())
    assert response.status_code == 200
    assert response.json() == [created]


def test_list_is_sorted_by_date_descending_and_scoped(client, auth_headers):
    _create(client, auth_headers(), date="2025-10-01", description="old")
    _create(client, auth_headers(), date="2025-12-01", description="new")
    _create(client, auth_headers(), date="2025-11-01", description="mid")
    _create(client, auth_headers(BOB), description="bob's")

    response = client.get(BASE, headers=auth_headers())
    assert [t["description"] for t in response.json()] == ["new", "mid", "old"]


def test_create_rejects_malformed_body(client, auth_headers):
    for body in (
        {**groceries, "amount": -1},
        {**groceries, "kind": "transfer"},
        {**groceries, "date": "yesterday"},
        {k: v for k, v in groceries.items() if k != "amount"},
    ):
        response = client.post(BASE, json=body, headers=auth_headers())
        assert response.status_code == 422


def test_update_replaces_only_sent_fields(client, auth_headers):
    created = _create(client, auth_headers())

    response = client.put(
        f"{BASE}/{created['id']}",
        json={"amount": 50, "description": None, "owner": BOB},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["amount"] == 50
    assert updated["description"] == "Weekly shop"
    assert updated["owner"] == ALICE
    assert updated["created_at"] == created["created_at"]


def test_update_with_no_fields_is_rejected(client, auth_headers):
    created = _create(client, auth_headers())
    response = client.put(f"{BASE}/{created['id']}", json={}, headers=auth_headers())
    assert response.status_code == 400


def test_other_users_record_is_not_found(client, auth_headers):
    created = _create(client, auth_headers(ALICE))
    url = f"{BASE}/{created['id']}"

    assert client.get(url, headers=auth_headers(BOB)).status_code == 404
    assert client.put(url, json={"amount": 1}, headers=auth_headers(BOB)).status_code == 404
    assert client.delete(url, headers=auth_headers(BOB)).status_code == 404

    response = client.get(url, headers=auth_headers(ALICE))
    assert response.status_code == 200
    assert response.json()["amount"] == 42.5


def test_delete_twice_returns_not_found(client, auth_headers):
    created = _create(client, auth_headers())
    url = f"{BASE}/{created['id']}"

    response = client.delete(url, headers=auth_headers())
    assert response.status_code == 200
    assert response.json() == {"message": "Transaction deleted"}

    response = client.delete(url, headers=auth_headers())
    assert response.status_code == 404
    assert response.json()["detail"] == "Transaction not found"


def test_store_failure_surfaces_as_500(client, store, auth_headers):
    store.fail = True
    response = client.post(BASE, json=groceries, headers=auth_headers())
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create transaction"


def test_summary_and_categories(client, auth_headers):
    _create(client, auth_headers(), amount=100, kind="income", category="Salary", description="pay")
    _create(client, auth_headers(), amount=40, kind="expense", category="Food")
    _create(client, auth_headers(), amount=10, kind="expense", category="Food")
    _create(client, auth_headers(BOB), amount=999, kind="income", category="Salary")

    summary = client.get(f"{BASE}/summary", headers=auth_headers()).json()
    assert summary == {"total_income": 100, "total_expense": 50, "balance": 50, "count": 3}

    categories = client.get(f"{BASE}/categories", headers=auth_headers()).json()
    assert categories["categories"] == ["Food", "Salary"]
    assert categories["rollup"]["Food"] == {"income": 0, "expense": 50, "total": -50}
    assert categories["rollup"]["Salary"] == {"income": 100, "expense": 0, "total": 100}


def test_recent_limits_count(client, auth_headers):
    for day in range(1, 8):
        _create(client, auth_headers(), date=f"2025-11-0{day}")

    response = client.get(f"{BASE}/recent", headers=auth_headers())
    assert [t["date"] for t in response.json()] == [
        "2025-11-07", "2025-11-06", "2025-11-05", "2025-11-04", "2025-11-03",
    ]

    response = client.get(f"{BASE}/recent", params={"count": 2}, headers=auth_headers())
    assert len(response.json()) == 2

    response = client.get(f"{BASE}/recent", params={"count": 101}, headers=auth_headers())
    assert response.status_code == 422


def test_search_filters_by_kind_category_and_text(client, auth_headers):
    _create(client, auth_headers(), category="Groceries", description="Market")
    _create(client, auth_headers(), category="Rent", description="Flat")
    _create(client, auth_headers(), kind="income", category="Salary", description="Pay")

    response = client.get(f"{BASE}/search", params={"search": "gro"}, headers=auth_headers())
    assert [t["category"] for t in response.json()] == ["Groceries"]

    response = client.get(f"{BASE}/search", params={"kind": "income"}, headers=auth_headers())
    assert [t["category"] for t in response.json()] == ["Salary"]

    response = client.get(
        f"{BASE}/search", params={"kind": "expense", "category": "all"}, headers=auth_headers()
    )
    assert sorted(t["category"] for t in response.json()) == ["Groceries", "Rent"]

    response = client.get(f"{BASE}/search", params={"kind": "transfer"}, headers=auth_headers())
    assert response.status_code == 422


def test_health_reports_table_status(client, monkeypatch):
    monkeypatch.setattr(dynamo, "check_table", lambda: {"name": "t", "status": "accessible"})
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    monkeypatch.setattr(dynamo, "check_table", lambda: {"name": "t", "status": "error", "error": "x"})
    assert client.get("/api/health").json()["status"] == "degraded"


def test_non_finite_amount_is_rejected(client, auth_headers):
    body = '{"amount": 1e999, "kind": "expense", "category": "Food", "date": "2025-11-03"}'
    headers = {**auth_headers(), "Content-Type": "application/json"}
    response = client.post(BASE, content=body, headers=headers)
    assert response.status_code == 422


def test_unexpected_error_returns_generic_500(store, monkeypatch, auth_headers):
    def explode(user_id):
        raise RuntimeError("connection pool exhausted")

    monkeypatch.setattr(dynamo, "get_transactions_for_user", explode)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get(BASE, headers=auth_headers())
    assert response.status_code == 500
    assert response.json() == {"detail": "Server error"}


def test_token_without_subject_is_rejected(client):
    token = create_access_token({})
    response = client.get(BASE, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"
