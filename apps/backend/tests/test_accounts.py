from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient

from welth.main import app


def test_first_account_becomes_default(make_account):
    first = make_account("Main", "1000")
    second = make_account("Savings", "50.5")

    assert first["is_default"] is True
    assert second["is_default"] is False
    assert Decimal(first["balance"]) == Decimal("1000")
    assert Decimal(second["balance"]) == Decimal("50.50")


def test_requested_default_takes_over(client, make_account):
    first = make_account("Main")
    second = make_account("Travel", is_default=True)
    assert second["is_default"] is True

    rows = {a["id"]: a for a in client.get("/api/accounts").json()["data"]}
    assert rows[first["id"]]["is_default"] is False
    assert rows[second["id"]]["is_default"] is True


def test_set_default_endpoint_keeps_single_default(client, make_account):
    first = make_account("Main")
    second = make_account("Savings")

    res = client.post(f"/api/accounts/{second['id']}/default")
    assert res.status_code == 200
    assert res.json()["data"]["is_default"] is True

    defaults = [a["id"] for a in client.get("/api/accounts").json()["data"] if a["is_default"]]
    assert defaults == [second["id"]]
    assert first["id"] not in defaults


def test_list_accounts_newest_first_with_counts(client, make_account, make_transaction):
    older = make_account("Older")
    newer = make_account("Newer")
    make_transaction(older["id"], "10")
    make_transaction(older["id"], "20")

    body = client.get("/api/accounts").json()
    assert body["success"] is True
    data = body["data"]
    assert [a["id"] for a in data] == [newer["id"], older["id"]]
    assert data[0]["transaction_count"] == 0
    assert data[1]["transaction_count"] == 2


def test_account_detail_includes_transactions(client, make_account, make_transaction):
    acc = make_account("Main", "100")
    make_transaction(acc["id"], "10", date="2024-01-01T09:00:00")
    make_transaction(acc["id"], "5", date="2024-02-01T09:00:00")

    res = client.get(f"/api/accounts/{acc['id']}")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["transaction_count"] == 2
    assert [t["date"][:10] for t in data["transactions"]] == ["2024-02-01", "2024-01-01"]
    assert Decimal(data["balance"]) == Decimal("85")


def test_foreign_account_is_not_found(client, make_account):
    acc = make_account("Mine")

    res = client.get(f"/api/accounts/{acc['id']}", headers={"X-User-Id": "someone_else"})
    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["error"]["kind"] == "NOT_FOUND"


def test_create_account_rejects_blank_name(client):
    res = client.post("/api/accounts", json={"name": "   ", "type": "CURRENT"})
    assert res.status_code == 422
    assert res.json()["error"]["kind"] == "INVALID"


def test_missing_identity_is_unauthorized(db_session):
    with TestClient(app) as anonymous:
        res = anonymous.get("/api/accounts")
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": {"kind": "UNAUTHORIZED", "message": "Unauthorized"}}


def test_account_chart_ranges(client, make_account, make_transaction):
    acc = make_account("Main")
    make_transaction(acc["id"], "100", type="INCOME", date="2024-01-01T08:00:00")
    make_transaction(acc["id"], "30", date="2024-01-01T18:00:00")
    make_transaction(acc["id"], "50", type="INCOME", date="2024-01-03T12:00:00")

    res = client.get(f"/api/accounts/{acc['id']}/chart", params={"range": "ALL"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["range"] == "ALL"
    assert [p["date"] for p in data["points"]] == ["2024-01-01", "2024-01-03"]
    assert Decimal(data["points"][0]["income"]) == Decimal("100")
    assert Decimal(data["points"][0]["expense"]) == Decimal("30")
    assert Decimal(data["totals"]["net"]) == Decimal("120")

    # Old transactions fall outside the trailing week
    week = client.get(f"/api/accounts/{acc['id']}/chart", params={"range": "7D"}).json()["data"]
    assert week["points"] == []

    bad = client.get(f"/api/accounts/{acc['id']}/chart", params={"range": "2W"})
    assert bad.status_code == 422


def test_create_account_rejects_oversized_balance(client):
    res = client.post("/api/accounts", json={"name": "Huge", "type": "SAVINGS", "balance": "1e30"})
    assert res.status_code == 422
    assert res.json()["error"]["kind"] == "INVALID"
    assert client.get("/api/accounts").json()["data"] == []


def test_set_default_on_foreign_account_is_not_found(client, make_account):
    mine = make_account("Mine")
    res = client.post(
        "/api/accounts",
        headers={"X-User-Id": "intruder"},
        json={"name": "Theirs", "type": "CURRENT"},
    )
    theirs = res.json()["data"]
    assert theirs["is_default"] is True

    res = client.post(f"/api/accounts/{mine['id']}/default", headers={"X-User-Id": "intruder"})
    assert res.status_code == 404
    assert res.json()["error"]["kind"] == "NOT_FOUND"

    rows = client.get("/api/accounts", headers={"X-User-Id": "intruder"}).json()["data"]
    assert [(a["id"], a["is_default"]) for a in rows] == [(theirs["id"], True)]


def test_set_default_twice_keeps_one_default(client, make_account):
    make_account("Main")
    second = make_account("Savings")

    for _ in range(2):
        res = client.post(f"/api/accounts/{second['id']}/default")
        assert res.status_code == 200

    defaults = [a["id"] for a in client.get("/api/accounts").json()["data"] if a["is_default"]]
    assert defaults == [second["id"]]
