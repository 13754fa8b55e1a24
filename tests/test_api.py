import pytest
from fastapi.testclient import TestClient

from paymesh.config import MeshConfig
from paymesh.main import create_app


def client_for(**overrides):
    config = MeshConfig(**{"seed_demo_data": False, "random_seed": 7, **overrides})
    return TestClient(create_app(config))


@pytest.fixture
def client():
    return client_for()


def test_health(client):
    body = client.get("/health").json()
    assert body == {"ok": True, "processors": 5, "merchants": 3}


def test_reference_data(client):
    assert len(client.get("/merchants").json()["merchants"]) == 3
    processors = client.get("/processors").json()["processors"]
    assert {p["id"] for p in processors} >= {"psr_stablepay", "psr_guardian"}


@pytest.mark.parametrize("payload", [
    {"amount": 0, "currency": "USD", "merchantId": "mrc_aegis"},
    {"amount": -5, "currency": "USD", "merchantId": "mrc_aegis"},
    {"amount": 10, "currency": "CHF", "merchantId": "mrc_aegis"},
    {"amount": 10, "currency": "USD", "merchantId": ""},
    {"amount": 10, "currency": "USD"},
])
def test_invalid_intents_rejected(client, payload):
    assert client.post("/transactions", json=payload).status_code == 422
    assert client.get("/metrics").json()["metrics"]["transactionCount"] == 0


def test_create_transaction_applies_defaults(client):
    resp = client.post("/transactions", json={"amount": 129, "currency": "USD", "merchantId": "mrc_aurora"})
    assert resp.status_code == 201
    txn = resp.json()["transaction"]
    assert txn["state"] in ("success", "conflict")
    assert txn["intent"]["channel"] == "web"
    assert txn["intent"]["riskLevel"] == "medium"
    assert txn["intent"]["reference"].startswith("ORDER-")


def test_conflict_lifecycle(client):
    resp = client.post("/transactions", json={
        "amount": 130000, "currency": "JPY", "merchantId": "mrc_omni", "reference": "ORDER-9",
    })
    txn = resp.json()["transaction"]
    assert txn["state"] == "conflict"
    assert txn["failureReason"] == "no-eligible-processors"

    [conflict] = client.get("/conflicts").json()["conflicts"]
    assert conflict["transactionId"] == txn["id"]
    assert conflict["suggestedProcessorIds"] == []

    resolved = client.patch("/conflicts", json={"conflictId": conflict["id"], "note": "reviewed"})
    assert resolved.status_code == 200
    assert resolved.json()["conflict"]["state"] == "resolved"

    again = client.patch("/conflicts", json={"conflictId": conflict["id"]})
    assert again.status_code == 404
    assert again.json()["detail"] == "conflict_not_found"

    [stored] = client.get("/transactions").json()["transactions"]
    assert stored["state"] == "failed"
    assert stored["failureReason"] == "reviewed"


def test_resolve_requires_conflict_id(client):
    resp = client.patch("/conflicts", json={"note": "reviewed"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "missing_conflict_id"


def test_route_preview_does_not_persist(client):
    resp = client.post("/route", json={"amount": 130000, "currency": "JPY", "merchantId": "mrc_omni"})
    body = resp.json()
    assert body["status"] == "conflict"
    assert body["reason"] == "no-eligible-processors"
    assert client.get("/metrics").json()["metrics"]["transactionCount"] == 0


def test_transaction_limit_is_clamped():
    client = client_for(seed_demo_data=True)
    assert len(client.get("/transactions").json()["transactions"]) == 4
    assert len(client.get("/transactions", params={"limit": 0}).json()["transactions"]) == 1
    assert len(client.get("/transactions", params={"limit": 2}).json()["transactions"]) == 2
    assert len(client.get("/transactions", params={"limit": 500}).json()["transactions"]) == 4


def test_metrics_summary_shape():
    client = client_for(seed_demo_data=True)
    body = client.get("/metrics").json()
    assert set(body) == {"metrics", "recentTransactions", "conflicts"}
    assert body["metrics"]["transactionCount"] == 4
    assert len(body["recentTransactions"]) == 4
    assert all(c["state"] == "open" for c in body["conflicts"])


def test_empty_note_falls_back_to_default_failure_reason(client):
    client.post("/transactions", json={"amount": 130000, "currency": "JPY", "merchantId": "mrc_omni"})
    [conflict] = client.get("/conflicts").json()["conflicts"]

    resolved = client.patch("/conflicts", json={"conflictId": conflict["id"], "note": ""})
    assert resolved.json()["conflict"]["resolutionNote"] == ""
    [stored] = client.get("/transactions").json()["transactions"]
    assert stored["failureReason"] == "manually-resolved"


def test_missing_note_uses_manual_resolution(client):
    client.post("/transactions", json={"amount": 130000, "currency": "JPY", "merchantId": "mrc_omni"})
    [conflict] = client.get("/conflicts").json()["conflicts"]
    client.patch("/conflicts", json={"conflictId": conflict["id"]})
    [stored] = client.get("/transactions").json()["transactions"]
    assert stored["failureReason"] == "manual-resolution"


@pytest.mark.parametrize("limit", ["abc", "inf", "NaN"])
def test_unparseable_limit_uses_default(limit):
    client = client_for(seed_demo_data=True, transactions_default_limit=3)
    resp = client.get("/transactions", params={"limit": limit})
    assert resp.status_code == 200
    assert len(resp.json()["transactions"]) == 3
