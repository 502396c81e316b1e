"""
Integration tests for the Split Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from split_ledger.api import create_app, get_contract
from split_ledger.config import LedgerConfig
from split_ledger.contract import Contract
from split_ledger.storage import InMemoryStorage


@pytest.fixture
def contract():
    """Ledger over throwaway in-memory storage"""
    return Contract(InMemoryStorage(), LedgerConfig(database_url="memory://"))


@pytest.fixture
def client(contract):
    """Test client with the ledger dependency overridden"""
    app = create_app()
    app.dependency_overrides[get_contract] = lambda: contract
    return TestClient(app)


@pytest.fixture
def initialized(client):
    r = client.post("/instantiate", json={"fee_percent": 10}, headers={"X-Sender": "creator"})
    assert r.status_code == 200
    return client


def _send(client, amount, denom="usei", account1="account1", account2="account2", sender="sender"):
    return client.post("/execute", headers={"X-Sender": sender}, json={
        "msg": {"send": {"account1": account1, "account2": account2}},
        "funds": [{"denom": denom, "amount": str(amount)}]
    })


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestInstantiate:
    """Ledger initialization over HTTP"""

    def test_instantiate(self, client):
        r = client.post("/instantiate", json={"fee_percent": 10}, headers={"X-Sender": "creator"})
        assert r.status_code == 200
        assert {"key": "owner", "value": "creator"} in r.json()["attributes"]

        r = client.get("/owner")
        assert r.status_code == 200
        assert r.json()["text"] == "creator"

    def test_invalid_fee(self, client):
        r = client.post("/instantiate", json={"fee_percent": 101}, headers={"X-Sender": "creator"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidFee"

    def test_second_instantiate_rejected(self, initialized):
        r = initialized.post("/instantiate", json={"fee_percent": 0}, headers={"X-Sender": "intruder"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "AlreadyInitialized"
        assert initialized.get("/owner").json()["owner"] == "creator"

    def test_missing_sender_header(self, client):
        r = client.post("/instantiate", json={"fee_percent": 10})
        assert r.status_code == 422

    def test_uninitialized_ledger(self, client):
        r = client.get("/owner")
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "Uninitialized"

        r = client.post("/execute", headers={"X-Sender": "account1"},
                        json={"msg": {"withdraw": {"amount": "1", "denom": "usei"}}})
        assert r.status_code == 409


class TestTransferFlow:
    """End-to-end send and withdraw"""

    def test_send_and_query(self, initialized):
        r = _send(initialized, 10)
        assert r.status_code == 200
        assert r.json()["messages"] == []

        assert initialized.get("/balances/account1/usei").json()["text"] == "4"
        assert initialized.get("/balances/account2/usei").json()["text"] == "5"
        assert initialized.get("/balances/nobody/usei").json()["text"] == "0"

        r = initialized.get("/fees")
        assert r.status_code == 200
        assert r.json()["text"] == "fee=10% accrued=1usei"
        assert r.json()["format_version"] == 1

    def test_tagged_query(self, initialized):
        _send(initialized, 100)
        r = initialized.post("/query", json={"get_balance": {"account": "account1", "denom": "usei"}})
        assert r.status_code == 200
        assert r.json()["balance"] == "45"

        r = initialized.post("/query", json={"get_owner": {}})
        assert r.json()["text"] == "creator"

    def test_withdraw(self, initialized):
        _send(initialized, 100)
        r = initialized.post("/execute", headers={"X-Sender": "account1"},
                             json={"msg": {"withdraw": {"amount": "25", "denom": "usei"}}})
        assert r.status_code == 200
        assert r.json()["messages"] == [
            {"bank_send": {"to_address": "account1", "amount": [{"denom": "usei", "amount": "25"}]}}
        ]
        assert initialized.get("/balances/account1/usei").json()["balance"] == "20"

    def test_withdraw_insufficient_funds(self, initialized):
        _send(initialized, 100)
        r = initialized.post("/execute", headers={"X-Sender": "account1"},
                             json={"msg": {"withdraw": {"amount": "46", "denom": "usei"}}})
        assert r.status_code == 400
        detail = r.json()["detail"]
        assert detail["error"] == "InsufficientFunds"
        assert detail["balance"] == "45"
        assert detail["requested"] == "46"

    def test_withdraw_all(self, initialized):
        _send(initialized, 100)
        r = initialized.post("/execute", headers={"X-Sender": "account2"},
                             json={"msg": {"withdraw_all": {"denom": "usei"}}})
        assert r.status_code == 200
        assert initialized.get("/balances/account2/usei").json()["balance"] == "0"

    def test_malformed_amount(self, initialized):
        r = _send(initialized, "1.5")
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidAmount"

    def test_unknown_message(self, initialized):
        r = initialized.post("/execute", headers={"X-Sender": "sender"}, json={"msg": {"mint": {}}})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidMessage"

    def test_invalid_message_body(self, initialized):
        r = initialized.post("/execute", headers={"X-Sender": "sender"},
                             json={"msg": {"send": {"account1": "a"}}})
        assert r.status_code == 422
        assert r.json()["detail"]["error"] == "InvalidMessage"


class TestStrictAmounts:
    """JSON booleans and non-ASCII digits are never amounts"""

    def test_boolean_fee_rejected(self, client):
        r = client.post("/instantiate", json={"fee_percent": True}, headers={"X-Sender": "creator"})
        assert r.status_code == 422
        assert client.get("/owner").status_code == 409

    def test_boolean_send_amount_rejected(self, initialized):
        r = initialized.post("/execute", headers={"X-Sender": "sender"}, json={
            "msg": {"send": {"account1": "account1", "account2": "account2"}},
            "funds": [{"denom": "usei", "amount": True}]
        })
        assert r.status_code == 422
        assert initialized.get("/balances/account2/usei").json()["balance"] == "0"

    def test_boolean_withdraw_amount_rejected(self, initialized):
        _send(initialized, 100)
        r = initialized.post("/execute", headers={"X-Sender": "account1"},
                             json={"msg": {"withdraw": {"amount": True, "denom": "usei"}}})
        assert r.status_code == 422
        assert r.json()["detail"]["error"] == "InvalidMessage"
        assert initialized.get("/balances/account1/usei").json()["balance"] == "45"

    def test_fullwidth_digits_rejected(self, initialized):
        r = _send(initialized, "０１")
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidAmount"
        assert initialized.get("/balances/account2/usei").json()["balance"] == "0"

    def test_malformed_denom_reported_as_denom_error(self, initialized):
        r = initialized.get("/balances/account1/u sei")
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidDenom"

        r = initialized.post("/execute", headers={"X-Sender": "account1"},
                             json={"msg": {"withdraw_max": {"denom": ""}}})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidDenom"
