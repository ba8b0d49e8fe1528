"""
Integration tests for the savings ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from savings_ledger.api import create_app
from savings_ledger.config import SavingsConfig
from savings_ledger.ledger import SavingsLedger


@pytest.fixture
def ledger():
    return SavingsLedger()


@pytest.fixture
def client(ledger):
    """Create a test client around a fresh ledger"""
    app = create_app(ledger=ledger, config=SavingsConfig())
    return TestClient(app)


def add_customer(client, name="Ama"):
    r = client.post("/customers", json={"name": name})
    assert r.status_code == 201
    return r.json()


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestCustomerFlow:
    """Customer list, add-customer and balance card"""

    def test_empty_customer_list(self, client):
        r = client.get("/customers")
        assert r.status_code == 200
        data = r.json()
        assert data["customers"] == []
        assert data["message"] == "No customers added yet"

    def test_add_customer(self, client):
        data = add_customer(client, "  Ama  ")
        assert data["id"] == 1
        assert data["name"] == "Ama"
        assert data["current_balance"] == "0.00"
        assert data["currency"] == "GHS"
        assert data["balance_display"] == "GH₵0.00"

    def test_blank_name_rejected(self, client, ledger):
        r = client.post("/customers", json={"name": "   "})
        assert r.status_code == 422
        assert ledger.get_customers() == []

    def test_list_customers(self, client):
        add_customer(client, "Ama")
        add_customer(client, "Kofi")

        data = client.get("/customers").json()
        assert [c["name"] for c in data["customers"]] == ["Ama", "Kofi"]
        assert data["message"] is None

    def test_get_customer(self, client):
        customer = add_customer(client)
        r = client.get(f"/customers/{customer['id']}")
        assert r.status_code == 200
        assert r.json()["name"] == "Ama"

    def test_get_unknown_customer(self, client):
        r = client.get("/customers/99")
        assert r.status_code == 404
        assert r.json()["detail"]["reason"] == "unknown_customer"


class TestTransactionFlow:
    """Deposit, withdraw and history screens"""

    def test_deposit_and_withdraw(self, client):
        customer_id = add_customer(client)["id"]

        r = client.post(f"/customers/{customer_id}/deposits", json={"amount": "50"})
        assert r.status_code == 201
        deposit = r.json()
        assert deposit["id"] == 1
        assert deposit["is_deposit"] is True
        assert deposit["transaction_type"] == "deposit"
        assert deposit["amount"] == "50.00"
        assert deposit["running_balance"] == "50.00"
        assert deposit["amount_display"] == "+GH₵50.00"

        r = client.post(f"/customers/{customer_id}/withdrawals", json={"amount": "20"})
        assert r.status_code == 201
        withdrawal = r.json()
        assert withdrawal["id"] == 2
        assert withdrawal["running_balance"] == "30.00"
        assert withdrawal["amount_display"] == "-GH₵20.00"
        assert withdrawal["balance_display"] == "GH₵30.00"

        assert client.get(f"/customers/{customer_id}").json()["balance_display"] == "GH₵30.00"

    def test_insufficient_balance(self, client):
        customer_id = add_customer(client)["id"]
        client.post(f"/customers/{customer_id}/deposits", json={"amount": "30"})

        r = client.post(f"/customers/{customer_id}/withdrawals", json={"amount": "1000"})
        assert r.status_code == 400
        assert r.json()["detail"]["reason"] == "insufficient_balance"
        assert client.get(f"/customers/{customer_id}").json()["current_balance"] == "30.00"

    @pytest.mark.parametrize("amount", ["-5", "0", "abc", "5 or 10", "12abc34", "1" + "0" * 27])
    def test_invalid_amount(self, client, amount):
        customer_id = add_customer(client)["id"]

        r = client.post(f"/customers/{customer_id}/deposits", json={"amount": amount})
        assert r.status_code == 400
        assert r.json()["detail"]["reason"] == "invalid_amount"

    def test_exponent_amount_accepted(self, client):
        customer_id = add_customer(client)["id"]

        r = client.post(f"/customers/{customer_id}/deposits", json={"amount": "1e3"})
        assert r.status_code == 201
        assert r.json()["amount"] == "1000.00"

    def test_deposit_to_unknown_customer(self, client):
        r = client.post("/customers/7/deposits", json={"amount": "5"})
        assert r.status_code == 404

    def test_history(self, client):
        customer_id = add_customer(client)["id"]

        r = client.get(f"/customers/{customer_id}/transactions")
        assert r.status_code == 200
        assert r.json()["transactions"] == []
        assert r.json()["message"] == "No transactions yet"

        client.post(f"/customers/{customer_id}/deposits", json={"amount": "50"})
        client.post(f"/customers/{customer_id}/withdrawals", json={"amount": "20"})

        data = client.get(f"/customers/{customer_id}/transactions").json()
        assert [t["id"] for t in data["transactions"]] == [2, 1]
        assert data["message"] is None

    def test_history_for_unknown_customer(self, client):
        r = client.get("/customers/5/transactions")
        assert r.status_code == 404

    def test_api_shares_ledger_instance(self, client, ledger):
        """Operations through the API are visible on the injected ledger"""
        customer_id = add_customer(client)["id"]
        client.post(f"/customers/{customer_id}/deposits", json={"amount": "12.50"})

        assert str(ledger.get_customer(customer_id).current_balance.amount) == "12.50"
