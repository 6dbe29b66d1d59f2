"""
API integration tests

Tests the HTTP surface using FastAPI TestClient against an in-memory store.
"""

import inspect
from datetime import datetime, timezone

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from banking_ledger.api import create_app
from banking_ledger.config import LedgerConfig
from banking_ledger.seed import StaticSeedSource
from banking_ledger.storage import InMemoryGateway
from banking_ledger.store import LedgerStore


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

SEED = {
    "user001": {
        "accounts": [
            {"accountId": "CHK", "accountType": "checking", "balance": 500},
            {"accountId": "SAV", "accountType": "savings", "balance": 1000,
             "interestRate": 0.0425, "lastInterestDate": "2024-03-15T12:00:00Z"},
        ],
        "budget": {"categories": [{"category": "Utilities", "limit": 250}]},
        "cards": [{"id": "CARD1", "accountId": "CHK", "cardType": "debit", "limit": 2500}],
        "payees": [{"payeeId": "PAY1", "name": "City Power", "category": "Utilities"}],
    }
}


class TestLedgerAPI:
    """Test user-scoped endpoints"""

    def setup_method(self):
        store = LedgerStore(InMemoryGateway(), StaticSeedSource(SEED), LedgerConfig(),
                            clock=lambda: NOW)
        self.client = TestClient(create_app(store))

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_accounts(self):
        response = self.client.get("/users/user001/accounts")

        assert response.status_code == 200
        accounts = response.json()["accounts"]
        assert [a["account_id"] for a in accounts] == ["CHK", "SAV"]
        assert accounts[0]["balance"] == "500.00"

    def test_unknown_user_is_404(self):
        response = self.client.get("/users/nobody/accounts")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    def test_transfer(self):
        """Test a transfer and the balances it leaves"""
        response = self.client.post("/users/user001/transfers", json={
            "from_account_id": "CHK",
            "to_account_id": "SAV",
            "amount": "250.00",
            "description": "Monthly savings",
        })

        assert response.status_code == 201
        assert len(response.json()["entries"]) == 2

        account = self.client.get("/users/user001/accounts/SAV").json()
        assert account["balance"] == "1250.00"
        assert account["display_number"].startswith("2001-001-0002-")

    def test_insufficient_funds_is_400(self):
        response = self.client.post("/users/user001/transfers", json={
            "from_account_id": "CHK", "to_account_id": "SAV", "amount": "600"
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "insufficient_funds"

    def test_malformed_amount_is_400(self):
        response = self.client.post("/users/user001/withdrawals",
                                    json={"account_id": "CHK", "amount": "1e2"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_amount"

    def test_statement_year_zero_is_404(self):
        response = self.client.get("/users/user001/accounts/CHK/statements/0/5")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    def test_transactions_filtered_by_account(self):
        self.client.post("/users/user001/deposits", json={"account_id": "CHK", "amount": "20"})

        response = self.client.get("/users/user001/transactions", params={"account_id": "CHK"})
        entries = response.json()["transactions"]
        assert [e["amount"] for e in entries] == ["20.00"]

    def test_bill_payment_updates_budget(self):
        response = self.client.post("/users/user001/bill-payments", json={
            "from_account_id": "CHK", "payee_id": "PAY1", "amount": "75"
        })
        assert response.status_code == 201

        budget = self.client.get("/users/user001/budget").json()
        assert budget["categories"]["Utilities"]["spent"] == "75.00"

    def test_card_lifecycle(self):
        """Test freeze, report lost and the conflict that follows"""
        frozen = self.client.post("/users/user001/cards/CARD1/freeze").json()
        assert frozen["status"] == "frozen"

        blocked = self.client.post("/users/user001/cards/CARD1/report-lost").json()
        assert blocked["status"] == "blocked"

        response = self.client.post("/users/user001/cards/CARD1/unfreeze")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "invalid_card_state"

    def test_card_features_and_limit(self):
        card = self.client.patch("/users/user001/cards/CARD1/features",
                                 json={"international_transactions": True}).json()
        assert card["features"]["international_transactions"] is True

        card = self.client.put("/users/user001/cards/CARD1/limit", json={"limit": "1200"}).json()
        assert card["limit"] == "1200.00"

    def test_update_budget_category(self):
        response = self.client.put("/users/user001/budget/categories/Travel",
                                   json={"limit": "300", "color": "#123456"})
        assert response.status_code == 200
        assert response.json()["categories"]["Travel"]["limit"] == "300.00"

    def test_generate_account_number(self):
        response = self.client.post("/users/user001/account-numbers",
                                    json={"account_type": "credit"})
        assert response.status_code == 201
        assert response.json()["account_number"].startswith("40010010003")

    def test_statement(self):
        self.client.post("/users/user001/withdrawals", json={"account_id": "CHK", "amount": "50"})

        statement = self.client.get("/users/user001/accounts/CHK/statements/2024/3").json()
        assert statement["total_withdrawals"] == "50.00"
        assert statement["is_available"] is False
        assert len(statement["entries"]) == 1


class TestRouteHandlers:
    """Test how ledger routes are dispatched"""

    def test_user_routes_are_synchronous(self):
        """Test that store-backed handlers run in the thread pool, off the event loop"""
        store = LedgerStore(InMemoryGateway(), StaticSeedSource(SEED), LedgerConfig())
        routes = [r for r in create_app(store).routes
                  if isinstance(r, APIRoute) and r.path.startswith("/users/")]

        assert len(routes) == 20
        for route in routes:
            assert not inspect.iscoroutinefunction(route.endpoint), route.path
