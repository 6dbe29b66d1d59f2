"""
Reference Seed Data Module

Read-only per-user starting data (accounts, transactions, budget, cards,
payees) used the first time a user's ledger is opened. Records use the
dashboard's camelCase JSON layout:

    {"users": {"user001": {"accounts": [...], "transactions": [...],
                           "budget": {...}, "cards": [...], "payees": [...]}}}
"""

import json
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union


class SeedSource(ABC):
    """Abstract source of reference seed data"""

    @abstractmethod
    def for_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Seed record for a user, None if the user has no reference data"""
        pass


class StaticSeedSource(SeedSource):
    """Seed data held in memory, keyed by user id"""

    def __init__(self, users: Dict[str, Dict[str, Any]]):
        self._users = users

    def for_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        record = self._users.get(user_id)
        # Copy so bootstrapping can never write back into the reference data
        return deepcopy(record) if record is not None else None


class JsonSeedSource(StaticSeedSource):
    """Seed data loaded once from a JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        with self.path.open(encoding="utf-8") as handle:
            data = json.load(handle)
        super().__init__(data.get("users", {}))


DEMO_SEED_DATA: Dict[str, Dict[str, Any]] = {
    "user001": {
        "accounts": [
            {
                "accountId": "ACC001",
                "accountType": "checking",
                "accountName": "Everyday Checking",
                "balance": 5420.50,
                "availableBalance": 5420.50,
                "status": "active",
                "openDate": "2023-01-15T00:00:00Z",
                "interestRate": 0.0,
            },
            {
                "accountId": "ACC002",
                "accountType": "savings",
                "accountName": "High Yield Savings",
                "balance": 12500.00,
                "availableBalance": 12500.00,
                "status": "active",
                "openDate": "2023-01-15T00:00:00Z",
                "interestRate": 0.0425,
            },
            {
                "accountId": "ACC003",
                "accountType": "credit",
                "accountName": "Rewards Credit Card",
                "balance": -1250.75,
                "availableBalance": -1250.75,
                "creditLimit": 5000.00,
                "status": "active",
                "openDate": "2023-03-01T00:00:00Z",
                "interestRate": 0.1899,
            },
        ],
        "transactions": [
            {
                "transactionId": "TXN-SEED-0001",
                "accountId": "ACC001",
                "date": "2024-01-02T09:15:00Z",
                "description": "Payroll Deposit",
                "amount": 3200.00,
                "type": "credit",
                "category": "Income",
                "status": "completed",
                "balance": 5660.50,
            },
            {
                "transactionId": "TXN-SEED-0002",
                "accountId": "ACC001",
                "date": "2024-01-05T18:42:00Z",
                "description": "Whole Foods Market",
                "amount": -156.23,
                "type": "debit",
                "category": "Groceries",
                "status": "completed",
                "balance": 5504.27,
            },
            {
                "transactionId": "TXN-SEED-0003",
                "accountId": "ACC001",
                "date": "2024-01-07T12:10:00Z",
                "description": "City Power & Light",
                "amount": -83.77,
                "type": "debit",
                "category": "Utilities",
                "status": "completed",
                "balance": 5420.50,
            },
            {
                "transactionId": "TXN-SEED-0004",
                "accountId": "ACC003",
                "date": "2024-01-06T20:05:00Z",
                "description": "Bistro Nine",
                "amount": -64.50,
                "type": "debit",
                "category": "Dining",
                "status": "completed",
                "balance": -1250.75,
            },
        ],
        "budget": {
            "categories": [
                {"category": "Groceries", "limit": 600.00, "spent": 0, "color": "#4caf50"},
                {"category": "Dining", "limit": 300.00, "spent": 0, "color": "#ff9800"},
                {"category": "Utilities", "limit": 250.00, "spent": 0, "color": "#2196f3"},
                {"category": "Entertainment", "limit": 150.00, "spent": 0, "color": "#9c27b0"},
                {"category": "Transportation", "limit": 200.00, "spent": 0, "color": "#607d8b"},
            ],
        },
        "cards": [
            {
                "id": "CARD001",
                "accountId": "ACC001",
                "cardType": "debit",
                "cardNumber": "4532-1234-5678-9012",
                "status": "active",
                "limit": 2500.00,
                "spent": 239.99,
                "contactless": True,
                "onlineTransactions": True,
                "internationalTransactions": False,
                "atmWithdrawals": True,
            },
            {
                "id": "CARD002",
                "accountId": "ACC003",
                "cardType": "credit",
                "cardNumber": "5412-7534-9821-0043",
                "status": "active",
                "limit": 5000.00,
                "spent": 1250.75,
                "contactless": True,
                "onlineTransactions": True,
                "internationalTransactions": True,
                "atmWithdrawals": False,
            },
        ],
        "payees": [
            {
                "payeeId": "PAY001",
                "name": "City Power & Light",
                "accountNumber": "88812345",
                "category": "Utilities",
                "isFavorite": True,
            },
            {
                "payeeId": "PAY002",
                "name": "Metro Transit Authority",
                "accountNumber": "55500917",
                "category": "Transportation",
                "isFavorite": False,
            },
        ],
    },
    "user002": {
        "accounts": [
            {
                "accountId": "ACC101",
                "accountType": "checking",
                "accountName": "Business Checking",
                "balance": 48250.00,
                "status": "active",
                "openDate": "2022-06-01T00:00:00Z",
            },
            {
                "accountId": "ACC102",
                "accountType": "savings",
                "accountName": "Reserve Savings",
                "balance": 100000.00,
                "status": "active",
                "openDate": "2022-06-01T00:00:00Z",
            },
            {
                "accountId": "ACC103",
                "accountType": "loan",
                "accountName": "Equipment Loan",
                "balance": -35000.00,
                "creditLimit": 50000.00,
                "status": "active",
                "openDate": "2023-02-10T00:00:00Z",
                "interestRate": 0.0675,
            },
        ],
        "transactions": [],
        "budget": {
            "categories": [
                {"category": "Payroll", "limit": 30000.00, "spent": 0, "color": "#3f51b5"},
                {"category": "Supplies", "limit": 4000.00, "spent": 0, "color": "#009688"},
            ],
        },
        "cards": [],
        "payees": [],
    },
}


def demo_seed_source() -> StaticSeedSource:
    """Seed source over the bundled demo users"""
    return StaticSeedSource(DEMO_SEED_DATA)
