"""
Tests for persistence gateways
"""

import pytest
import tempfile
from pathlib import Path

from banking_ledger.errors import PersistenceFailure
from banking_ledger.storage import InMemoryGateway, SQLiteGateway


snapshot = {
    "version": 1,
    "user_id": "user001",
    "accounts": [{"account_id": "CHK", "balance": "500.00"}],
    "transactions": [],
}


class TestInMemoryGateway:
    """Test the in-memory gateway"""

    def setup_method(self):
        self.gateway = InMemoryGateway()

    def test_save_and_load(self):
        self.gateway.save("user001", snapshot)
        assert self.gateway.load("user001") == snapshot

    def test_load_missing(self):
        assert self.gateway.load("nobody") is None

    def test_loaded_snapshot_is_a_copy(self):
        """Test that changing a loaded snapshot does not change the stored one"""
        self.gateway.save("user001", snapshot)
        loaded = self.gateway.load("user001")
        loaded["accounts"][0]["balance"] = "0.00"

        assert self.gateway.load("user001")["accounts"][0]["balance"] == "500.00"

    def test_unserialisable_snapshot(self):
        with pytest.raises(PersistenceFailure):
            self.gateway.save("user001", {"bad": object()})
        assert self.gateway.load("user001") is None

    def test_delete_and_user_ids(self):
        self.gateway.save("user001", snapshot)
        self.gateway.save("user002", snapshot)
        assert sorted(self.gateway.user_ids()) == ["user001", "user002"]

        assert self.gateway.delete("user001")
        assert not self.gateway.delete("user001")
        assert self.gateway.user_ids() == ["user002"]


class TestSQLiteGateway:
    """Test the SQLite gateway"""

    def test_save_replace_and_load(self):
        gateway = SQLiteGateway()
        gateway.save("user001", snapshot)
        gateway.save("user001", {**snapshot, "transactions": [{"transaction_id": "TXN1"}]})

        loaded = gateway.load("user001")
        assert loaded["transactions"] == [{"transaction_id": "TXN1"}]
        assert gateway.user_ids() == ["user001"]
        gateway.close()

    def test_persists_across_connections(self):
        """Test that a file database survives reopening"""
        with tempfile.TemporaryDirectory() as temp_dir:
            db_path = Path(temp_dir) / "ledger.db"

            gateway = SQLiteGateway(db_path)
            gateway.save("user001", snapshot)
            gateway.close()

            reopened = SQLiteGateway(db_path)
            assert reopened.load("user001") == snapshot
            reopened.close()

    def test_delete(self):
        gateway = SQLiteGateway()
        gateway.save("user001", snapshot)
        assert gateway.delete("user001")
        assert gateway.load("user001") is None
        assert not gateway.delete("user001")
        gateway.close()

    def test_unserialisable_snapshot(self):
        gateway = SQLiteGateway()
        with pytest.raises(PersistenceFailure):
            gateway.save("user001", {"bad": object()})
        gateway.close()

    def test_closed_connection_reports_failure(self):
        """Test that using a closed gateway raises PersistenceFailure"""
        gateway = SQLiteGateway()
        gateway.close()
        with pytest.raises(PersistenceFailure):
            gateway.save("user001", snapshot)
