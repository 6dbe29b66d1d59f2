"""
Tests for configuration and store construction
"""

import pytest
import tempfile
from pathlib import Path

from banking_ledger import config as config_module
from banking_ledger.config import LedgerConfig, get_config, reload_config
from banking_ledger.seed import JsonSeedSource, StaticSeedSource
from banking_ledger.storage import InMemoryGateway, SQLiteGateway
from banking_ledger.store import create_store


class TestLedgerConfig:
    """Test settings defaults and environment overrides"""

    def test_defaults(self):
        config = LedgerConfig()
        assert config.storage_backend == "memory"
        assert config.default_interest_rate == "0.0425"
        assert config.days_in_year == 365
        assert config.transfer_category == "Transfer"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LEDGER_DAYS_IN_YEAR", "360")
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "sqlite")

        config = LedgerConfig()

        assert config.days_in_year == 360
        assert config.storage_backend == "sqlite"

    def test_reload_config(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("LEDGER_TRANSFER_CATEGORY", "Internal")
        try:
            reloaded = reload_config()
            assert reloaded.transfer_category == "Internal"
            assert get_config() is reloaded
        finally:
            config_module.config = original


class TestCreateStore:
    """Test building a store from configuration"""

    def test_memory_backend(self):
        store = create_store(LedgerConfig(storage_backend="memory", log_format="text"))
        assert isinstance(store.gateway, InMemoryGateway)
        assert isinstance(store.seed_source, StaticSeedSource)
        assert store.get_accounts("user001").success

    def test_sqlite_backend(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            db_path = Path(temp_dir) / "ledger.db"
            store = create_store(LedgerConfig(storage_backend="sqlite", database_path=str(db_path)))

            assert isinstance(store.gateway, SQLiteGateway)
            assert store.get_accounts("user002").success
            store.gateway.close()

    def test_seed_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "seed.json"
            path.write_text('{"users": {"user777": {"accounts": []}}}', encoding="utf-8")

            store = create_store(LedgerConfig(seed_data_path=str(path)))

            assert isinstance(store.seed_source, JsonSeedSource)
            assert store.get_accounts("user777").value == []
            assert not store.get_accounts("user001").success

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_store(LedgerConfig(storage_backend="postgres"))
