"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Banking ledger engine configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Persistence configuration
    storage_backend: str = "memory"  # memory or sqlite
    database_path: str = "ledger.db"

    # Reference seed data; None uses the bundled demo data set
    seed_data_path: Optional[str] = None

    # Business rules configuration
    default_interest_rate: str = "0.0425"  # Savings accounts seeded without a rate
    days_in_year: int = 365
    default_open_date: str = "2023-01-15T00:00:00+00:00"
    transfer_category: str = "Transfer"

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
