"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Literal, Optional


class LedgerConfig(BaseSettings):
    """Branch ledger configuration"""

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Optional[str] = None  # If None, logs to stderr

    # Interest configuration
    interest_balance_sampling: Literal["period_start", "daily"] = "period_start"
    interest_calculation_method: Literal["actual_365", "actual_360"] = "actual_365"

    # Transaction ids: YYYYMMDD-NN
    transaction_sequence_width: int = 2

    # Longest range the daily balance listing returns
    max_daily_balance_days: int = 3660

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
