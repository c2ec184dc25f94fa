"""
Settings for the confidential voting client
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings, read from FHE_VOTE_* environment variables or .env"""
    model_config = SettingsConfigDict(env_prefix="FHE_VOTE_", env_file=".env", extra="ignore")

    # Ledger
    rpc_url: str = "http://localhost:8545"
    contract_address: Optional[str] = None
    chain_id: int = 11155111  # Sepolia
    private_key: Optional[str] = None
    confirmations: int = Field(1, ge=1)
    tx_timeout: float = 120.0  # seconds

    # Status display
    success_clear_delay: float = 2.0
    error_clear_delay: float = 3.0

    # Derived state
    history_capacity: int = Field(10, ge=1)
    recent_window_seconds: int = 60 * 60 * 24 * 7

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
