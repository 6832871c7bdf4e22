from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables and .env file.

    Every value has a default except the network endpoint, which falls back to
    the public explorer API so that read-only queries work out of the box.
    """

    # App basics
    ENV: Literal["development", "staging", "production"] = "development"
    """Environment mode: selects the log renderer."""

    LOG_LEVEL: str = "INFO"
    """Minimum level for log output."""

    # Network
    ALEO_ENDPOINT: str = "https://api.explorer.provable.com"
    """Base URL of the network query/broadcast API (without the /v2 suffix)."""

    ALEO_NETWORK: str = "testnet"
    """Network path segment (testnet, mainnet, canary)."""

    # Delegated proving / authentication
    PROVABLE_CONSUMER_ID: Optional[str] = None
    """Consumer id used to request session tokens."""

    PROVABLE_API_KEY: Optional[str] = None
    """Long-lived API key paired with PROVABLE_CONSUMER_ID."""

    PROVABLE_AUTH_URL: str = "https://api.provable.com"
    """Host issuing session tokens."""

    PROVABLE_PROVER_URL: str = "https://api.provable.com"
    """Host of the delegated proving service."""

    DELEGATED_PROVING: Literal["off", "fallback", "only"] = "off"
    """Proving strategy: local only, delegated with local fallback, delegated only."""

    # Timeouts (seconds)
    REQUEST_TIMEOUT: float = 30.0
    CONFIRMATION_TIMEOUT: float = 120.0
    PROGRAM_TIMEOUT: float = 60.0

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid re-parsing .env repeatedly."""
    return Settings()
