"""
salon_identity.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the resolver, matcher, HTTP clients and stub backend.
- Hide secrets from repr/logging (stub JWT secret).
- Offer a cached settings instance for composition roots.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object shared by every layer.

    Defaults target a local backend on port 5000, which is how the app is
    developed against the stub in `salon_identity.stub`.
    """

    model_config = SettingsConfigDict(env_prefix="SALON_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "salon-identity"
    log_level: str = "INFO"

    # Backend
    api_base_url: str = "http://localhost:5000/api"

    # Timeouts (seconds). The exchange and compare calls used to be unbounded.
    crud_timeout_s: float = 10.0
    exchange_timeout_s: float = 15.0
    compare_timeout_s: float = 15.0

    # Face matching
    match_threshold: float = Field(default=80.0, ge=0, le=100)
    relaxed_match_threshold: float = Field(default=70.0, ge=0, le=100)

    # Token resolution
    any_scope_order: list[Literal["admin", "manager"]] = Field(
        default_factory=lambda: ["manager", "admin"]
    )
    read_legacy_keys: bool = True

    # Persistence
    store_url: str = "sqlite+aiosqlite:///./credentials.db"

    # Stub backend (dev/test only)
    stub_host: str = "127.0.0.1"
    stub_port: int = 5000
    jwt_alg: str = "HS256"
    jwt_issuer: str = "salon-backend"
    jwt_audience: str = "salon-app"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(env="test", ...)` directly instead of going through the cache.
