"""
orderdesk.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (identity service API key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration, read once per process.
    Defaults are safe for local dev; prod must provide identity credentials.
    """

    model_config = SettingsConfigDict(env_prefix="ORDERDESK_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "orderdesk"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./orderdesk.db"
    db_timeout_seconds: float = Field(default=3.0, gt=0)

    # Identity service (Firebase Auth compatible)
    identity_project_id: str = "orderdesk-dev"
    identity_api_key: str = Field(default="", repr=False)
    identity_base_url: str = "https://identitytoolkit.googleapis.com/v1"
    identity_jwks_url: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
    )
    identity_timeout_seconds: float = Field(default=5.0, gt=0)
    identity_jwks_cache_seconds: int = Field(default=3600, ge=0)

    # Registration: delete the external identity when the internal insert fails.
    register_compensation: bool = True

    @property
    def identity_issuer(self) -> str:
        return f"https://securetoken.google.com/{self.identity_project_id}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every layer reads settings through `get_settings` (or an explicitly passed
# instance in tests); nothing reads os.environ directly except alembic/env.py.
