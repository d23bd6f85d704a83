"""
kart_api.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT secret, admin password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object constructed once at process start and passed by
    reference into the token codec, guard and stores.
    """

    model_config = SettingsConfigDict(env_prefix="KART_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "kart-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Auth. No default secret: a missing secret is a deployment error.
    jwt_alg: str = "HS256"
    jwt_secret: str | None = Field(default=None, repr=False)
    # Only for exercising the server_config_error path; never set in prod.
    allow_missing_jwt_secret: bool = False

    admin_email: str | None = None
    admin_password: str | None = Field(default=None, repr=False)

    # Session cookie attributes that depend on the deployment.
    cookie_secure: bool = True
    cookie_samesite: Literal["lax", "strict", "none"] = "none"
    cookie_httponly: bool = False

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./kart.db"

    # Cart
    cart_max_write_attempts: int = Field(default=8, ge=1)

    @property
    def is_production(self) -> bool:
        return self.env == "prod"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Cookie defaults (secure + SameSite=None) match cross-origin deployments where
# the storefront and the API live on different sites.
