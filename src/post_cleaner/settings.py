"""
post_cleaner.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Carry the constants of the overwrite payload (placeholder text, origin marker, backdate).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="POST_CLEANER_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "post-cleaner"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Record store (the actor's PDS) and the web front-end accepted by the resolver.
    pds_url: str = "https://bsky.social"
    web_host: str = "bsky.app"
    http_timeout_seconds: float = Field(default=15.0, gt=0)

    # Cleanup
    placeholder_text: str = "bsky-post-cleanerにより削除中"
    origin_marker: str = "bsky-post-cleaner"
    backdate_hours: int = Field(default=24, ge=0)

    # Access tokens expiring within this window are treated as expired.
    token_leeway_seconds: int = Field(default=30, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The API stores the settings it was built with on app.state; `get_settings` is only
# the default used by the process entrypoint.
