"""
order_tracker.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (the order API bearer token).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration:
    - Every field can be set as ORDER_TRACKER_<FIELD>
    - Defaults are safe for local dev, except the order source credential
    - Single settings object handed to the composition root
    """

    model_config = SettingsConfigDict(env_prefix="ORDER_TRACKER_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "order-tracker"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Order source (commerce REST API)
    orders_api_url: str = ""
    orders_api_token: str = Field(default="", repr=False)
    orders_per_page: int = Field(default=100, ge=1, le=100)
    http_timeout_seconds: float = 15.0

    # Reverse geocoding
    geocode_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocode_user_agent: str = "order-tracker/0.1"
    geocode_delay_seconds: float = Field(default=1.0, ge=0.0)
    area_fallback_label: str = "Location Linked"
    retain_resolved_areas: bool = False

    # 0 disables the timed re-fetch of the active window. Each tick re-enters the
    # loading state (the visible list is empty until the fetch lands); areas already
    # resolved for orders that come back are reused, only new orders are geocoded.
    refresh_interval_seconds: float = Field(default=0.0, ge=0.0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The order source never reads these settings directly; the composition root derives
# an explicit OrderSourceConfig from them (see `order_tracker.clients.orders`).
