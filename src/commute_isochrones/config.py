"""
Application settings.

Read from environment variables (case-insensitive) and an optional ``.env`` file::

    MAPBOX_ACCESS_TOKEN=pk.xxx
    OPENROUTE_API_KEY=xxx
    GOOGLE_API_KEY=xxx
    REACHABILITY_CEILING_MINUTES=60
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from commute_isochrones.providers.base import ProviderOptions
from commute_isochrones.schemas import (
    GOOGLE_BASE_URL,
    MAPBOX_BASE_URL,
    OPENROUTE_BASE_URL,
    AnyProviderConfig,
    GoogleConfig,
    MapboxConfig,
    OpenRouteConfig,
)


class Settings(BaseSettings):
    """Process configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "commute-isochrones"
    app_env: str = "development"
    debug: bool = False

    # Backends; an empty credential leaves that backend out of the registry
    mapbox_access_token: str | None = None
    mapbox_base_url: str = MAPBOX_BASE_URL
    openroute_api_key: str | None = None
    openroute_base_url: str = OPENROUTE_BASE_URL
    google_api_key: str | None = None
    google_base_url: str = GOOGLE_BASE_URL

    # Fan-out and HTTP
    http_timeout_s: float = Field(default=15.0, gt=0)
    destination_workers: int = Field(default=4, ge=1)
    point_workers: int = Field(default=8, ge=1)

    # Grid sampling
    reachability_ceiling_minutes: float = Field(default=60.0, gt=0)
    fallback_point_count: int = Field(default=10, ge=1)

    # Result cache
    cache_dir: Path = Path("data")
    cache_ttl_hours: float = Field(default=24.0, ge=0)

    def provider_configs(self) -> list[AnyProviderConfig]:
        """One config per backend, whether or not its credentials are set."""
        return [
            MapboxConfig(access_token=self.mapbox_access_token, base_url=self.mapbox_base_url),
            OpenRouteConfig(api_key=self.openroute_api_key, base_url=self.openroute_base_url),
            GoogleConfig(api_key=self.google_api_key, base_url=self.google_base_url),
        ]

    def provider_options(self) -> ProviderOptions:
        return ProviderOptions(
            destination_workers=self.destination_workers,
            point_workers=self.point_workers,
            ceiling_minutes=self.reachability_ceiling_minutes,
            fallback_count=self.fallback_point_count,
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
