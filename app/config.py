from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App configuration (env-friendly).

    Every field can be overridden with an environment variable of the same name
    (case-insensitive) or from a local .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Cooling Centre Finder API"
    version: str = "0.1.0"

    dataset_url: AnyHttpUrl = "http://app.toronto.ca/opendata//ac_locations/locations.json?v=1.00"
    nominatim_base_url: AnyHttpUrl = "https://nominatim.openstreetmap.org/search"

    # Nominatim's usage policy expects a proper User-Agent and (optionally) contact info.
    user_agent: str = "cooling-centre-finder/0.1.0"
    nominatim_email: Optional[str] = None

    http_timeout_s: float = 20.0
    fetch_retries: int = 2
    retry_backoff_s: float = 0.5

    cache_ttl_s: float = 300.0
    cache_max_size: int = 64

    display_locality: str = "Toronto, ON"

    # Abort the whole lookup when the nearest centre has no address/phone,
    # instead of passing over it.
    strict_closest_details: bool = False

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
