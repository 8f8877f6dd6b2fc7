"""
core/config.py
----------------

Application configuration module.

Defines strongly‑typed settings loaded from the environment using
``pydantic-settings``. These settings control the database location,
the cache lifetimes used by the catalog read paths and the pagination
limits of the listing endpoint. Defaults are suitable for local
development and can be overridden via environment variables at
deployment time.
"""

from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The settings structure is flat and uses environment variables
    prefixed with ``APP_``.  For example, to keep cached products for
    ten minutes you can set ``APP_PRODUCT_CACHE_TTL=600``.

    See :class:`pydantic_settings.BaseSettings` for details on how
    environment variables are mapped onto fields.
    """

    # Database
    database_url: str = Field("sqlite:///./catalog.db", description="SQLAlchemy URL of the product store.")

    # Cache (all values in seconds)
    cache_default_ttl: float = Field(300.0, description="TTL applied when a cache write does not specify one.")
    cache_sweep_interval: float = Field(300.0, gt=0, description="Seconds between background sweeps of expired entries.")
    product_cache_ttl: float = Field(300.0, description="TTL of cached single products.")
    list_cache_ttl: float = Field(120.0, description="TTL of cached product listings.")

    # Pagination guards
    default_page_size: int = Field(10, ge=1, description="Page size used when the request does not give a valid one.")
    max_page_size: int = Field(100, ge=1, description="Largest page size accepted from clients.")

    log_level: str = Field("INFO", description="Level of the application logger.")

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=None, case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the application settings.

    Using a cache prevents expensive environment parsing on every call.
    The returned object is immutable and safe to share across threads.
    """
    return Settings()
