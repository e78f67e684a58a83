"""
Configuration for flowpieces.

Settings are read from ``FLOWPIECES_*`` environment variables into a
pydantic model. Credentials for Kommo and Zagomail are NOT settings:
they arrive per invocation from the host's connection store.
"""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class AppSettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access by the host adapter and the
    default client factories of the pieces.
    """

    # Service identity
    service_name: str = "flowpieces"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Vendor HTTP
    http_timeout: float = Field(30.0, gt=0, description="Per-request timeout in seconds")
    log_http: bool = Field(False, description="Log vendor request/response bodies at DEBUG")
    kommo_domain: str = Field("kommo.com", description="Kommo account domain suffix")
    zagomail_base_url: str = Field(
        "https://api.zagomail.com", description="Zagomail API base URL"
    )


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@lru_cache
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern; call ``get_settings.cache_clear()``
    after changing the environment in tests.
    """
    return AppSettings(
        service_name=os.getenv("FLOWPIECES_SERVICE_NAME", "flowpieces"),
        environment=os.getenv("FLOWPIECES_ENVIRONMENT", "development"),
        debug=_env_flag("FLOWPIECES_DEBUG"),
        log_level=os.getenv("FLOWPIECES_LOG_LEVEL", "INFO").upper(),
        http_timeout=float(os.getenv("FLOWPIECES_HTTP_TIMEOUT", "30")),
        log_http=_env_flag("FLOWPIECES_LOG_HTTP"),
        kommo_domain=os.getenv("FLOWPIECES_KOMMO_DOMAIN", "kommo.com"),
        zagomail_base_url=os.getenv("FLOWPIECES_ZAGOMAIL_BASE_URL", "https://api.zagomail.com"),
    )
