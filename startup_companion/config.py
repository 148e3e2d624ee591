"""Configuration helpers for the StartUP Companion backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Mapping

from dotenv import load_dotenv

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

load_dotenv(override=False)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the completion gateway, Supabase and polling.

    Supabase is optional; without a URL and service role key the application
    falls back to in-memory backends.
    """

    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"
    request_timeout_seconds: float = 90.0
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    storage_bucket: str = "business-documents"
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 30
    log_level: str = "INFO"
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    @property
    def has_supabase(self) -> bool:
        """True when both Supabase credentials are configured."""

        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def has_api_key(self) -> bool:
        return bool(self.openrouter_api_key)


def _read_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", key, raw, default)
        return default
    return value


def _read_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", key, raw, default)
        return default
    return value


def _read_origins(environ: Mapping[str, str]) -> List[str]:
    """Return allowed origins, optionally sourced from an env override."""

    raw = environ.get("COMPANION_ALLOWED_ORIGINS")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return list(DEFAULT_ALLOWED_ORIGINS)


def load_settings(environ: Mapping[str, str]) -> Settings:
    """Build settings from an explicit mapping of environment variables."""

    return Settings(
        openrouter_api_key=environ.get("OPENROUTER_API_KEY") or None,
        openrouter_base_url=environ.get("OPENROUTER_BASE_URL") or Settings.openrouter_base_url,
        openrouter_model=environ.get("OPENROUTER_MODEL") or Settings.openrouter_model,
        request_timeout_seconds=_read_float(
            environ, "OPENROUTER_TIMEOUT_SECONDS", Settings.request_timeout_seconds
        ),
        supabase_url=environ.get("SUPABASE_URL") or None,
        supabase_service_role_key=environ.get("SUPABASE_SERVICE_ROLE_KEY") or None,
        storage_bucket=environ.get("SUPABASE_STORAGE_BUCKET") or Settings.storage_bucket,
        poll_interval_seconds=_read_float(
            environ, "COMPANION_POLL_INTERVAL_SECONDS", Settings.poll_interval_seconds
        ),
        poll_max_attempts=_read_int(environ, "COMPANION_POLL_MAX_ATTEMPTS", Settings.poll_max_attempts),
        log_level=(environ.get("COMPANION_LOG_LEVEL") or Settings.log_level).upper(),
        allowed_origins=_read_origins(environ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    return load_settings(os.environ)
