"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and .env files.
- Validate settings and provide defaults for optional ones.
- Expose typed settings (storage profile, DB URL, failure injection, API port)
  for use across the settings store, rate generator, API server and tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from crypto_monetizer.config.env import (
    env_bool,
    env_float,
    env_int,
    env_str,
    load_monetizer_env,
)
from crypto_monetizer.core.exceptions import ConfigurationError

PROFILE_LOCAL = "local"
PROFILE_HOSTED = "hosted"
STORAGE_PROFILES = (PROFILE_LOCAL, PROFILE_HOSTED)

DEFAULT_DB_PATH = "monetizer.db"
DEFAULT_FAILURE_PROBABILITY = 0.1
DEFAULT_BASE_PRICE = 1.0


@dataclass(frozen=True)
class Settings:
    """Service configuration. Built once from env by get_settings()."""

    storage_profile: str = PROFILE_LOCAL
    db_path: str = DEFAULT_DB_PATH
    database_url: str = ""  # required by the hosted profile

    failure_injection: bool = True
    failure_probability: float = DEFAULT_FAILURE_PROBABILITY
    base_price: float = DEFAULT_BASE_PRICE

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    def resolved_database_url(self) -> str | None:
        """
        SQLAlchemy URL for the settings store, or None when the backend is unconfigured.

        local: DATABASE_URL if given, else sqlite file at db_path.
        hosted: DATABASE_URL only.
        """
        if self.database_url:
            return self.database_url
        if self.storage_profile == PROFILE_HOSTED:
            return None
        return f"sqlite:///{self.db_path}"


def _build_settings() -> Settings:
    load_monetizer_env()
    profile = env_str("MONETIZER_STORAGE_PROFILE", PROFILE_LOCAL).lower()
    if profile not in STORAGE_PROFILES:
        raise ConfigurationError(
            f"MONETIZER_STORAGE_PROFILE must be one of {', '.join(STORAGE_PROFILES)}, got {profile!r}"
        )
    probability = env_float("MONETIZER_FAILURE_PROBABILITY", DEFAULT_FAILURE_PROBABILITY)
    if not 0.0 <= probability <= 1.0:
        raise ConfigurationError("MONETIZER_FAILURE_PROBABILITY must be within [0, 1]")
    base_price = env_float("MONETIZER_BASE_PRICE", DEFAULT_BASE_PRICE)
    if base_price <= 0:
        raise ConfigurationError("MONETIZER_BASE_PRICE must be positive")
    return Settings(
        storage_profile=profile,
        db_path=env_str("MONETIZER_DB_PATH", DEFAULT_DB_PATH),
        database_url=env_str("DATABASE_URL"),
        failure_injection=env_bool("MONETIZER_FAILURE_INJECTION", True),
        failure_probability=probability,
        base_price=base_price,
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", 3000),
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the current application settings (cached)."""
    return _build_settings()


def reload_settings() -> Settings:
    """Drop the cached settings and re-read the environment."""
    get_settings.cache_clear()
    return get_settings()
