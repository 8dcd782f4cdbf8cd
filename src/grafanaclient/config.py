"""
Client settings using Pydantic.

Provides environment-based configuration loading with GRAFANA_ prefix.
Only the command-line wrapper reads these; library callers pass
credentials to ``Session`` directly.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection settings for a Grafana server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRAFANA_",
    )

    url: str = "http://localhost:3000"
    user: str = "admin"
    password: str = "admin"

    # HTTP client settings
    timeout: float = 5.0
    verify_tls: bool = True

    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
