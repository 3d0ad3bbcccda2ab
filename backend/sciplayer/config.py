"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be supplied as SCIPLAYER_<NAME> or through a .env file
    - get_settings() is cached (lru_cache): single instance per process
    - http_addr is validated at load time; a bad port fails fast
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sciplayer.infrastructure.database import sqlite_url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCIPLAYER_", env_file=".env", case_sensitive=False,
    )

    # Store
    db_path: str = "data/sciplayer.db"
    busy_timeout_seconds: float = 5.0
    operation_timeout_seconds: float | None = None

    # HTTP
    http_addr: str = ":8090"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("http_addr")
    @classmethod
    def check_http_addr(cls, v: str) -> str:
        host, sep, port = v.strip().rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError("http_addr must look like 'host:port' or ':port'")
        return f"{host}:{port}"

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def listen_host(self) -> str:
        host = self.http_addr.rpartition(":")[0]
        return host.strip("[]") or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        return int(self.http_addr.rpartition(":")[2])

    @property
    def database_url(self) -> str:
        return sqlite_url(self.db_path)


@lru_cache
def get_settings() -> Settings:
    return Settings()
