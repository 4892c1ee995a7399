"""Environment-driven settings for drupal-access.

``DrupalAccessSettings`` collects logging and database options from
``DRUPAL_ACCESS_*`` environment variables (or a ``.env`` file) and turns
them into the :class:`~drupal_access.adapters.types.DatabaseConfig` the
connection manager consumes.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first query
    - **Environment-driven:** Reads from env vars and .env files
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> import os
    >>> os.environ["DRUPAL_ACCESS_DB_DRIVER"] = "pgsql"
    >>> DrupalAccessSettings().to_database_config().driver
    'pgsql'

Tags:
    settings, configuration, pydantic, environment, drupal-access
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from drupal_access.adapters.types import DEFAULT_PORTS, DatabaseConfig, DatabaseType
from drupal_access.logging import configure_logging


class DrupalAccessSettings(BaseSettings):
    """Settings shared by every drupal-access entrypoint.

    Fields
    ──────
    log_level           : structlog log level
    json_logs           : JSON output (None = auto-detect from TTY)
    db_driver           : "mysql" (default) or "pgsql"
    db_host / db_port   : backend address; port defaults per driver
    db_user / db_password / db_name : credentials and schema
    db_pool_min_size    : idle connections kept warm
    db_pool_size        : maximum pooled connections
    db_connect_timeout  : seconds allowed to open a connection
    db_query_timeout    : default per-query deadline (None = unbounded)
    strict_role_decode  : raise on malformed role payloads instead of skipping
    """

    model_config = SettingsConfigDict(
        env_prefix="DRUPAL_ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Database ─────────────────────────────────────────────────
    db_driver: str = DatabaseType.MYSQL.value
    db_host: str = "localhost"
    db_port: int | None = None
    db_user: str = "drupal"
    db_password: SecretStr = SecretStr("")
    db_name: str = "drupal"
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_size: int = Field(default=10, ge=1)
    db_connect_timeout: float = Field(default=10.0, gt=0)
    db_query_timeout: float | None = Field(default=None, gt=0)

    # ── Permissions ──────────────────────────────────────────────
    strict_role_decode: bool = False

    def to_database_config(self) -> DatabaseConfig:
        driver = (self.db_driver or DatabaseType.MYSQL.value).strip().lower()
        port = self.db_port if self.db_port is not None else DEFAULT_PORTS.get(driver, 0)
        return DatabaseConfig(
            driver=driver,
            host=self.db_host,
            port=port,
            user=self.db_user,
            password=self.db_password.get_secret_value(),
            database=self.db_name,
            pool_min_size=self.db_pool_min_size,
            pool_size=self.db_pool_size,
            connect_timeout=self.db_connect_timeout,
            query_timeout=self.db_query_timeout,
        )

    def apply_logging(self) -> None:
        """Configure structlog from ``log_level`` and ``json_logs``."""
        configure_logging(level=self.log_level, json_format=self.json_logs)


@lru_cache(maxsize=1)
def get_settings() -> DrupalAccessSettings:
    """Cached settings, loaded once per process."""
    return DrupalAccessSettings()


__all__ = ["DrupalAccessSettings", "get_settings"]
