"""
Album API — Application Configuration
======================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the application factory and the process entry point.
When:  Loaded once at module import time.

Recognized variables:
    DB_HOST, DB_PORT, DB_USERNAME, DB_PASSWORD, DB_DATABASE  → connection target
    DB_SSLMODE, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_RECYCLE → driver/pool knobs
    HOST, PORT                                               → HTTP listener
    LOG_LEVEL                                                → logging verbosity
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for a local PostgreSQL instance.
    Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_username: str = Field(default="postgres")
    db_password: str = Field(default="")
    db_database: str = Field(default="postgres")

    # Forwarded to asyncpg as its `ssl` connect argument
    db_sslmode: str = Field(default="disable")

    # Pool sizing is left close to driver defaults; these only bound it
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=100)

    # Seconds before a pooled connection is closed and replaced
    db_pool_recycle: int = Field(default=1800, ge=1)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DB_HOST and db_host both work
        "extra": "ignore",
    }

    @property
    def database_url(self) -> URL:
        """
        What: Async PostgreSQL URL assembled from the DB_* variables.
        How:  URL.create quotes credentials, so passwords containing '@' or
              '/' need no manual escaping.
        """
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_username,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
            query={"ssl": self.db_sslmode},
        )


# Singleton instance, imported by the app factory and entry point
settings = Settings()
