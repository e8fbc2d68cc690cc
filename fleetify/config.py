"""
Configuration settings for the fleetify migration toolkit.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and the on-disk locations of migrations and table models.
Values are read from `.env` and then `.env.<APP_ENV>`, so an environment
specific file overrides the shared one.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("fleetify", alias="DB_NAME")
    db_sslmode: str = Field("disable", alias="DB_SSLMODE")
    db_connect_timeout: int = Field(5, alias="DB_CONNECT_TIMEOUT")
    db_statement_timeout_ms: int = Field(0, alias="DB_STATEMENT_TIMEOUT_MS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Migration layout
    migrations_dir: str = Field("migrations", alias="MIGRATIONS_DIR")
    models_dir: str = Field("fleetify/models", alias="MODELS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def _env_files(app_env: str) -> tuple[str, ...]:
    """Env files to load, lowest precedence first."""
    return (".env", f".env.{app_env}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    app_env = os.getenv("APP_ENV", "development")
    return Settings(_env_file=_env_files(app_env))


__all__ = ["Settings", "get_settings"]
