"""
Pytest configuration for the fleetify migration toolkit.

Provides fixtures for:
- Settings isolation (no cached settings leak between tests)
- Database connection management for integration tests
- A throwaway schema per integration test
"""

from __future__ import annotations

import os
import uuid
from typing import Callable, Generator

import psycopg
import pytest

from fleetify.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings before and after every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        _env_file=None,
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "fleetify"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def pg_connect(
    test_dsn: str, db_connection_available: bool
) -> Generator[Callable[[], psycopg.Connection], None, None]:
    """
    Factory of autocommit connections bound to a fresh, throwaway schema.

    Every connection made through the factory sees only that schema (via
    search_path), so the ledger table and test tables never collide with other
    tests. The schema is dropped afterwards.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    schema = f"fleetify_test_{uuid.uuid4().hex[:12]}"
    opened: list[psycopg.Connection] = []

    with psycopg.connect(test_dsn, autocommit=True) as admin:
        admin.execute(f'CREATE SCHEMA "{schema}"')

    def connect() -> psycopg.Connection:
        conn = psycopg.connect(test_dsn, autocommit=True, options=f"-c search_path={schema}")
        opened.append(conn)
        return conn

    try:
        yield connect
    finally:
        for conn in opened:
            conn.close()
        with psycopg.connect(test_dsn, autocommit=True) as admin:
            admin.execute(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE')
