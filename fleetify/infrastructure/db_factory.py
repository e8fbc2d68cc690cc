"""
Database connection factory for the fleetify migration toolkit.

The runner and seeder work on a single dedicated psycopg connection opened in
autocommit mode: every `conn.transaction()` block maps to an explicit
BEGIN/COMMIT (or ROLLBACK on error), and statements outside such a block are
committed on their own.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection, sql
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fleetify.config import Settings, get_settings
from fleetify.errors import DatabaseConnectionError, log_error
from fleetify.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a libpq connection URL from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f"?sslmode={settings.db_sslmode}&connect_timeout={settings.db_connect_timeout}"
    )


def apply_statement_timeout(conn: Connection, timeout_ms: int) -> None:
    """
    Set a session-level statement timeout. A value <= 0 leaves the server default.
    """
    if timeout_ms <= 0:
        return
    conn.execute(
        sql.SQL("SET statement_timeout = {}").format(sql.Literal(f"{int(timeout_ms)}ms"))
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn_override: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated autocommit connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Parameters
    ----------
    dsn_override : str | None
        Connection string to use instead of the one built from settings.

    Returns
    -------
    Connection
        A new psycopg connection instance in autocommit mode.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn_override or build_dsn(), autocommit=True)


@contextmanager
def database_connection(
    dsn_override: Optional[str] = None,
    statement_timeout_ms: Optional[int] = None,
) -> Generator[Connection, None, None]:
    """
    Context manager for a migration/seed session.

    Opens a connection (with retry), applies the configured statement timeout
    and always closes the connection on exit. Connection failures are raised as
    `DatabaseConnectionError` so callers see a single configuration/connectivity
    error type.

    Example
    -------
        with database_connection() as conn:
            MigrationRunner(conn).run_migrations()
    """
    try:
        conn = get_sync_connection(dsn_override)
    except (psycopg.OperationalError, psycopg.InterfaceError) as exc:
        error = DatabaseConnectionError(f"failed to connect to database: {exc}")
        error.__cause__ = exc
        log_error("Database Connection Error", error, log)
        raise error from exc

    try:
        if statement_timeout_ms is None:
            statement_timeout_ms = get_settings().db_statement_timeout_ms
        apply_statement_timeout(conn, statement_timeout_ms)
        log.debug("Database connection established")
        yield conn
    finally:
        conn.close()
        log.debug("Database connection closed")


__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "database_connection",
    "get_sync_connection",
]
