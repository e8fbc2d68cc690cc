"""
Infrastructure package for the fleetify migration toolkit.

Centralizes database connectivity concerns (DSN building, connection factory).
Keep this layer focused on I/O and resource management, decoupled from the
migration/seed logic.
"""

from fleetify.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    database_connection,
    get_sync_connection,
)

__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "database_connection",
    "get_sync_connection",
]
