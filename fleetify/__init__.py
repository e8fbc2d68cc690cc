"""
Fleetify - migration and seed tooling for the fleet procurement database.

This package derives SQL migrations from table models and manages their
application against PostgreSQL:

- Column descriptor extraction from model source
- Timestamp-ordered CREATE/ALTER TABLE migration generation
- A transactional, fail-fast migration runner with a ledger table
- Rollback through an embedded rollback block
- Idempotent seeding from registered seed generators
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from fleetify.config import Settings, get_settings
from fleetify.migration import (
    ColumnDescriptor,
    MigrationGenerator,
    MigrationRunner,
    Seeder,
    SeedRegistry,
    extract_columns,
    register_seeder,
)
from fleetify.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Migrations
    "ColumnDescriptor",
    "MigrationGenerator",
    "MigrationRunner",
    "extract_columns",
    # Seeding
    "SeedRegistry",
    "Seeder",
    "register_seeder",
    # Logging
    "configure_logging",
    "get_logger",
]
