"""
Migration package: model-driven SQL generation, the migration runner and the seeder.

This module re-exports the public classes so downstream code can import from
`fleetify.migration` directly.
"""

from fleetify.migration.descriptors import ColumnDescriptor, extract_columns
from fleetify.migration.generator import GeneratedFiles, MigrationGenerator
from fleetify.migration.registry import SeedRegistry, register_seeder, registry
from fleetify.migration.runner import MigrationResult, MigrationRunner, MigrationStatus
from fleetify.migration.seeder import Seeder, SeedResult

__all__ = [
    # Generation
    "ColumnDescriptor",
    "GeneratedFiles",
    "MigrationGenerator",
    "extract_columns",
    # Runner
    "MigrationResult",
    "MigrationRunner",
    "MigrationStatus",
    # Seeding
    "SeedRegistry",
    "SeedResult",
    "Seeder",
    "register_seeder",
    "registry",
]
