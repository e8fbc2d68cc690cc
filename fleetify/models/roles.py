"""Table model for roles."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, List, Optional

from fleetify.migration.registry import SeedRegistry
from fleetify.models.base import TableModel, db_field


class Roles(TableModel):
    """Row of the roles table."""

    table_name: ClassVar[str] = "roles"

    roles_id: Optional[str] = db_field("roles_id", default=None)
    role_oid: str = db_field("role_oid,notnull,unique")
    role_name: str = db_field("role_name,notnull")
    role_description: Optional[str] = db_field("role_description", default=None)

    # Timestamps
    created_timestamp: Optional[datetime] = db_field("created_timestamp", default=None)
    updated_timestamp: Optional[datetime] = db_field("updated_timestamp", default=None)


def seed_roles() -> List[Roles]:
    return [
        Roles(
            role_oid="ADMIN",
            role_name="Admin",
            role_description="Administrator role with full permissions.",
        ),
        Roles(
            role_oid="MANAGER",
            role_name="Manager",
            role_description="Manager role with extended permissions.",
        ),
        Roles(
            role_oid="SUPPLIERS",
            role_name="Suppliers",
            role_description="Supplier users.",
        ),
        Roles(
            role_oid="MITRA",
            role_name="Mitra",
            role_description="Mitra users.",
        ),
    ]


def register(registry: SeedRegistry) -> None:
    registry.register("Roles", seed_roles)
