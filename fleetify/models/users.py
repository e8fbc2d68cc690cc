"""Table model for users."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, List, Optional

from fleetify.migration.registry import SeedRegistry
from fleetify.models.base import TableModel, db_field


class Users(TableModel):
    """
    Row of the users table.

    `password` holds the plaintext only until seeding; the seeder stores a
    bcrypt hash.
    """

    table_name: ClassVar[str] = "users"

    users_id: Optional[str] = db_field("users_id", default=None)
    username: str = db_field("username,unique,notnull")
    password: str = db_field("password,notnull")
    role: str = db_field("role,notnull")
    full_name: str = db_field("full_name,notnull")
    email: Optional[str] = db_field("email", default=None)
    phone: Optional[str] = db_field("phone", default=None)
    is_active: bool = db_field("is_active", default=True)

    # Timestamps
    created_timestamp: Optional[datetime] = db_field("created_timestamp", default=None)
    updated_timestamp: Optional[datetime] = db_field("updated_timestamp", default=None)


def seed_users() -> List[Users]:
    return [
        Users(
            username="admin",
            password="admin123",
            role="ADMIN",
            full_name="Administrator",
            email="admin@fleetify.com",
            phone="081234567890",
        ),
        Users(
            username="manager1",
            password="manager123",
            role="MANAGER",
            full_name="Manager One",
            email="manager1@fleetify.com",
            phone="081234567891",
        ),
        Users(
            username="manager2",
            password="manager123",
            role="MANAGER",
            full_name="Manager Two",
            email="manager2@fleetify.com",
            phone="081234567892",
        ),
        Users(
            username="purchaser1",
            password="purchaser123",
            role="MANAGER",
            full_name="Purchaser One",
            email="purchaser1@fleetify.com",
            phone="081234567893",
        ),
        Users(
            username="purchaser2",
            password="purchaser123",
            role="MANAGER",
            full_name="Purchaser Two",
            email="purchaser2@fleetify.com",
            phone="081234567894",
        ),
    ]


def register(registry: SeedRegistry) -> None:
    registry.register("Users", seed_users)
