"""
Text templates for generated model modules and migration files.

Rendered with `str.format`; literal braces in the templates are doubled.
"""

from __future__ import annotations

MODEL_TEMPLATE = '''\
"""Table model for {table}."""

from __future__ import annotations

from datetime import datetime
from typing import {typing_imports}
{extra_imports}
from fleetify.models.base import TableModel, db_field


class {model}(TableModel):
    """Row of the {table} table."""

    table_name: ClassVar[str] = "{table}"

    # PK UUID v4, generated when left empty
    {id_column}: Optional[str] = db_field("{id_column}", default=None)

    # Columns: db_field("<column>[,notnull][,unique]", default=...)
    #
    # Example: Text field (nullable)
    # field_name: Optional[str] = db_field("field_name", default=None)
    #
    # Example: Text field (NOT NULL)
    # field_name: str = db_field("field_name,notnull")
    #
    # Example: Text field (UNIQUE)
    # field_name: str = db_field("field_name,notnull,unique")
    #
    # Example: JSONB field
    # data: dict[str, Any] = db_field("data", default_factory=dict)
    #
    # Example: Numeric field
    # amount: float = db_field("amount", default=0)
    #
    # Example: Boolean field
    # is_active: bool = db_field("is_active", default=True)
    #
    # Example: Timestamp field
    # event_date: Optional[datetime] = db_field("event_date", default=None)

    # Timestamps
    created_timestamp: Optional[datetime] = db_field("created_timestamp", default=None)
    updated_timestamp: Optional[datetime] = db_field("updated_timestamp", default=None)
'''

MODEL_SEEDER_TEMPLATE = '''

def seed_{table}() -> List[{model}]:
    """Seed rows for the {table} table."""
    return [
        # {model}(
        #     field_name="value",
        # ),
    ]


def register(registry: SeedRegistry) -> None:
    registry.register("{model}", seed_{table})
'''

CREATE_TABLE_TEMPLATE = """\
-- Migration: Create table {table}
-- Generated at: {generated_at}

CREATE TABLE IF NOT EXISTS {table} (
    {id_column} UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    --
    -- Text columns:
    -- name TEXT NOT NULL,
    -- email TEXT UNIQUE,
    -- description TEXT,
    -- status TEXT DEFAULT 'active' NOT NULL,
    --
    -- Numeric columns:
    -- amount NUMERIC(10, 2) NOT NULL,
    -- quantity INTEGER NOT NULL DEFAULT 0,
    --
    -- JSONB columns:
    -- data JSONB DEFAULT '{{}}'::jsonb,
    --
    -- Boolean columns:
    -- is_active BOOLEAN NOT NULL DEFAULT false,
    --
    -- Timestamp columns:
    -- event_date TIMESTAMPTZ,
    --
    -- Foreign keys:
    -- user_id UUID REFERENCES users(users_id),
    -- category_id UUID REFERENCES categories(categories_id) ON DELETE CASCADE,

    created_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Create indexes (customize as needed)
-- CREATE INDEX IF NOT EXISTS idx_{table}_created_timestamp ON {table}(created_timestamp);
-- CREATE INDEX IF NOT EXISTS idx_{table}_status ON {table}(status);

-- Add table and column comments
COMMENT ON TABLE {table} IS 'Table for {table}';
COMMENT ON COLUMN {table}.{id_column} IS 'Primary key UUID';
COMMENT ON COLUMN {table}.created_timestamp IS 'Record creation timestamp';
COMMENT ON COLUMN {table}.updated_timestamp IS 'Record update timestamp';

-- Rollback
-- DROP TABLE IF EXISTS {table};
"""

CREATE_FROM_MODEL_TEMPLATE = """\
-- Migration: Create table {table}
-- Generated at: {generated_at}
-- Generated from model: {model_path}

CREATE TABLE IF NOT EXISTS {table} (
    {id_column} UUID PRIMARY KEY DEFAULT gen_random_uuid(),
{columns}    created_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Add table and column comments
COMMENT ON TABLE {table} IS 'Table for {table}';
COMMENT ON COLUMN {table}.{id_column} IS 'Primary key UUID';
COMMENT ON COLUMN {table}.created_timestamp IS 'Record creation timestamp';
COMMENT ON COLUMN {table}.updated_timestamp IS 'Record update timestamp';

-- Rollback
-- DROP TABLE IF EXISTS {table};
"""

ALTER_FROM_MODEL_TEMPLATE = """\
-- Migration: Alter table {table}
-- Generated at: {generated_at}
-- Generated from model: {model_path}

{statements}

-- Other changes (uncomment and adapt):
-- ALTER TABLE {table} RENAME COLUMN old_column_name TO new_column_name;
-- ALTER TABLE {table} DROP COLUMN IF EXISTS column_name;
-- ALTER TABLE {table} ALTER COLUMN column_name TYPE TEXT;
-- ALTER TABLE {table} ALTER COLUMN column_name SET DEFAULT 'default_value';
-- ALTER TABLE {table} ALTER COLUMN column_name SET NOT NULL;
-- ALTER TABLE {table} ADD CONSTRAINT unique_column_name UNIQUE (column_name);
-- ALTER TABLE {table} ADD CONSTRAINT fk_column_name FOREIGN KEY (column_name) REFERENCES other_table(other_id) ON DELETE CASCADE;
-- CREATE INDEX IF NOT EXISTS idx_{table}_column_name ON {table}(column_name);
--
-- Every change above needs its reverse in the block below.

-- Rollback
{rollback}
"""

__all__ = [
    "ALTER_FROM_MODEL_TEMPLATE",
    "CREATE_FROM_MODEL_TEMPLATE",
    "CREATE_TABLE_TEMPLATE",
    "MODEL_SEEDER_TEMPLATE",
    "MODEL_TEMPLATE",
]
