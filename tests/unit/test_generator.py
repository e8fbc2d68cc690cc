from __future__ import annotations

import ast
import builtins
from datetime import datetime, timezone
from pathlib import Path

import pytest

from fleetify.errors import InvalidTableNameError, ModelExistsError, ModelNotFoundError, ModelParseError
from fleetify.migration.generator import MigrationGenerator
from fleetify.migration.naming import normalize_table_name, to_pascal_case
from fleetify.migration.sqltext import extract_rollback_sql, forward_sql, split_statements

FIXED_NOW = datetime(2025, 1, 6, 8, 30, 15, tzinfo=timezone.utc)

SUPPLIERS_MODEL = '''
from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional

from fleetify.models.base import TableModel, db_field


class Suppliers(TableModel):
    table_name: ClassVar[str] = "suppliers"

    suppliers_id: Optional[str] = db_field("suppliers_id", default=None)
    name: str = db_field("name,notnull,unique")
    rating: float = db_field("rating", default=0)
    contacts: dict[str, Any] = db_field("contacts", default_factory=dict)
    created_timestamp: Optional[datetime] = db_field("created_timestamp", default=None)
    updated_timestamp: Optional[datetime] = db_field("updated_timestamp", default=None)
'''


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    return tmp_path / "migrations", tmp_path / "models"


@pytest.fixture
def generator(dirs: tuple[Path, Path]) -> MigrationGenerator:
    migrations_dir, models_dir = dirs
    return MigrationGenerator(migrations_dir, models_dir, clock=lambda: FIXED_NOW)


@pytest.fixture
def suppliers_model(generator: MigrationGenerator) -> Path:
    generator.models_dir.mkdir(parents=True, exist_ok=True)
    path = generator.models_dir / "suppliers.py"
    path.write_text(SUPPLIERS_MODEL, encoding="utf-8")
    return path


def test_normalize_table_name() -> None:
    assert normalize_table_name(" Purchasing_Details ") == "purchasing_details"
    for bad in ("", "order-lines", "1users", "public.users", "drop table"):
        with pytest.raises(InvalidTableNameError):
            normalize_table_name(bad)


def test_to_pascal_case() -> None:
    assert to_pascal_case("purchasing_details") == "PurchasingDetails"
    assert to_pascal_case("users") == "Users"


def test_generate_table_writes_model_and_create_template(generator: MigrationGenerator) -> None:
    files = generator.generate_table("Suppliers")

    assert files.model_path == generator.models_dir / "suppliers.py"
    assert files.migration_path.name == "20250106083015_suppliers_create.sql"

    model_source = files.model_path.read_text(encoding="utf-8")
    ast.parse(model_source)
    assert "class Suppliers(TableModel):" in model_source
    assert 'suppliers_id: Optional[str] = db_field("suppliers_id", default=None)' in model_source
    assert "def register" not in model_source

    migration = files.migration_path.read_text(encoding="utf-8")
    assert "suppliers_id UUID PRIMARY KEY DEFAULT gen_random_uuid()" in migration
    assert "Generated at: 2025-01-06T08:30:15+00:00" in migration
    assert extract_rollback_sql(migration) == "DROP TABLE IF EXISTS suppliers;"


def test_generate_table_template_is_runnable(generator: MigrationGenerator) -> None:
    files = generator.generate_table("suppliers")

    statements = split_statements(forward_sql(files.migration_path.read_text(encoding="utf-8")))

    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS suppliers (")
    assert statements[0].rstrip(";").rstrip().endswith(")")
    assert all(s.startswith(("CREATE", "COMMENT")) for s in statements)


def test_generate_table_with_seeder(generator: MigrationGenerator) -> None:
    files = generator.generate_table("purchasing_details", with_seeder=True)

    source = files.model_path.read_text(encoding="utf-8")
    ast.parse(source)
    assert "class PurchasingDetails(TableModel):" in source
    assert "def seed_purchasing_details() -> List[PurchasingDetails]:" in source
    assert 'registry.register("PurchasingDetails", seed_purchasing_details)' in source
    assert "from fleetify.migration.registry import SeedRegistry" in source


def test_generated_model_has_no_columns_yet(generator: MigrationGenerator) -> None:
    generator.generate_table("suppliers")

    path = generator.generate_sql_from_model("suppliers")

    body = path.read_text(encoding="utf-8")
    assert "suppliers_id UUID PRIMARY KEY DEFAULT gen_random_uuid(),\n    created_timestamp" in body


def test_generate_table_refuses_existing_model(generator: MigrationGenerator, suppliers_model: Path) -> None:
    with pytest.raises(ModelExistsError, match="model already exists"):
        generator.generate_table("suppliers")

    assert suppliers_model.read_text(encoding="utf-8") == SUPPLIERS_MODEL
    assert not list(generator.migrations_dir.glob("*.sql"))


def test_generate_sql_from_model(generator: MigrationGenerator, suppliers_model: Path) -> None:
    path = generator.generate_sql_from_model("suppliers")

    assert path.name == "20250106083015_suppliers_create.sql"
    text = path.read_text(encoding="utf-8")
    assert (
        "CREATE TABLE IF NOT EXISTS suppliers (\n"
        "    suppliers_id UUID PRIMARY KEY DEFAULT gen_random_uuid(),\n"
        "    name TEXT NOT NULL UNIQUE,\n"
        "    rating NUMERIC(10, 2),\n"
        "    contacts JSONB,\n"
        "    created_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW(),\n"
        "    updated_timestamp TIMESTAMPTZ NOT NULL DEFAULT NOW()\n"
        ");"
    ) in text
    assert f"Generated from model: {suppliers_model.as_posix()}" in text
    assert extract_rollback_sql(text) == "DROP TABLE IF EXISTS suppliers;"


def test_generate_sql_without_model(generator: MigrationGenerator) -> None:
    with pytest.raises(ModelNotFoundError, match="createtable suppliers"):
        generator.generate_sql_from_model("suppliers")


def test_unparsable_model_writes_nothing(generator: MigrationGenerator, suppliers_model: Path) -> None:
    suppliers_model.write_text("class Suppliers(TableModel:\n", encoding="utf-8")

    with pytest.raises(ModelParseError):
        generator.generate_sql_from_model("suppliers")
    with pytest.raises(ModelParseError):
        generator.generate_alter_table("suppliers")

    assert not generator.migrations_dir.exists() or not list(generator.migrations_dir.iterdir())


def test_same_second_generation_moves_to_next_second(
    generator: MigrationGenerator, suppliers_model: Path
) -> None:
    first = generator.generate_sql_from_model("suppliers")
    second = generator.generate_sql_from_model("suppliers")
    third = generator.generate_alter_table("suppliers")

    assert first.name == "20250106083015_suppliers_create.sql"
    assert second.name == "20250106083016_suppliers_create.sql"
    # different kind, so the original second is still free
    assert third.name == "20250106083015_suppliers_alter.sql"
    assert sorted(p.name for p in generator.migrations_dir.iterdir()) == [
        "20250106083015_suppliers_alter.sql",
        "20250106083015_suppliers_create.sql",
        "20250106083016_suppliers_create.sql",
    ]


def test_generate_alter_table(generator: MigrationGenerator, suppliers_model: Path) -> None:
    path = generator.generate_alter_table("suppliers")
    text = path.read_text(encoding="utf-8")

    assert split_statements(forward_sql(text)) == [
        "ALTER TABLE suppliers ADD COLUMN IF NOT EXISTS name TEXT NOT NULL UNIQUE;",
        "ALTER TABLE suppliers ADD COLUMN IF NOT EXISTS rating NUMERIC(10, 2);",
        "ALTER TABLE suppliers ADD COLUMN IF NOT EXISTS contacts JSONB;",
    ]
    assert split_statements(extract_rollback_sql(text)) == [
        "ALTER TABLE suppliers DROP COLUMN IF EXISTS contacts;",
        "ALTER TABLE suppliers DROP COLUMN IF EXISTS rating;",
        "ALTER TABLE suppliers DROP COLUMN IF EXISTS name;",
    ]


def test_generate_alter_table_without_columns(generator: MigrationGenerator) -> None:
    generator.generate_table("suppliers")

    path = generator.generate_alter_table("suppliers")
    text = path.read_text(encoding="utf-8")

    assert "-- No columns found in model" in text
    assert split_statements(forward_sql(text)) == []
    assert extract_rollback_sql(text) == ""


def test_generate_alter_table_without_model(generator: MigrationGenerator) -> None:
    with pytest.raises(ModelNotFoundError, match="createtable suppliers"):
        generator.generate_alter_table("suppliers")


def test_default_clock_is_utc(dirs: tuple[Path, Path]) -> None:
    migrations_dir, models_dir = dirs
    before = datetime.now(timezone.utc).replace(microsecond=0)

    files = MigrationGenerator(migrations_dir, models_dir).generate_table("suppliers")

    stamp = datetime.strptime(files.migration_path.name[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    assert before <= stamp <= datetime.now(timezone.utc)


@pytest.mark.parametrize("with_seeder", [False, True])
def test_model_template_imports_names_used_by_its_examples(
    generator: MigrationGenerator, with_seeder: bool
) -> None:
    source = generator.render_model("suppliers", with_seeder=with_seeder)
    imported = {
        alias.asname or alias.name
        for node in ast.walk(ast.parse(source))
        if isinstance(node, ast.ImportFrom)
        for alias in node.names
    }
    examples = [
        line.strip()[2:]
        for line in source.splitlines()
        if line.strip().startswith("# ") and "= db_field(" in line
    ]

    assert examples
    for example in examples:
        used = {
            node.id
            for node in ast.walk(ast.parse(example))
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load)
        }
        assert used - set(dir(builtins)) <= imported, example
