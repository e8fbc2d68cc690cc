"""
Migration file generator.

Writes table model templates and timestamp-prefixed SQL migrations derived from
those models:

- ``createtable``  -> `<models_dir>/<table>.py` plus a CREATE TABLE template,
- ``generatesql``  -> `<ts>_<table>_create.sql` built from the model's columns,
- ``altertable``   -> `<ts>_<table>_alter.sql` adding the model's columns.

Generation never overwrites a file: an existing model is a conflict, and a
migration name already taken gets the next free second.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional

from fleetify.errors import ModelExistsError, ModelNotFoundError
from fleetify.migration.descriptors import ColumnDescriptor, extract_columns, model_path
from fleetify.migration.naming import normalize_table_name, to_pascal_case
from fleetify.migration.templates import (
    ALTER_FROM_MODEL_TEMPLATE,
    CREATE_FROM_MODEL_TEMPLATE,
    CREATE_TABLE_TEMPLATE,
    MODEL_SEEDER_TEMPLATE,
    MODEL_TEMPLATE,
)
from fleetify.models.base import primary_key_column
from fleetify.utils.logging import get_logger

log = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GeneratedFiles:
    model_path: Path
    migration_path: Path


class MigrationGenerator:
    """
    Render model templates and migration files.

    Parameters
    ----------
    migrations_dir : Path | str
        Where migration files are written.
    models_dir : Path | str
        Where table model modules live.
    clock : callable | None
        Returns the current time; used for file name prefixes and headers.
    """

    def __init__(
        self,
        migrations_dir: Path | str = "migrations",
        models_dir: Path | str = "fleetify/models",
        clock: Optional[Clock] = None,
    ) -> None:
        self.migrations_dir = Path(migrations_dir)
        self.models_dir = Path(models_dir)
        self._clock = clock or _utc_now

    def _ensure_directories(self) -> None:
        self.migrations_dir.mkdir(parents=True, exist_ok=True)
        self.models_dir.mkdir(parents=True, exist_ok=True)

    def _require_model(self, table: str, hint: str) -> Path:
        path = model_path(table, self.models_dir)
        if not path.is_file():
            raise ModelNotFoundError(f"model file not found: {path}. {hint}")
        return path

    def _write_migration(self, table: str, kind: str, content: str) -> Path:
        """
        Write `<ts>_<table>_<kind>.sql`, moving to the next second while the name is taken.
        """
        moment = self._clock()
        while True:
            path = self.migrations_dir / f"{moment.strftime(TIMESTAMP_FORMAT)}_{table}_{kind}.sql"
            try:
                with path.open("x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                moment += timedelta(seconds=1)
                continue
            log.info(f"Wrote migration {path}", extra={"table": table, "kind": kind})
            return path

    # Rendering ----------------------------------------------------------------

    def render_model(self, table: str, with_seeder: bool = False) -> str:
        model = to_pascal_case(table)
        typing_imports = "Any, ClassVar, List, Optional" if with_seeder else "Any, ClassVar, Optional"
        extra_imports = "\nfrom fleetify.migration.registry import SeedRegistry" if with_seeder else ""
        content = MODEL_TEMPLATE.format(
            table=table,
            model=model,
            id_column=primary_key_column(table),
            typing_imports=typing_imports,
            extra_imports=extra_imports,
        )
        if with_seeder:
            content += MODEL_SEEDER_TEMPLATE.format(table=table, model=model)
        return content

    def render_create_template(self, table: str) -> str:
        return CREATE_TABLE_TEMPLATE.format(
            table=table,
            id_column=primary_key_column(table),
            generated_at=self._clock().isoformat(timespec="seconds"),
        )

    def render_create_from_columns(self, table: str, columns: List[ColumnDescriptor]) -> str:
        rendered = "".join(f"    {column.definition},\n" for column in columns)
        return CREATE_FROM_MODEL_TEMPLATE.format(
            table=table,
            id_column=primary_key_column(table),
            columns=rendered,
            model_path=model_path(table, self.models_dir).as_posix(),
            generated_at=self._clock().isoformat(timespec="seconds"),
        )

    def render_alter_from_columns(self, table: str, columns: List[ColumnDescriptor]) -> str:
        if columns:
            statements = "\n".join(
                f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {column.definition};" for column in columns
            )
            rollback = "\n".join(
                f"-- ALTER TABLE {table} DROP COLUMN IF EXISTS {column.name};" for column in reversed(columns)
            )
        else:
            statements = "-- No columns found in model"
            rollback = ""
        return ALTER_FROM_MODEL_TEMPLATE.format(
            table=table,
            statements=statements,
            rollback=rollback,
            model_path=model_path(table, self.models_dir).as_posix(),
            generated_at=self._clock().isoformat(timespec="seconds"),
        )

    # Operations -------------------------------------------------------------

    def generate_table(self, table_name: str, with_seeder: bool = False) -> GeneratedFiles:
        """
        Write a model template and a CREATE TABLE migration template.

        Raises
        ------
        ModelExistsError
            If the model file already exists; nothing is written.
        """
        table = normalize_table_name(table_name)
        self._ensure_directories()

        path = model_path(table, self.models_dir)
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(self.render_model(table, with_seeder))
        except FileExistsError as exc:
            raise ModelExistsError(f"model already exists: {path}") from exc
        log.info(f"Wrote model template {path}", extra={"table": table, "seeder": with_seeder})

        migration = self._write_migration(table, "create", self.render_create_template(table))
        return GeneratedFiles(model_path=path, migration_path=migration)

    def generate_sql_from_model(self, table_name: str) -> Path:
        """
        Write a CREATE TABLE migration from the model's columns.

        Raises
        ------
        ModelNotFoundError
            If the model does not exist yet.
        ModelParseError
            If the model cannot be parsed; nothing is written.
        """
        table = normalize_table_name(table_name)
        self._require_model(table, f"Create the model first with: createtable {table}")
        columns = extract_columns(table, self.models_dir)
        self._ensure_directories()
        return self._write_migration(table, "create", self.render_create_from_columns(table, columns))

    def generate_alter_table(self, table_name: str) -> Path:
        """
        Write an ALTER TABLE migration adding each of the model's columns.

        Raises
        ------
        ModelNotFoundError
            If the model does not exist yet.
        ModelParseError
            If the model cannot be parsed; nothing is written.
        """
        table = normalize_table_name(table_name)
        self._require_model(table, f"Create the model first with: createtable {table}")
        columns = extract_columns(table, self.models_dir)
        self._ensure_directories()
        return self._write_migration(table, "alter", self.render_alter_from_columns(table, columns))


__all__ = ["GeneratedFiles", "MigrationGenerator", "TIMESTAMP_FORMAT"]
