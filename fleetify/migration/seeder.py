"""
Seeder: populate a table from its registered seed generator.

Each record is flattened to a row through the model's ``db`` annotations,
completed with an identifier and audit timestamps when missing, has its
password-like columns hashed, and is inserted with ``ON CONFLICT DO NOTHING``.
Re-running a seed therefore skips rows that already exist instead of failing.

Inserts are independent of each other: a failing record aborts the rest of the
batch, but rows inserted before it stay committed.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import bcrypt
import psycopg
from psycopg import Connection, sql
from psycopg.types.json import Jsonb

from fleetify.errors import SeedError, SeedInsertError, SeedNotFoundError, log_error
from fleetify.migration.naming import normalize_table_name, to_pascal_case
from fleetify.migration.registry import SeedRegistry, registry as default_registry
from fleetify.models.base import AUDIT_COLUMNS, TableModel, primary_key_column
from fleetify.utils.logging import get_logger

log = get_logger(__name__)

PasswordHasher = Callable[[str], str]


def hash_password(plain: str, rounds: int = 12) -> str:
    """Salted bcrypt hash of `plain`."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def is_password_column(column: str) -> bool:
    return "password" in column.lower()


@dataclass
class SeedResult:
    table: str
    model: str
    processed: int = 0
    inserted: int = 0
    skipped: int = 0


def record_to_row(record: Any) -> Dict[str, Any]:
    """Flatten a table model instance to ``{column: value}``."""
    if not isinstance(record, TableModel):
        raise SeedError(f"seed record must be a table model, got {type(record).__name__}")
    return record.to_row()


def prepare_row(
    row: Dict[str, Any],
    id_column: str,
    hasher: PasswordHasher = hash_password,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Complete a flattened row for insertion.

    - a missing or empty identifier gets a fresh UUID4 string,
    - missing audit timestamps default to now (UTC),
    - non-empty string values of password-like columns are hashed,
    - dict/list values are wrapped for JSONB.
    """
    prepared = dict(row)
    if prepared.get(id_column) in (None, ""):
        prepared[id_column] = str(uuid.uuid4())

    now = now or datetime.now(timezone.utc)
    for column in AUDIT_COLUMNS:
        if prepared.get(column) is None:
            prepared[column] = now

    for column, value in prepared.items():
        if is_password_column(column) and isinstance(value, str) and value:
            prepared[column] = hasher(value)
        elif isinstance(value, (dict, list)):
            prepared[column] = Jsonb(value)
    return prepared


def build_insert(table: str, columns: List[str]) -> sql.Composed:
    """``INSERT INTO <table> (<columns>) VALUES (%s, ...) ON CONFLICT DO NOTHING``."""
    return sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) ON CONFLICT DO NOTHING").format(
        table=sql.Identifier(table),
        columns=sql.SQL(", ").join(sql.Identifier(column) for column in columns),
        values=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
    )


class Seeder:
    """
    Seed tables from the registry's generators.

    Parameters
    ----------
    conn : psycopg.Connection
        Open connection; each insert runs in its own transaction block.
    registry : SeedRegistry | None
        Registry to resolve generators from; defaults to the process-wide one.
    hasher : callable | None
        Password hashing function; defaults to bcrypt.
    """

    def __init__(
        self,
        conn: Connection,
        registry: Optional[SeedRegistry] = None,
        hasher: Optional[PasswordHasher] = None,
    ) -> None:
        self._conn = conn
        self._registry = registry or default_registry
        self._hasher = hasher or hash_password

    def _seed_records(self, table: str, model_name: str) -> Sequence[Any]:
        generator = self._registry.resolve(model_name)
        if generator is None:
            raise SeedNotFoundError(
                f"seed function for {model_name} not found; "
                f"add a register(registry) hook to the {table} model"
            )

        records = generator()
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
            raise SeedError(
                f"seed function for {model_name} must return a sequence, "
                f"got {type(records).__name__}"
            )
        return records

    def run(self, table_name: str) -> SeedResult:
        """
        Seed `table_name` from its registered generator.

        Returns
        -------
        SeedResult
            Records processed, inserted and skipped as duplicates.

        Raises
        ------
        SeedNotFoundError
            If no generator is registered for the table's model.
        SeedError
            If the generator returns something other than a sequence of models.
        SeedInsertError
            If an insert fails; remaining records are not attempted.
        """
        table = normalize_table_name(table_name)
        model_name = to_pascal_case(table)
        result = SeedResult(table=table, model=model_name)

        records = self._seed_records(table, model_name)
        if not records:
            log.info(f"No seed data found for {model_name}", extra={"table": table})
            return result

        id_column = primary_key_column(table)
        log.info(f"Seeding {table}: {len(records)} record(s)", extra={"table": table})

        for index, record in enumerate(records, start=1):
            row = prepare_row(record_to_row(record), id_column, self._hasher)
            columns = list(row)
            query = build_insert(table, columns)

            try:
                with self._conn.transaction():
                    with self._conn.cursor() as cur:
                        cur.execute(query, [row[column] for column in columns])
                        inserted = cur.rowcount == 1
                        status = cur.statusmessage
            except psycopg.Error as exc:
                error = SeedInsertError(
                    f"failed to insert seed record {index} into {table}: {exc}",
                    table=table,
                    record_index=index,
                )
                error.__cause__ = exc
                log_error("Seeder Insert Error", error, log)
                raise error from exc

            result.processed += 1
            if inserted:
                result.inserted += 1
            else:
                result.skipped += 1
            log.info(
                f"  [{index}] {'inserted' if inserted else 'skipped (already present)'}"
                f" -> PostgreSQL: {status}",
                extra={"table": table, "record": index},
            )

        log.info(
            f"Seeded {result.processed} record(s) into {table} "
            f"({result.inserted} inserted, {result.skipped} skipped)",
            extra={"table": table, "inserted": result.inserted, "skipped": result.skipped},
        )
        return result


__all__ = [
    "Seeder",
    "SeedResult",
    "build_insert",
    "hash_password",
    "is_password_column",
    "prepare_row",
    "record_to_row",
]
