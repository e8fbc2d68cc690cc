"""
Migration runner: applies pending SQL migrations and rolls them back.

Applied migrations are recorded in the ``schema_migrations`` ledger. Pending
files (on disk, not in the ledger) are applied in filename order, which is
creation order thanks to the timestamp prefix. Each file runs in its own
transaction together with its ledger insert, so a file is either fully applied
and recorded or not at all.

The run is fail-fast: the first failing file aborts the run and no later file
is attempted, since later migrations may depend on the failed one.

Usage:
    from fleetify.infrastructure import database_connection
    from fleetify.migration.runner import MigrationRunner

    with database_connection() as conn:
        MigrationRunner(conn, "migrations").run_migrations()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import psycopg
from psycopg import Connection

from fleetify.errors import (
    EmptyMigrationError,
    MigrationExecutionError,
    MigrationNotFoundError,
    MigrationsDirNotFoundError,
    RollbackNotFoundError,
    log_error,
)
from fleetify.migration.sqltext import (
    extract_rollback_sql,
    forward_sql,
    parse_migration_name,
    split_statements,
)
from fleetify.utils.logging import get_logger

log = get_logger(__name__)

LEDGER_TABLE = "schema_migrations"

CREATE_LEDGER_SQL = f"""
CREATE TABLE IF NOT EXISTS {LEDGER_TABLE} (
    id SERIAL PRIMARY KEY,
    name VARCHAR(255) NOT NULL UNIQUE,
    executed_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

SELECT_LEDGER_SQL = f"SELECT name, executed_at FROM {LEDGER_TABLE} ORDER BY name"
INSERT_LEDGER_SQL = f"INSERT INTO {LEDGER_TABLE} (name) VALUES (%s)"
DELETE_LEDGER_SQL = f"DELETE FROM {LEDGER_TABLE} WHERE name = %s"


@dataclass
class MigrationResult:
    """Outcome of applying or rolling back one migration file."""

    name: str
    statements: int
    duration_seconds: float
    statuses: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MigrationStatus:
    name: str
    state: str  # "applied", "pending" or "missing" (in ledger, file gone)
    executed_at: Optional[datetime] = None


def _preview(statement: str, width: int = 120) -> str:
    first = " ".join(statement.split())
    return first if len(first) <= width else first[: width - 3] + "..."


class MigrationRunner:
    """
    Apply and roll back migration files against one database connection.

    Parameters
    ----------
    conn : psycopg.Connection
        Open connection, ideally in autocommit mode so that each
        `conn.transaction()` block is a real BEGIN/COMMIT.
    migrations_dir : Path | str
        Directory holding the ``*.sql`` migration files.
    """

    def __init__(self, conn: Connection, migrations_dir: Path | str = "migrations") -> None:
        self._conn = conn
        self.migrations_dir = Path(migrations_dir)

    # Ledger -----------------------------------------------------------------

    def ensure_ledger(self) -> None:
        """Create the ledger table if it does not exist yet."""
        with self._conn.transaction():
            self._conn.execute(CREATE_LEDGER_SQL)

    def applied_migrations(self) -> Dict[str, datetime]:
        """Ledger contents: migration name -> execution time."""
        with self._conn.cursor() as cur:
            cur.execute(SELECT_LEDGER_SQL)
            return {name: executed_at for name, executed_at in cur.fetchall()}

    # Files --------------------------------------------------------------------

    def migration_files(self) -> List[str]:
        """Names of all ``.sql`` files in the migrations directory, sorted."""
        if not self.migrations_dir.is_dir():
            raise MigrationsDirNotFoundError(f"migrations directory not found: {self.migrations_dir}")
        names = sorted(p.name for p in self.migrations_dir.iterdir() if p.is_file() and p.suffix == ".sql")
        for name in names:
            if parse_migration_name(name) is None:
                log.warning(
                    f"Migration {name} does not follow <timestamp>_<table>_<create|alter>.sql; "
                    "it is ordered by name only",
                    extra={"migration": name},
                )
        return names

    def pending_migrations(self) -> List[str]:
        """Files on disk that are not in the ledger, in application order."""
        applied = self.applied_migrations()
        return [name for name in self.migration_files() if name not in applied]

    def _read(self, name: str) -> str:
        path = self.migrations_dir / name
        if not path.is_file():
            raise MigrationNotFoundError(f"migration file not found: {name}")
        return path.read_text(encoding="utf-8")

    # Operations -------------------------------------------------------------

    def run_migrations(self) -> List[MigrationResult]:
        """
        Apply every pending migration in order.

        Returns
        -------
        List[MigrationResult]
            One entry per applied file; empty when nothing was pending.

        Raises
        ------
        MigrationExecutionError
            If a statement or the ledger insert fails. That file's transaction is
            rolled back and no later file is attempted.
        EmptyMigrationError
            If a pending file has no forward statements; it is not recorded.
        """
        self.ensure_ledger()
        pending = self.pending_migrations()

        if not pending:
            log.info("No pending migrations")
            return []

        log.info(f"Found {len(pending)} pending migration(s)", extra={"pending": pending})
        results: List[MigrationResult] = []
        for name in pending:
            results.append(self._apply(name))
        return results

    def _execute_statements(self, name: str, statements: List[str], context: str) -> List[str]:
        statuses: List[str] = []
        for index, statement in enumerate(statements, start=1):
            log.info(f"  [{index}] {_preview(statement)}", extra={"migration": name})
            try:
                with self._conn.cursor() as cur:
                    cur.execute(statement)
                    status = cur.statusmessage or ""
            except psycopg.Error as exc:
                error = MigrationExecutionError(
                    f"failed to execute statement {index} of {name}: {exc}",
                    migration=name,
                    statement_index=index,
                )
                error.__cause__ = exc
                log_error(context, error, log)
                raise error from exc
            if status:
                log.info(f"      -> PostgreSQL: {status}", extra={"migration": name})
            statuses.append(status)
        return statuses

    def _apply(self, name: str) -> MigrationResult:
        statements = split_statements(forward_sql(self._read(name)))
        if not statements:
            error = EmptyMigrationError(f"no SQL statements found in migration file: {name}")
            log_error("Migration Parse Error", error, log)
            raise error
        log.info(f"Applying migration {name}", extra={"migration": name, "statements": len(statements)})
        start = time.perf_counter()

        with self._conn.transaction():
            statuses = self._execute_statements(name, statements, "Migration Execution Error")
            try:
                self._conn.execute(INSERT_LEDGER_SQL, (name,))
            except psycopg.Error as exc:
                error = MigrationExecutionError(f"failed to record migration {name}: {exc}", migration=name)
                error.__cause__ = exc
                log_error("Migration Record Insert Error", error, log)
                raise error from exc

        duration = time.perf_counter() - start
        log.info(
            f"Executed migration: {name} ({duration:.2f}s)",
            extra={"migration": name, "duration_seconds": round(duration, 3)},
        )
        return MigrationResult(name=name, statements=len(statements), duration_seconds=duration, statuses=statuses)

    def rollback_migration(self, name: str) -> MigrationResult:
        """
        Reverse one migration using its embedded rollback block.

        The rollback statements and the ledger delete share one transaction.

        Raises
        ------
        MigrationNotFoundError
            If the file does not exist.
        RollbackNotFoundError
            If the file has no rollback block (or an empty one).
        MigrationExecutionError
            If a rollback statement or the ledger delete fails.
        """
        content = self._read(name)
        statements = split_statements(extract_rollback_sql(content))
        if not statements:
            raise RollbackNotFoundError(f"no rollback SQL found in migration file: {name}")

        self.ensure_ledger()
        log.info(f"Rolling back migration {name}", extra={"migration": name, "statements": len(statements)})
        start = time.perf_counter()

        with self._conn.transaction():
            statuses = self._execute_statements(name, statements, "Migration Rollback Error")
            try:
                with self._conn.cursor() as cur:
                    cur.execute(DELETE_LEDGER_SQL, (name,))
                    removed = cur.rowcount
            except psycopg.Error as exc:
                error = MigrationExecutionError(f"failed to delete migration record {name}: {exc}", migration=name)
                error.__cause__ = exc
                log_error("Migration Record Delete Error", error, log)
                raise error from exc

        if not removed:
            log.warning(f"Migration {name} was not recorded in the ledger", extra={"migration": name})
        duration = time.perf_counter() - start
        log.info(f"Rolled back migration: {name}", extra={"migration": name})
        return MigrationResult(name=name, statements=len(statements), duration_seconds=duration, statuses=statuses)

    def status(self) -> List[MigrationStatus]:
        """Every migration known on disk or in the ledger, sorted by name."""
        self.ensure_ledger()
        applied = self.applied_migrations()
        on_disk = set(self.migration_files())

        report: List[MigrationStatus] = []
        for name in sorted(on_disk | set(applied)):
            if name not in on_disk:
                report.append(MigrationStatus(name, "missing", applied[name]))
            elif name in applied:
                report.append(MigrationStatus(name, "applied", applied[name]))
            else:
                report.append(MigrationStatus(name, "pending"))
        return report


__all__ = [
    "LEDGER_TABLE",
    "MigrationResult",
    "MigrationRunner",
    "MigrationStatus",
]
