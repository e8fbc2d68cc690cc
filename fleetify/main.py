from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

import psycopg
import typer

from fleetify.config import get_settings
from fleetify.errors import FleetifyError, log_error
from fleetify.infrastructure.db_factory import database_connection
from fleetify.migration.generator import MigrationGenerator
from fleetify.migration.registry import registry
from fleetify.migration.runner import MigrationRunner
from fleetify.migration.seeder import Seeder
from fleetify.models import register_seeders
from fleetify.reporter import render_results, render_status
from fleetify.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

app = typer.Typer(help="Fleetify migration tool.", no_args_is_help=True)


@contextmanager
def _exit_on_error(action: str) -> Generator[None, None, None]:
    """Turn toolkit and database errors into a message on stderr and exit code 1."""
    try:
        yield
    except (FleetifyError, psycopg.Error) as exc:
        log_error(f"Failed to {action}", exc, log)
        typer.echo(f"ERROR: Failed to {action}: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _generator() -> MigrationGenerator:
    settings = get_settings()
    return MigrationGenerator(migrations_dir=settings.migrations_dir, models_dir=settings.models_dir)


@app.callback()
def setup(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (default from LOG_LEVEL).",
    ),
    json_logs: Optional[bool] = typer.Option(
        None,
        "--json-logs/--text-logs",
        help="Emit logs as JSON (default from LOG_JSON).",
    ),
) -> None:
    """
    Generate, apply, roll back and seed database migrations.
    """
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_logs=settings.log_json if json_logs is None else json_logs,
    )


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"(sslmode={settings.db_sslmode}) | env={settings.app_env} | "
        f"migrations={settings.migrations_dir} models={settings.models_dir}"
    )


@app.command()
def createtable(
    table: str = typer.Argument(..., help="Table name, e.g. suppliers."),
    seeder: Optional[bool] = typer.Option(
        None,
        "--seeder/--no-seeder",
        help="Include a seed generator in the model template (asks when omitted).",
    ),
) -> None:
    """
    Create a model template and a CREATE TABLE migration template.
    """
    if seeder is None:
        seeder = typer.confirm("Do you need dbseeds?", default=False)

    with _exit_on_error("create model"):
        files = _generator().generate_table(table, with_seeder=seeder)

    typer.echo(f"SUCCESS: Created model template: {files.model_path}")
    typer.echo(f"SUCCESS: Created migration template: {files.migration_path}")
    if seeder:
        typer.echo("NOTE: Seeder template included in model")
    typer.echo(f"NOTE: Edit the model, then run: fleetify-migrate generatesql {table}")


@app.command()
def generatesql(table: str = typer.Argument(..., help="Table whose model to read.")) -> None:
    """
    Generate a CREATE TABLE migration from a model.
    """
    with _exit_on_error("generate SQL migration"):
        path = _generator().generate_sql_from_model(table)
    typer.echo(f"SUCCESS: Generated SQL migration from model: {path}")


@app.command()
def altertable(table: str = typer.Argument(..., help="Table whose model to read.")) -> None:
    """
    Generate an ALTER TABLE migration from a model.
    """
    with _exit_on_error("generate alter table migration"):
        path = _generator().generate_alter_table(table)
    typer.echo(f"SUCCESS: Generated alter table migration for: {table}")
    typer.echo(f"NOTE: Migration file: {path}")


@app.command()
def migrate() -> None:
    """
    Apply all pending migrations in order.
    """
    settings = get_settings()
    with _exit_on_error("run migrations"):
        with database_connection() as conn:
            results = MigrationRunner(conn, settings.migrations_dir).run_migrations()

    if not results:
        typer.echo("SUCCESS: No pending migrations")
        return
    render_results(results, title="Applied Migrations")
    typer.echo(f"SUCCESS: Applied {len(results)} migration(s)")


@app.command()
def rollback(
    migration_name: str = typer.Argument(..., help="Migration file name, e.g. 20250101000000_users_create.sql."),
) -> None:
    """
    Roll back one migration using its rollback block.
    """
    settings = get_settings()
    name = Path(migration_name).name
    with _exit_on_error("rollback migration"):
        with database_connection() as conn:
            MigrationRunner(conn, settings.migrations_dir).rollback_migration(name)
    typer.echo(f"SUCCESS: Rolled back migration: {name}")


@app.command()
def seed(table: str = typer.Argument(..., help="Table to seed, e.g. users.")) -> None:
    """
    Seed a table from its model's registered seed generator.
    """
    with _exit_on_error("run seeder"):
        register_seeders(registry)
        with database_connection() as conn:
            result = Seeder(conn, registry).run(table)

    if result.processed == 0:
        typer.echo(f"NOTE: No seed data found for {result.model}")
        return
    typer.echo(
        f"SUCCESS: Seeded {result.processed} record(s) into {result.table} "
        f"({result.inserted} inserted, {result.skipped} already present)"
    )


@app.command()
def status() -> None:
    """
    Show applied, pending and missing migrations.
    """
    settings = get_settings()
    with _exit_on_error("read migration status"):
        with database_connection() as conn:
            statuses = MigrationRunner(conn, settings.migrations_dir).status()
    render_status(statuses)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
