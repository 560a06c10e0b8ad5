"""Utilities for executing SQL migrations stored under `db/migrations`."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from psycopg2.extensions import cursor as PsycopgCursor
from rich.console import Console
from rich.table import Table

from tubetrack.config.settings import get_settings
from tubetrack.db.connection import connection_from_dsn

MIGRATIONS_ROOT = Path(__file__).resolve().parent / "migrations"


def _load_migration_files(directory: Path) -> List[Path]:
    return sorted(directory.glob("*.sql"))


def _execute_sql_file(db_cursor: PsycopgCursor, migration_file: Path) -> None:
    statement = migration_file.read_text(encoding="utf-8")
    db_cursor.execute(statement)


def run_migrations(console: Console | None = None, *, dsn: Optional[str] = None) -> List[str]:
    """Execute all SQL migrations in order inside a single transaction.

    Every migration is written to be re-runnable, so applying the full set again is a no-op.
    Returns the names of the applied files.
    """

    console = console or Console()
    migrations = _load_migration_files(MIGRATIONS_ROOT)

    if not migrations:
        console.print("[yellow]No migrations found.[/yellow]")
        return []

    connection = connection_from_dsn(dsn or str(get_settings().database_url))

    table = Table(title="Tubetrack Migrations")
    table.add_column("Migration", style="cyan")
    table.add_column("Status", style="green")

    try:
        with connection.cursor() as db_cursor:
            for migration in migrations:
                _execute_sql_file(db_cursor, migration)
                table.add_row(migration.name, "applied")
        connection.commit()
    except Exception as exc:  # pragma: no cover - surface migration errors
        connection.rollback()
        console.print(f"[red]Migration failed:[/red] {exc}")
        raise
    finally:
        connection.close()

    console.print(table)
    return [migration.name for migration in migrations]


def main() -> None:
    """Entry point for running migrations via `python -m tubetrack.db.migrate`."""

    run_migrations()


if __name__ == "__main__":  # pragma: no cover
    main()
