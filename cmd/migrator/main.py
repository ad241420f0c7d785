"""
Database Migrator Entry Point.

Applies the SQL files in migrations/ in name order and records each one in
the _migrations table.
"""
import asyncio
import sys
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

from config.settings import get_settings
from pkg.logger.logger import get_logger, setup_logging


# Load environment variables
load_dotenv()

logger = get_logger("migrator")

MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations"


async def get_applied_migrations(conn: asyncpg.Connection) -> set[str]:
    """
    Get names of already applied migrations.

    Args:
        conn: Database connection.

    Returns:
        Set of applied migration names.
    """
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS _migrations (
            id SERIAL PRIMARY KEY,
            name VARCHAR(255) NOT NULL UNIQUE,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    rows = await conn.fetch("SELECT name FROM _migrations")
    return {row["name"] for row in rows}


def pending_migrations(migration_files: list[Path], applied: set[str]) -> list[Path]:
    """
    Select migrations that still need to run, in name order.

    Args:
        migration_files: All migration files found.
        applied: Names already recorded as applied.

    Returns:
        Files to apply.
    """
    return sorted(
        (path for path in migration_files if path.name not in applied),
        key=lambda path: path.name,
    )


async def apply_migration(conn: asyncpg.Connection, migration_path: Path) -> None:
    """
    Apply a single migration inside a transaction.

    Args:
        conn: Database connection.
        migration_path: Path to migration SQL file.
    """
    migration_name = migration_path.name
    logger.info("Applying migration", migration=migration_name)

    sql = migration_path.read_text()

    async with conn.transaction():
        await conn.execute(sql)
        await conn.execute(
            "INSERT INTO _migrations (name) VALUES ($1)",
            migration_name,
        )

    logger.info("Migration applied", migration=migration_name)


async def run_migrations(database_url: str) -> int:
    """
    Run all pending migrations.

    Args:
        database_url: PostgreSQL connection string.

    Returns:
        Number of migrations applied.
    """
    if not MIGRATIONS_DIR.exists():
        logger.error("Migrations directory not found", path=str(MIGRATIONS_DIR))
        return 0

    conn = await asyncpg.connect(database_url)

    try:
        applied = await get_applied_migrations(conn)
        pending = pending_migrations(list(MIGRATIONS_DIR.glob("*.sql")), applied)

        if not pending:
            logger.info("All migrations already applied", applied=len(applied))
            return 0

        logger.info("Pending migrations", count=len(pending))
        for migration_path in pending:
            await apply_migration(conn, migration_path)

        return len(pending)
    finally:
        await conn.close()


async def rollback_migration(database_url: str, migration_name: str) -> bool:
    """
    Forget a migration so it runs again.

    Only the tracking row is removed; schema changes must be reverted by hand.

    Args:
        database_url: PostgreSQL connection string.
        migration_name: Name of migration to roll back.

    Returns:
        True if the migration was tracked.
    """
    conn = await asyncpg.connect(database_url)

    try:
        result = await conn.execute(
            "DELETE FROM _migrations WHERE name = $1",
            migration_name,
        )
    finally:
        await conn.close()

    found = result == "DELETE 1"
    if found:
        logger.info("Migration rolled back", migration=migration_name)
    else:
        logger.warning("Migration not found", migration=migration_name)
    return found


def main() -> None:
    """Main entry point."""
    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json", service="migrator")

    if len(sys.argv) > 1:
        command = sys.argv[1]

        if command == "rollback" and len(sys.argv) > 2:
            asyncio.run(rollback_migration(settings.database_url, sys.argv[2]))
        else:
            print(f"Unknown command: {command}")
            print("Usage:")
            print("  python cmd/migrator/main.py                    # Run all migrations")
            print("  python cmd/migrator/main.py rollback <name>    # Forget a migration")
            sys.exit(1)
    else:
        asyncio.run(run_migrations(settings.database_url))


if __name__ == "__main__":
    main()
