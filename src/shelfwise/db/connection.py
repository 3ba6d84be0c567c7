# ABOUTME: SQLite database connection management for the Shelfwise library.
# ABOUTME: Opens or creates the database, applies schema, and returns an async connection.

import sqlite3
from pathlib import Path

import aiosqlite

from shelfwise.db.schema import MIGRATIONS, SCHEMA_V1

DEFAULT_DB_PATH = Path.home() / ".shelfwise" / "library.db"


async def _schema_exists(conn: aiosqlite.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return await cursor.fetchone() is not None


async def _get_schema_version(conn: aiosqlite.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = await conn.execute(
        "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
    )
    row = await cursor.fetchone()
    return row[0] if row else 0


async def _apply_migrations(conn: aiosqlite.Connection) -> None:
    """Apply pending schema migrations sequentially.

    No-op if the database is already at the latest version.
    """
    current = await _get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            await conn.executescript(sql)


async def open_library(path: Path | None = None) -> aiosqlite.Connection:
    """Open or create the Shelfwise library database.

    Creates the database file and parent directories if they don't exist.
    Applies the schema on first creation. Sets WAL journal mode so readers
    are never blocked by an in-flight ingest, enables foreign keys, and
    installs the sqlite3.Row factory for dict-like column access.

    The connection runs in manual transaction mode (isolation_level=None);
    LibraryCatalog issues BEGIN/COMMIT itself.

    Args:
        path: Path to the database file. Defaults to ~/.shelfwise/library.db.

    Returns:
        A configured aiosqlite.Connection. The caller closes it.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(str(db_path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")

    if not await _schema_exists(conn):
        await conn.executescript(SCHEMA_V1)

    await _apply_migrations(conn)

    return conn
