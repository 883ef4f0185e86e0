"""SQLite storage for the claude-memo search index."""

import sqlite3
from pathlib import Path


def ensure_parent_dir(db_path: Path) -> None:
    """Create the directory holding the index file."""
    db_path.parent.mkdir(parents=True, exist_ok=True)


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Get a connection to the index database, creating its directory."""
    ensure_parent_dir(db_path)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Initialize the database schema."""
    # journal_mode cannot change inside a transaction, so set it first
    conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript("""
        -- One row per session, last record wins
        CREATE TABLE IF NOT EXISTS sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            display TEXT NOT NULL,
            timestamp INTEGER NOT NULL,
            project TEXT NOT NULL,
            session_id TEXT NOT NULL UNIQUE
        );

        -- FTS5 for keyword search
        CREATE VIRTUAL TABLE IF NOT EXISTS sessions_fts USING fts5(
            display,
            project,
            session_id,
            content='sessions',
            content_rowid='id'
        );

        -- Triggers to keep FTS in sync
        CREATE TRIGGER IF NOT EXISTS sessions_ai AFTER INSERT ON sessions BEGIN
            INSERT INTO sessions_fts(rowid, display, project, session_id)
            VALUES (new.id, new.display, new.project, new.session_id);
        END;

        CREATE TRIGGER IF NOT EXISTS sessions_ad AFTER DELETE ON sessions BEGIN
            INSERT INTO sessions_fts(sessions_fts, rowid, display, project, session_id)
            VALUES ('delete', old.id, old.display, old.project, old.session_id);
        END;

        CREATE TRIGGER IF NOT EXISTS sessions_au AFTER UPDATE ON sessions BEGIN
            INSERT INTO sessions_fts(sessions_fts, rowid, display, project, session_id)
            VALUES ('delete', old.id, old.display, old.project, old.session_id);
            INSERT INTO sessions_fts(rowid, display, project, session_id)
            VALUES (new.id, new.display, new.project, new.session_id);
        END;
    """)
    conn.commit()


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?", (name,)
    ).fetchone()
    return row is not None


def count_sessions(db_path: Path) -> int:
    """Count indexed records; 0 if the file or table does not exist yet."""
    if not db_path.exists():
        return 0

    conn = sqlite3.connect(str(db_path))
    try:
        if not table_exists(conn, "sessions"):
            return 0
        return conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
    finally:
        conn.close()
