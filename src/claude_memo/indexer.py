"""FTS5 index builder for history records."""

import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path

from claude_memo.errors import DatabaseError
from claude_memo.models import SessionRecord
from claude_memo.parser import parse_file
from claude_memo.storage import count_sessions, ensure_parent_dir, get_connection, init_schema

logger = logging.getLogger(__name__)


class Indexer:
    """Builds the search index at ``db_path``.

    Every build is a full rebuild: existing rows are dropped and the supplied
    records are inserted again, so the index reflects the history file as of
    the last build.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        ensure_parent_dir(self.db_path)

    def build(self, records: Sequence[SessionRecord]) -> int:
        """Replace the index contents with ``records``.

        Duplicate session ids are upserted, so the last one in ``records``
        wins. Returns the number of records supplied.
        """
        # The directory may have been removed since __init__
        ensure_parent_dir(self.db_path)

        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Database error: {e}") from e

        try:
            init_schema(conn)

            conn.execute("DELETE FROM sessions")
            conn.execute("INSERT INTO sessions_fts(sessions_fts) VALUES('delete-all')")

            conn.executemany(
                """
                INSERT INTO sessions (display, timestamp, project, session_id)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    display = excluded.display,
                    timestamp = excluded.timestamp,
                    project = excluded.project
                """,
                [(r.display, r.timestamp, r.project, r.session_id) for r in records],
            )

            conn.execute("INSERT INTO sessions_fts(sessions_fts) VALUES('optimize')")
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Database error: {e}") from e
        finally:
            conn.close()

        logger.info("Indexed %d records into %s", len(records), self.db_path)
        return len(records)

    def count(self) -> int:
        """Number of indexed records (0 if nothing has been built yet)."""
        try:
            return count_sessions(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Database error: {e}") from e

    def exists(self) -> bool:
        return self.db_path.exists()


def rebuild_from_history(history_path: Path, db_path: Path) -> int:
    """Parse the history file and rebuild the index from it."""
    records = parse_file(history_path)
    return Indexer(db_path).build(records)
