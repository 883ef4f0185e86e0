"""Full-text search over the history index."""

import logging
import sqlite3
import unicodedata
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.text import Text

from claude_memo.errors import DatabaseError
from claude_memo.models import SearchResult, SessionRecord
from claude_memo.storage import count_sessions, table_exists

logger = logging.getLogger(__name__)
console = Console()

DEFAULT_LIMIT = 20
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M"

# Characters with meaning in the FTS5 query grammar; dropped, not escaped
RESERVED_CHARS = frozenset("\"'(){}[]-.|*?~")

# bm25 column weights for (display, project, session_id)
BM25_WEIGHTS = (100.0, 0.0, 0.0)

RESULT_COLUMNS = "s.display, s.timestamp, s.project, s.session_id"


def sanitize_query(query: str) -> str:
    """Strip characters FTS5 would reject.

    Returns an empty string when nothing searchable (a letter, digit or
    underscore) is left.
    """
    kept = []
    has_word_char = False
    for ch in query:
        if ch in RESERVED_CHARS or unicodedata.category(ch) == "Cc":
            continue
        kept.append(ch)
        if ch.isalnum() or ch == "_":
            has_word_char = True

    if not has_word_char:
        return ""
    return "".join(kept)


def build_match_query(sanitized: str) -> str:
    """Turn a sanitized query into an FTS5 prefix query ("sear" matches "search")."""
    return f"{sanitized}*"


def _row_to_record(row: sqlite3.Row) -> SessionRecord:
    return SessionRecord(
        display=row["display"],
        timestamp=row["timestamp"],
        project=row["project"],
        session_id=row["session_id"],
    )


class Searcher:
    """Queries the index built by :class:`claude_memo.indexer.Indexer`."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def _query(self, sql: str, params: list[Any]) -> list[sqlite3.Row]:
        # Don't let a read create an empty database file
        if not self.db_path.exists():
            return []

        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            if not table_exists(conn, "sessions"):
                return []
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Database error: {e}") from e
        finally:
            conn.close()

    def _ranked_search(
        self, query: str, project: str | None, limit: int | None
    ) -> list[SearchResult]:
        if not query.strip():
            return []

        sanitized = sanitize_query(query)
        if not sanitized:
            logger.debug("Query %r has no searchable characters", query)
            return []

        weights = ", ".join(str(w) for w in BM25_WEIGHTS)
        sql = f"""
            SELECT {RESULT_COLUMNS}, bm25(sessions_fts, {weights}) AS score
            FROM sessions_fts
            JOIN sessions s ON s.id = sessions_fts.rowid
            WHERE sessions_fts MATCH ?
        """
        params: list[Any] = [build_match_query(sanitized)]

        if project is not None:
            sql += " AND s.project LIKE ?"
            params.append(f"%{project}%")

        # Newest first; bm25 only breaks ties between identical timestamps
        sql += " ORDER BY s.timestamp DESC, score ASC LIMIT ?"
        params.append(limit if limit is not None else DEFAULT_LIMIT)

        rows = self._query(sql, params)
        return [SearchResult(record=_row_to_record(row), score=row["score"]) for row in rows]

    def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Prefix search over display, project and session id."""
        return self._ranked_search(query, None, limit)

    def search_with_project(
        self, query: str, project: str, limit: int | None = None
    ) -> list[SearchResult]:
        """Like :meth:`search`, restricted to projects containing ``project``."""
        return self._ranked_search(query, project, limit)

    def simple_search(self, keyword: str, limit: int | None = None) -> list[SessionRecord]:
        """Substring match on display or project, without the FTS index."""
        sql = f"""
            SELECT {RESULT_COLUMNS}
            FROM sessions s
            WHERE s.display LIKE ? OR s.project LIKE ?
            ORDER BY s.timestamp DESC
            LIMIT ?
        """
        pattern = f"%{keyword}%"
        rows = self._query(sql, [pattern, pattern, limit if limit is not None else DEFAULT_LIMIT])
        return [_row_to_record(row) for row in rows]

    def exists(self) -> bool:
        return self.db_path.exists()

    def count(self) -> int:
        try:
            return count_sessions(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Database error: {e}") from e


def format_timestamp(timestamp_ms: int, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime(date_format)


def format_record(record: SessionRecord, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """One-line summary: time, project, prompt and the session id to mark."""
    return (
        f"{format_timestamp(record.timestamp, date_format)} {record.project} > "
        f"{record.display}  [{record.session_id}]"
    )


def format_human_output(
    records: list[SessionRecord],
    query: str,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
    """Print records one per line with query terms highlighted."""
    if not records:
        console.print(Text(f"No results found for: {query}", style="yellow"))
        return

    terms = sanitize_query(query).split()
    for record in records:
        line = Text(format_record(record, date_format))
        line.highlight_words(terms, style="bold yellow", case_sensitive=False)
        console.print(line, soft_wrap=True)


def format_json_output(items: list[SearchResult] | list[SessionRecord]) -> None:
    """Print results as a JSON array for programmatic use."""
    console.print_json(data=[item.to_dict() for item in items])


def perform_search(
    query: str,
    history_path: Path,
    db_path: Path,
    project: str | None = None,
    limit: int | None = None,
    simple: bool = False,
    json_output: bool = False,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
    """Rebuild the index from the history file, search it and print the results."""
    from claude_memo.indexer import rebuild_from_history

    rebuild_from_history(history_path, db_path)

    searcher = Searcher(db_path)
    if simple:
        results: list[SearchResult] | list[SessionRecord] = searcher.simple_search(query, limit)
        records = results
    elif project is not None:
        results = searcher.search_with_project(query, project, limit)
        records = [r.record for r in results]
    else:
        results = searcher.search(query, limit)
        records = [r.record for r in results]

    if json_output:
        format_json_output(results)
    else:
        format_human_output(records, query, date_format)
