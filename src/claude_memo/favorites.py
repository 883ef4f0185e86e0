"""Favorite ("marked") sessions, persisted as TOML.

File format (``~/.claude-memo/favorites/sessions.toml``)::

    [sessions]
    "d55aaa1c-b149-4aa4-9809-7eab1dba8d4c" = 1766567616338
"""

from __future__ import annotations

import logging
import tomllib
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.text import Text

from claude_memo.config import toml_string
from claude_memo.errors import (
    DecodeError,
    InvalidSessionIdError,
    IoError,
    NotFoundError,
    SessionNotFoundError,
)
from claude_memo.models import (
    MISSING_SESSION_DISPLAY,
    FavoriteSession,
    FavoriteWithDetails,
    SessionRecord,
)
from claude_memo.parser import parse_file
from claude_memo.searcher import DEFAULT_DATE_FORMAT, format_timestamp

logger = logging.getLogger(__name__)
console = Console()

SECTION = "sessions"


def now_ms() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp() * 1000)


def load_favorites(path: Path) -> dict[str, int]:
    """Read the session_id -> favorited_at mapping from ``path``."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise DecodeError(f"TOML parse error in {path}: {e}") from e
    except OSError as e:
        raise IoError(f"IO error reading {path}: {e}") from e

    sessions = data.get(SECTION)
    if not isinstance(sessions, dict):
        return {}

    return {
        session_id: value
        for session_id, value in sessions.items()
        if isinstance(value, int) and not isinstance(value, bool)
    }


def save_favorites(path: Path, favorites: dict[str, int]) -> None:
    """Rewrite ``path`` with the whole mapping, newest first."""
    lines = [f"[{SECTION}]"]
    for session_id, favorited_at in sorted(favorites.items(), key=lambda kv: kv[1], reverse=True):
        lines.append(f"{toml_string(session_id)} = {favorited_at}")

    try:
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        raise IoError(f"IO error writing {path}: {e}") from e


def latest_records_by_session(records: list[SessionRecord]) -> dict[str, SessionRecord]:
    """Keep the record with the greatest timestamp for each session.

    On equal timestamps the first record seen is kept.
    """
    latest: dict[str, SessionRecord] = {}
    for record in records:
        current = latest.get(record.session_id)
        if current is None or record.timestamp > current.timestamp:
            latest[record.session_id] = record
    return latest


class FavoritesStore:
    """In-memory favorites backed by a TOML file.

    Every mutation rewrites the file. There is no locking: two processes
    writing at once means the last writer wins.
    """

    def __init__(self, favorites_file: Path, favorites: dict[str, int] | None = None) -> None:
        self.favorites_file = Path(favorites_file)
        self._favorites: dict[str, int] = dict(favorites or {})

    @classmethod
    def open(cls, favorites_file: Path) -> FavoritesStore:
        """Load favorites from ``favorites_file``, creating its directory if needed."""
        favorites_file = Path(favorites_file)
        try:
            favorites_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"IO error creating {favorites_file.parent}: {e}") from e

        favorites = load_favorites(favorites_file) if favorites_file.exists() else {}
        logger.debug("Loaded %d favorites from %s", len(favorites), favorites_file)
        return cls(favorites_file, favorites)

    def _persist(self) -> None:
        save_favorites(self.favorites_file, self._favorites)

    def add(self, session_id: str) -> None:
        """Mark a session. Marking it again refreshes ``favorited_at``."""
        if not session_id:
            raise InvalidSessionIdError("session_id cannot be empty")
        try:
            session_id.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidSessionIdError(f"session_id is not valid UTF-8: {session_id!r}") from e

        self._favorites[session_id] = now_ms()
        self._persist()
        logger.info("Added %s to favorites", session_id)

    def remove(self, session_id: str) -> None:
        if session_id not in self._favorites:
            raise SessionNotFoundError(session_id)

        del self._favorites[session_id]
        self._persist()
        logger.info("Removed %s from favorites", session_id)

    def is_favorited(self, session_id: str) -> bool:
        return session_id in self._favorites

    def __len__(self) -> int:
        return len(self._favorites)

    def list(self) -> list[FavoriteSession]:
        """All favorites, most recently marked first."""
        favorites = [
            FavoriteSession(session_id=session_id, favorited_at=favorited_at)
            for session_id, favorited_at in self._favorites.items()
        ]
        favorites.sort(key=lambda f: f.favorited_at, reverse=True)
        return favorites

    def list_with_details(self, history_path: Path) -> list[FavoriteWithDetails]:
        """Favorites joined with the latest history record of each session.

        A missing history file counts as an empty history. Favorites without
        a record keep their place with placeholder text.
        """
        try:
            records = parse_file(history_path)
        except NotFoundError:
            records = []

        latest = latest_records_by_session(records)

        details: list[FavoriteWithDetails] = []
        for favorite in self.list():
            record = latest.get(favorite.session_id)
            if record is None:
                details.append(
                    FavoriteWithDetails(
                        session_id=favorite.session_id,
                        favorited_at=favorite.favorited_at,
                        display=MISSING_SESSION_DISPLAY,
                        project="",
                    )
                )
            else:
                details.append(
                    FavoriteWithDetails(
                        session_id=favorite.session_id,
                        favorited_at=favorite.favorited_at,
                        display=record.display,
                        project=record.project,
                        session_timestamp=record.timestamp,
                    )
                )
        return details


def format_favorite(favorite: FavoriteWithDetails, date_format: str = DEFAULT_DATE_FORMAT) -> Text:
    line = Text()
    line.append("⭐ ")
    line.append(favorite.session_id, style="bold cyan")
    line.append(f" ({format_timestamp(favorite.favorited_at, date_format)})", style="dim")
    if favorite.found:
        line.append(f" {favorite.project} > ", style="green")
        line.append(favorite.display)
    else:
        line.append(f" {favorite.display}", style="yellow")
    return line


def print_favorites(favorites: list[FavoriteWithDetails], date_format: str = DEFAULT_DATE_FORMAT) -> None:
    if not favorites:
        console.print("No marks yet.")
        return
    for favorite in favorites:
        console.print(format_favorite(favorite, date_format), soft_wrap=True)
