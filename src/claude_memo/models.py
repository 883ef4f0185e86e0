"""Data models for claude-memo."""

from dataclasses import dataclass

from claude_memo.errors import InvalidSessionIdError, InvalidTimestampError

# Shown in place of the prompt text when a favorite has no record in the history
MISSING_SESSION_DISPLAY = "(session not found in history)"


@dataclass(frozen=True)
class SessionRecord:
    """One line of ~/.claude/history.jsonl."""

    display: str
    timestamp: int  # milliseconds since epoch
    project: str
    session_id: str

    def validate(self) -> None:
        """Raise if the record breaks the session_id / timestamp invariants."""
        if not self.session_id:
            raise InvalidSessionIdError("session_id cannot be empty")
        if self.timestamp <= 0:
            raise InvalidTimestampError(self.timestamp)

    def to_dict(self) -> dict:
        return {
            "display": self.display,
            "timestamp": self.timestamp,
            "project": self.project,
            "session_id": self.session_id,
        }


@dataclass
class FavoriteSession:
    """A session the user has marked."""

    session_id: str
    favorited_at: int  # milliseconds since epoch


@dataclass
class FavoriteWithDetails:
    """A favorite joined with the latest history record of its session."""

    session_id: str
    favorited_at: int
    display: str
    project: str
    session_timestamp: int | None = None

    @property
    def found(self) -> bool:
        return self.session_timestamp is not None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "favorited_at": self.favorited_at,
            "display": self.display,
            "project": self.project,
            "timestamp": self.session_timestamp,
        }


@dataclass
class SearchResult:
    """A search hit with its bm25 score (lower is more relevant)."""

    record: SessionRecord
    score: float

    def to_dict(self) -> dict:
        return {**self.record.to_dict(), "score": self.score}
