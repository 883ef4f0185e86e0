"""Error types for claude-memo."""


class MemoError(Exception):
    """Base class for all claude-memo errors."""


class IoError(MemoError):
    """Filesystem read or write failure."""


class DecodeError(MemoError):
    """Malformed structured data (JSON log line or TOML file)."""


class DatabaseError(MemoError):
    """SQLite failure while building or querying the index."""


class NotFoundError(MemoError):
    """A named input file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class InvalidSessionIdError(MemoError):
    """Empty or otherwise unusable session identifier."""


class SessionNotFoundError(MemoError):
    """Session is not in the favorites list."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found in favorites: {session_id}")
        self.session_id = session_id


class InvalidTimestampError(MemoError):
    """Non-positive record timestamp."""

    def __init__(self, timestamp: int) -> None:
        super().__init__(f"Invalid timestamp: {timestamp}")
        self.timestamp = timestamp


class HomeDirNotFoundError(MemoError):
    """The home directory could not be resolved."""

    def __init__(self) -> None:
        super().__init__("Home directory not found")
