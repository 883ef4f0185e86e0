"""claude-memo: search and bookmark Claude Code session history."""

__version__ = "0.1.0"
