"""Pytest fixtures for claude-memo tests."""

import json
import tempfile
from pathlib import Path

import pytest

from claude_memo.models import SessionRecord


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_history_jsonl(temp_dir):
    """Create a sample history.jsonl file."""
    history_file = temp_dir / "history.jsonl"

    records = [
        {
            "display": "/model ",
            "pastedContents": {},
            "timestamp": 1766567616338,
            "project": "/Users/yym",
            "sessionId": "test-session-001",
        },
        {
            "display": "/search test query",
            "pastedContents": {},
            "timestamp": 1766567617000,
            "project": "/Users/yym/project",
            "sessionId": "test-session-002",
        },
        {
            "display": "/another command",
            "pastedContents": {},
            "timestamp": 1766567618000,
            "project": "/Users/yym/other",
            "sessionId": "test-session-003",
        },
    ]

    with open(history_file, "w") as f:
        for record in records:
            f.write(json.dumps(record) + "\n")

    return history_file


@pytest.fixture
def sample_records():
    """Create sample SessionRecord objects for testing."""
    return [
        SessionRecord(
            display="/model",
            timestamp=1766567616338,
            project="/Users/elliotxx",
            session_id="abc123",
        ),
        SessionRecord(
            display="/search test query",
            timestamp=1766567617000,
            project="/Users/elliotxx/project",
            session_id="def456",
        ),
        SessionRecord(
            display="/another search command",
            timestamp=1766567618000,
            project="/Users/elliotxx/other",
            session_id="ghi789",
        ),
    ]


@pytest.fixture
def db_path(temp_dir):
    """Path for a not-yet-created index database."""
    return temp_dir / "index" / "sessions.db"
