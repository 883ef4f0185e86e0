"""Parser for Claude Code history.jsonl files."""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from claude_memo.errors import DecodeError, IoError, MemoError, NotFoundError
from claude_memo.models import SessionRecord

# Older history files use snake_case for the session id
SESSION_ID_KEYS = ("sessionId", "session_id")

# SQLite INTEGER range
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass
class SkippedLine:
    """A history line that could not be turned into a record."""

    line_number: int
    reason: str


@dataclass
class ParseReport:
    """Outcome of scanning a history stream."""

    records: list[SessionRecord] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)


def _require(raw: dict, key: str, kind: type) -> object:
    value = raw.get(key)
    # bool is a subclass of int; a JSON true is not a timestamp
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(f"missing or invalid field '{key}'")
    if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
        raise DecodeError(f"field '{key}' out of 64-bit range")
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise DecodeError(f"field '{key}' is not valid UTF-8") from e
    return value


def _session_id(raw: dict) -> str:
    for key in SESSION_ID_KEYS:
        if key in raw:
            return _require(raw, key, str)
    raise DecodeError("missing field 'sessionId'")


def parse_line(line: str) -> SessionRecord | None:
    """Parse one JSONL line.

    Returns None for blank lines. Raises DecodeError for malformed JSON or
    missing fields, and InvalidSessionIdError / InvalidTimestampError when the
    decoded record fails validation.
    """
    line = line.strip()
    if not line:
        return None

    try:
        raw = json.loads(line)
    except json.JSONDecodeError as e:
        raise DecodeError(f"JSON parse error: {e}") from e

    if not isinstance(raw, dict):
        raise DecodeError("record is not a JSON object")

    # pastedContents and any other extra keys are ignored
    record = SessionRecord(
        display=_require(raw, "display", str),
        timestamp=_require(raw, "timestamp", int),
        project=_require(raw, "project", str),
        session_id=_session_id(raw),
    )
    record.validate()
    return record


def scan_lines(lines: Iterable[str]) -> ParseReport:
    """Split a stream of lines into valid records and skipped-line diagnostics."""
    report = ParseReport()
    for line_num, line in enumerate(lines, 1):
        try:
            record = parse_line(line)
        except MemoError as e:
            report.skipped.append(SkippedLine(line_num, str(e)))
            continue
        if record is not None:
            report.records.append(record)
    return report


def parse_file(path: Path) -> list[SessionRecord]:
    """Parse a history file, skipping lines that are not valid records.

    Records are returned in file order (oldest first).
    """
    try:
        f = open(path, encoding="utf-8")
    except OSError as e:
        raise NotFoundError(str(path)) from e

    with f:
        try:
            report = scan_lines(f)
        except (OSError, UnicodeDecodeError) as e:
            raise IoError(f"IO error reading {path}: {e}") from e

    return report.records
