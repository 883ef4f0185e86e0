"""Tests for the parser module."""

import json

import pytest

from claude_memo.errors import (
    DecodeError,
    InvalidSessionIdError,
    InvalidTimestampError,
    NotFoundError,
)
from claude_memo.parser import parse_file, parse_line, scan_lines


def test_parse_valid_line():
    """Test all four fields survive parsing unchanged."""
    line = (
        '{"display":"/model ","pastedContents":{},"timestamp":1766567616338,'
        '"project":"/Users/elliotxx","sessionId":"d55aaa1c-b149-4aa4-9809-7eab1dba8d4c"}'
    )
    record = parse_line(line)

    assert record is not None
    assert record.display == "/model "
    assert record.timestamp == 1766567616338
    assert record.project == "/Users/elliotxx"
    assert record.session_id == "d55aaa1c-b149-4aa4-9809-7eab1dba8d4c"


def test_parse_snake_case_session_id():
    """Test the legacy session_id key is accepted."""
    line = json.dumps(
        {"display": "hi", "timestamp": 1000, "project": "/p", "session_id": "legacy-id"}
    )
    record = parse_line(line)
    assert record is not None
    assert record.session_id == "legacy-id"


@pytest.mark.parametrize("line", ["", "   ", "\t\n"])
def test_parse_blank_line(line):
    """Test blank lines yield no record and no error."""
    assert parse_line(line) is None


def test_parse_malformed_json():
    with pytest.raises(DecodeError):
        parse_line("{invalid json}")


def test_parse_non_object():
    with pytest.raises(DecodeError):
        parse_line("[1, 2, 3]")


def test_parse_missing_field():
    line = json.dumps({"display": "x", "timestamp": 1000, "sessionId": "abc"})
    with pytest.raises(DecodeError):
        parse_line(line)


def test_parse_string_timestamp_rejected():
    line = json.dumps(
        {"display": "x", "timestamp": "1000", "project": "/p", "sessionId": "abc"}
    )
    with pytest.raises(DecodeError):
        parse_line(line)


def test_parse_empty_session_id_fails():
    line = json.dumps(
        {"display": "/model", "timestamp": 1766567616338, "project": "/p", "sessionId": ""}
    )
    with pytest.raises(InvalidSessionIdError, match="session_id cannot be empty"):
        parse_line(line)


@pytest.mark.parametrize("timestamp", [0, -1000])
def test_parse_non_positive_timestamp_fails(timestamp):
    line = json.dumps(
        {"display": "/model", "timestamp": timestamp, "project": "/p", "sessionId": "abc"}
    )
    with pytest.raises(InvalidTimestampError, match="Invalid timestamp"):
        parse_line(line)


def test_parse_preserves_special_characters():
    line = json.dumps(
        {
            "display": "/model --option=value",
            "timestamp": 1766567616338,
            "project": "/Users/elliotxx/workspace/my-project/src",
            "sessionId": "abc123-def456",
        }
    )
    record = parse_line(line)
    assert record is not None
    assert "--option=value" in record.display
    assert "workspace/my-project" in record.project


def test_scan_lines_reports_skipped():
    """Test invalid lines are collected as diagnostics, not raised."""
    lines = [
        json.dumps({"display": "a", "timestamp": 1000, "project": "/p", "sessionId": "id-1"}),
        "",
        "not json",
        json.dumps({"display": "b", "timestamp": 0, "project": "/p", "sessionId": "id-2"}),
        json.dumps({"display": "c", "timestamp": 3000, "project": "/p", "sessionId": "id-3"}),
    ]
    report = scan_lines(lines)

    assert [r.session_id for r in report.records] == ["id-1", "id-3"]
    assert [s.line_number for s in report.skipped] == [3, 4]


def test_parse_file_skips_invalid_lines(temp_dir):
    """Test one corrupt line doesn't block the rest of the file."""
    history = temp_dir / "history.jsonl"
    history.write_text(
        "\n".join(
            [
                json.dumps({"display": "first", "timestamp": 1000, "project": "/p", "sessionId": "id-1"}),
                "{broken",
                json.dumps({"display": "empty", "timestamp": 1500, "project": "/p", "sessionId": ""}),
                json.dumps({"display": "second", "timestamp": 2000, "project": "/p", "sessionId": "id-2"}),
            ]
        )
        + "\n"
    )

    records = parse_file(history)

    assert [r.display for r in records] == ["first", "second"]


def test_parse_file_keeps_file_order(sample_history_jsonl):
    records = parse_file(sample_history_jsonl)

    assert len(records) == 3
    timestamps = [r.timestamp for r in records]
    assert timestamps == sorted(timestamps)


def test_parse_file_not_found(temp_dir):
    with pytest.raises(NotFoundError):
        parse_file(temp_dir / "missing.jsonl")


@pytest.mark.parametrize("timestamp", [2**63, 10**20])
def test_parse_timestamp_beyond_64_bits_fails(timestamp):
    line = json.dumps({"display": "big", "timestamp": timestamp, "project": "/p", "sessionId": "id"})

    with pytest.raises(DecodeError):
        parse_line(line)


@pytest.mark.parametrize("key", ["display", "project", "sessionId"])
def test_parse_lone_surrogate_fails(key):
    raw = {"display": "ok", "timestamp": 1000, "project": "/p", "sessionId": "id"}
    raw[key] = "bad \ud800"
    # json.dumps escapes the surrogate, json.loads restores it unpaired
    line = json.dumps(raw)

    with pytest.raises(DecodeError):
        parse_line(line)


def test_scan_lines_skips_unstorable_values():
    """Test values SQLite cannot store are skipped like any other bad line."""
    lines = [
        json.dumps({"display": "a", "timestamp": 1000, "project": "/p", "sessionId": "id-1"}),
        json.dumps({"display": "huge", "timestamp": 10**20, "project": "/p", "sessionId": "id-2"}),
        json.dumps({"display": "bad \ud800", "timestamp": 2000, "project": "/p", "sessionId": "id-3"}),
        json.dumps({"display": "d", "timestamp": 4000, "project": "/p", "sessionId": "id-4"}),
    ]
    report = scan_lines(lines)

    assert [r.session_id for r in report.records] == ["id-1", "id-4"]
    assert [s.line_number for s in report.skipped] == [2, 3]
