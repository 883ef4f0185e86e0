"""Paths and user configuration for claude-memo.

Configuration lives in ``~/.claude-memo/config.toml``::

    output_format = "text"   # or "json"
    default_limit = 20
    date_format = "%Y-%m-%d %H:%M"
"""

import json
import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from claude_memo.errors import DecodeError, HomeDirNotFoundError, IoError

# Environment overrides
DATA_DIR_ENV = "CLAUDE_MEMO_DIR"
HISTORY_ENV = "CLAUDE_HISTORY"


def toml_string(value: str) -> str:
    """Quote ``value`` as a TOML basic string."""
    # TOML forbids raw DEL and escaped surrogates
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise HomeDirNotFoundError() from e


def get_data_dir() -> Path:
    """Private data directory (``~/.claude-memo``)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return _home() / ".claude-memo"


def get_history_path() -> Path:
    """Claude Code history log (``~/.claude/history.jsonl``)."""
    override = os.environ.get(HISTORY_ENV)
    if override:
        return Path(override)
    return _home() / ".claude" / "history.jsonl"


def get_index_path() -> Path:
    return get_data_dir() / "index" / "sessions.db"


def get_favorites_path() -> Path:
    return get_data_dir() / "favorites" / "sessions.toml"


def get_config_path() -> Path:
    return get_data_dir() / "config.toml"


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


@dataclass
class Config:
    """User preferences."""

    output_format: OutputFormat = OutputFormat.TEXT
    default_limit: int = 20
    date_format: str = "%Y-%m-%d %H:%M"

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        defaults = cls()

        raw_format = data.get("output_format", defaults.output_format.value)
        try:
            output_format = OutputFormat(str(raw_format).lower())
        except ValueError as e:
            raise DecodeError(f"Invalid output_format: {raw_format}") from e

        default_limit = data.get("default_limit", defaults.default_limit)
        if not isinstance(default_limit, int) or isinstance(default_limit, bool) or default_limit < 1:
            raise DecodeError(f"Invalid default_limit: {default_limit}")

        date_format = data.get("date_format", defaults.date_format)
        if not isinstance(date_format, str):
            raise DecodeError(f"Invalid date_format: {date_format}")

        return cls(output_format=output_format, default_limit=default_limit, date_format=date_format)

    def to_toml(self) -> str:
        return (
            f"output_format = {toml_string(self.output_format.value)}\n"
            f"default_limit = {self.default_limit}\n"
            f"date_format = {toml_string(self.date_format)}\n"
        )


def load_config(path: Path | None = None) -> Config:
    """Load the user config, falling back to defaults when the file is absent."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise DecodeError(f"TOML parse error in {config_path}: {e}") from e
    except OSError as e:
        raise IoError(f"IO error reading {config_path}: {e}") from e

    return Config.from_dict(data)


def save_config(config: Config, path: Path | None = None) -> None:
    config_path = path or get_config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(config.to_toml(), encoding="utf-8")
    except OSError as e:
        raise IoError(f"IO error writing {config_path}: {e}") from e


def reset_config(path: Path | None = None) -> None:
    """Overwrite the config file with defaults."""
    save_config(Config(), path)
