"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from claude_code_rounds.factories import create_raw_entry
from claude_code_rounds.models import RawEntry
from test.entry_builders import (
    assistant_dict,
    interrupt_dict,
    summary_dict,
    tool_result_dict,
    user_dict,
)


@pytest.fixture
def session_dicts() -> list[dict[str, Any]]:
    """A small session: preface, a round with a tool call and an interrupt, a second round."""
    return [
        summary_dict("Fixing CI", leaf="a-3"),
        user_dict("u-1", "Fix the bug", timestamp="2025-01-15T12:00:00.000Z"),
        assistant_dict(
            "a-1",
            [{"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {"command": "ls"}}],
            parent="u-1",
            timestamp="2025-01-15T12:00:05.000Z",
        ),
        tool_result_dict("t-1", "file.py", parent="a-1", timestamp="2025-01-15T12:00:10.000Z"),
        assistant_dict("a-2", "Found it", parent="t-1", timestamp="2025-01-15T12:00:15.000Z"),
        interrupt_dict("i-1", parent="a-2", timestamp="2025-01-15T12:00:20.000Z"),
        user_dict(
            "u-2", "Add bugfix for CI", parent="i-1", timestamp="2025-01-15T13:00:00.000Z"
        ),
        assistant_dict(
            "a-3",
            [
                {"type": "thinking", "thinking": "Let me look at the workflow"},
                {"type": "text", "text": "Done"},
            ],
            parent="u-2",
            timestamp="2025-01-15T13:00:05.000Z",
        ),
    ]


@pytest.fixture
def session_entries(session_dicts: list[dict[str, Any]]) -> list[RawEntry]:
    return [create_raw_entry(d) for d in session_dicts]


@pytest.fixture
def write_jsonl(tmp_path: Path) -> Callable[..., Path]:
    """Write entry dicts (or raw strings) as a JSONL file under tmp_path."""

    def _write(lines: list[Any], name: str = "session.jsonl") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write((line if isinstance(line, str) else json.dumps(line)) + "\n")
        return path

    return _write
