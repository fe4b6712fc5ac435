#!/usr/bin/env python3
"""Tests for session loading and round export."""

import json
import logging
from pathlib import Path

import pytest

from claude_code_rounds.converter import (
    create_round_list_output,
    export_thinking_sessions,
    find_session_files,
    load_preamble_entries,
    load_rounds,
    load_rounds_json,
    load_session_file,
    load_session_rounds,
    rounds_output_filename,
    write_round_jsonl,
    write_rounds_json,
)
from claude_code_rounds.segmenter import extract_rounds
from test.entry_builders import assistant_dict, user_dict


class TestLoadSessionFile:
    """Tests for load_session_file."""

    def test_loads_entries_in_order(self, write_jsonl, session_dicts):
        path = write_jsonl(session_dicts)
        entries = load_session_file(path)
        assert [e.data for e in entries] == session_dicts

    def test_skips_bad_lines(self, write_jsonl, caplog: pytest.LogCaptureFixture):
        path = write_jsonl(
            [
                user_dict("u-1", "Hello"),
                "{not json",
                "",
                '"just a string"',
                assistant_dict("a-1", "Hi", parent="u-1"),
            ]
        )
        with caplog.at_level(logging.WARNING):
            entries = load_session_file(path)
        assert [e.uuid for e in entries] == ["u-1", "a-1"]
        assert "Line 2" in caplog.text
        assert "Line 4" in caplog.text

    def test_progress_output(self, write_jsonl, capsys: pytest.CaptureFixture[str]):
        path = write_jsonl([user_dict("u-1", "Hello")])
        load_session_file(path, silent=False)
        assert f"Processing {path}" in capsys.readouterr().out

    def test_load_session_rounds(self, write_jsonl, session_dicts):
        entries, rounds = load_session_rounds(write_jsonl(session_dicts))
        assert len(entries) == len(session_dicts)
        assert [r.roundNumber for r in rounds] == [0, 1, 2]


class TestLoadPreambleEntries:
    """Tests for load_preamble_entries."""

    def test_context_merged_and_defaults_filled(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text(
            json.dumps(
                [
                    {"message": {"role": "system", "content": "Be terse"}, "cwd": "/stale"},
                    {"type": "user", "uuid": "keep-me", "message": {"role": "user", "content": "Hi"}},
                ]
            )
        )
        entries = load_preamble_entries(path, {"cwd": "/real", "sessionId": "s-9"})
        assert len(entries) == 2
        first, second = entries
        assert first.type == "system"
        assert first.uuid
        assert first.data["cwd"] == "/real"
        assert first.data["sessionId"] == "s-9"
        assert first.data["uuid"] == first.uuid
        assert second.type == "user"
        assert second.uuid == "keep-me"

    def test_without_context(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text(json.dumps([{"type": "system", "cwd": "/own"}]))
        entries = load_preamble_entries(path)
        assert entries[0].data["cwd"] == "/own"

    def test_empty_array(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text("[]")
        assert load_preamble_entries(path) == []

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text("{oops")
        with pytest.raises(ValueError, match="Invalid JSON in system file"):
            load_preamble_entries(path)

    def test_not_an_array(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text('{"type": "system"}')
        with pytest.raises(ValueError, match="must contain a JSON array"):
            load_preamble_entries(path)

    def test_non_object_item(self, tmp_path: Path):
        path = tmp_path / "system.json"
        path.write_text('[{"type": "system"}, 3]')
        with pytest.raises(ValueError, match="Invalid entry in system file"):
            load_preamble_entries(path)


class TestRoundExport:
    """Tests for writing and naming exported rounds."""

    def test_output_filenames(self, session_entries):
        rounds = extract_rounds(session_entries)
        assert rounds_output_filename("ci", rounds) == "ci.json"
        assert rounds_output_filename("ci", rounds[1:2], partial=True) == "ci.1.json"
        assert rounds_output_filename("ci", rounds[1:], partial=True) == "ci.1-2.json"

    def test_write_and_reload(self, tmp_path: Path, session_entries):
        rounds = extract_rounds(session_entries)
        output_path = write_rounds_json(rounds, tmp_path / "out" / "ci.json")
        data = json.loads(output_path.read_text())
        assert [r["roundNumber"] for r in data] == [0, 1, 2]
        assert set(data[1]["entries"][0]) == {
            "type",
            "uuid",
            "parentUuid",
            "timestamp",
            "rawContent",
            "displayContent",
        }
        reloaded = load_rounds_json(output_path)
        assert [r.model_dump() for r in reloaded] == [r.model_dump() for r in rounds]

    def test_load_rounds_json_rejects_objects(self, tmp_path: Path):
        path = tmp_path / "rounds.json"
        path.write_text("{}")
        with pytest.raises(ValueError):
            load_rounds_json(path)

    def test_load_rounds_dispatches_on_suffix(self, tmp_path: Path, write_jsonl, session_dicts):
        session_path = write_jsonl(session_dicts, "ci.jsonl")
        entries, rounds = load_rounds(session_path)
        assert [e.data for e in entries] == session_dicts
        assert len(rounds) == 3

        export_path = write_rounds_json(rounds, tmp_path / "out" / "ci.json")
        entries, reloaded = load_rounds(export_path)
        assert [e.data for e in entries] == session_dicts
        assert [r.summary for r in reloaded] == [r.summary for r in rounds]

    def test_load_rounds_rejects_bad_export(self, tmp_path: Path):
        path = tmp_path / "ci.json"
        path.write_text('[{"roundNumber": "first"}]')
        with pytest.raises(ValueError):
            load_rounds(path)

    def test_write_round_jsonl(self, tmp_path: Path, session_dicts, session_entries):
        rounds = extract_rounds(session_entries)
        path = write_round_jsonl(rounds[2], tmp_path / "ci.2.jsonl")
        lines = path.read_text().split("\n")
        assert [json.loads(line) for line in lines] == session_dicts[6:]

    def test_round_list_output(self, session_entries):
        output = create_round_list_output(extract_rounds(session_entries), "ci.jsonl")
        assert output.filePath == "ci.jsonl"
        assert output.totalRounds == 3
        assert output.rounds[2].summary == "Add bugfix for CI"


class TestExportThinkingSessions:
    """Tests for export_thinking_sessions."""

    @pytest.fixture
    def sessions_dir(self, tmp_path: Path, write_jsonl, session_dicts) -> Path:
        write_jsonl(session_dicts, "in/with-thinking.jsonl")
        write_jsonl([user_dict("u-1", "Hi")], "in/plain.jsonl")
        write_jsonl(session_dicts, "in/nested/deep.jsonl")
        return tmp_path / "in"

    def test_find_session_files(self, sessions_dir: Path):
        assert [p.name for p in find_session_files(sessions_dir)] == [
            "plain.jsonl",
            "with-thinking.jsonl",
        ]
        assert len(find_session_files(sessions_dir, recursive=True)) == 3

    def test_copy_mode(self, tmp_path: Path, sessions_dir: Path):
        out = tmp_path / "out"
        result = export_thinking_sessions(sessions_dir, out, recursive=True)
        assert result.files_scanned == 3
        assert len(result.files_with_thinking) == 2
        assert (out / "with-thinking.jsonl").exists()
        assert (out / "nested" / "deep.jsonl").exists()
        assert not (out / "plain.jsonl").exists()

    def test_extract_mode(self, tmp_path: Path, sessions_dir: Path):
        out = tmp_path / "out"
        result = export_thinking_sessions(sessions_dir, out, extract=True)
        assert result.thinking_rounds == 1
        assert [p.name for p in result.written] == ["with-thinking.2.jsonl"]
        first_line = (out / "with-thinking.2.jsonl").read_text().split("\n")[0]
        assert json.loads(first_line)["uuid"] == "u-2"
