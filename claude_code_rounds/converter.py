#!/usr/bin/env python3
"""Load Claude Code session files and export extracted rounds."""

import json
import logging
import shutil
import time
import uuid as uuid_module
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from .context import apply_context_fields
from .factories import create_raw_entry
from .models import RawEntry, Round, RoundListOutput
from .rounds import filter_rounds_with_thinking, has_thinking_content, list_rounds
from .segmenter import extract_rounds
from .timings import log_timing

logger = logging.getLogger(__name__)


# =============================================================================
# Session Loading
# =============================================================================


def load_session_file(jsonl_path: Path, silent: bool = True) -> list[RawEntry]:
    """Load and parse a JSONL session file.

    Blank lines are ignored. Lines that aren't valid JSON objects are logged
    and skipped so one bad line doesn't lose the rest of the session.
    """
    entries: list[RawEntry] = []

    with open(jsonl_path, "r", encoding="utf-8", errors="replace") as f:
        if not silent:
            print(f"Processing {jsonl_path}...")
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry_dict: Any = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(
                    "Line %d of %s is not valid JSON, skipping: %s", line_no, jsonl_path, e
                )
                continue
            if not isinstance(entry_dict, dict):
                logger.warning(
                    "Line %d of %s is not a JSON object, skipping", line_no, jsonl_path
                )
                continue
            entries.append(create_raw_entry(entry_dict))

    return entries


def load_session_rounds(
    jsonl_path: Path, silent: bool = True
) -> tuple[list[RawEntry], list[Round]]:
    """Load a session file and extract its rounds."""
    t_start = time.perf_counter()
    with log_timing(lambda: f"Load {jsonl_path.name} ({len(entries)} entries)", t_start):
        entries = load_session_file(jsonl_path, silent=silent)
    with log_timing(lambda: f"Extract rounds ({len(rounds)} rounds)", t_start):
        rounds = extract_rounds(entries)
    return entries, rounds


def load_preamble_entries(
    file_path: Path, context: Optional[dict[str, Any]] = None
) -> list[RawEntry]:
    """Load entries to inject ahead of each round from a JSON array file.

    Each item is re-stamped with ``context`` (overriding its own values),
    given a uuid if it has none and typed "system" by default.

    Raises:
        ValueError: If the file isn't a JSON array of objects
    """
    try:
        parsed: Any = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in system file: {file_path}") from e

    if not isinstance(parsed, list):
        raise ValueError(f"System file must contain a JSON array: {file_path}")

    entries: list[RawEntry] = []
    for item in parsed:
        if not isinstance(item, dict):
            raise ValueError(f"Invalid entry in system file: {file_path}")

        data: dict[str, Any] = dict(item)
        if context:
            data = apply_context_fields(data, context)
        if not data.get("uuid"):
            data["uuid"] = str(uuid_module.uuid4())
        if not data.get("type"):
            data["type"] = "system"
        entries.append(create_raw_entry(data))

    return entries


# =============================================================================
# Round Export
# =============================================================================


def create_round_list_output(rounds: Sequence[Round], file_path: str) -> RoundListOutput:
    return RoundListOutput(
        filePath=file_path, totalRounds=len(rounds), rounds=list_rounds(rounds)
    )


def rounds_output_filename(
    basename: str, rounds: Sequence[Round], partial: bool = False
) -> str:
    """File name for exported rounds.

    A full export is "<basename>.json"; a partial one is suffixed with the
    round number or first-last range, e.g. "session.0.json", "session.0-3.json".
    """
    if not partial:
        return f"{basename}.json"
    first = rounds[0].roundNumber
    last = rounds[-1].roundNumber
    if len(rounds) == 1:
        return f"{basename}.{first}.json"
    return f"{basename}.{first}-{last}.json"


def write_rounds_json(rounds: Sequence[Round], output_path: Path) -> Path:
    """Write rounds as a JSON array, creating parent directories as needed."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.model_dump(mode="json") for r in rounds]
    output_path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return output_path


def write_round_jsonl(round_: Round, output_path: Path) -> Path:
    """Write a round's entries as their original JSONL lines."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        "\n".join(entry.rawContent for entry in round_.entries), encoding="utf-8"
    )
    return output_path


def load_rounds_json(json_path: Path) -> list[Round]:
    """Load rounds previously written by write_rounds_json()."""
    data = json.loads(json_path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Rounds file must contain a JSON array: {json_path}")
    return [Round.model_validate(item) for item in data]


def load_rounds(file_path: Path, silent: bool = True) -> tuple[list[RawEntry], list[Round]]:
    """Load rounds from a session log or from a previous JSON export.

    A ".json" file is read as exported rounds; its entries are rebuilt from
    each round entry's ``rawContent``. Anything else is parsed as a JSONL
    session and segmented.

    Raises:
        ValueError: If an exported rounds file is malformed
    """
    if file_path.suffix.lower() != ".json":
        return load_session_rounds(file_path, silent=silent)

    t_start = time.perf_counter()
    with log_timing(lambda: f"Load {file_path.name} ({len(rounds)} rounds)", t_start):
        rounds = load_rounds_json(file_path)
    entries = [entry.source for round_ in rounds for entry in round_.entries]
    return entries, rounds


# =============================================================================
# Thinking Export
# =============================================================================


def find_session_files(directory: Path, recursive: bool = False) -> list[Path]:
    """Sorted list of .jsonl files in ``directory``."""
    pattern = "**/*.jsonl" if recursive else "*.jsonl"
    return sorted(p for p in directory.glob(pattern) if p.is_file())


@dataclass
class ThinkingExportResult:
    """Outcome of a thinking scan over a directory."""

    files_scanned: int = 0
    files_with_thinking: list[Path] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    thinking_rounds: int = 0
    failed: list[tuple[Path, str]] = field(default_factory=list)


def export_thinking_sessions(
    input_dir: Path,
    output_dir: Path,
    recursive: bool = False,
    extract: bool = False,
    silent: bool = True,
) -> ThinkingExportResult:
    """Find sessions with thinking content and export them.

    Without ``extract``, matching files are copied to ``output_dir`` keeping
    their path relative to ``input_dir``. With ``extract``, each round that
    contains thinking is written to "<basename>.<roundNumber>.jsonl".
    Files that can't be read are recorded in ``failed`` and skipped.
    """
    result = ThinkingExportResult()
    files = find_session_files(input_dir, recursive)
    result.files_scanned = len(files)
    output_dir.mkdir(parents=True, exist_ok=True)

    for file_path in files:
        try:
            entries = load_session_file(file_path)
            if not has_thinking_content(entries):
                continue
            result.files_with_thinking.append(file_path)

            if extract:
                thinking_rounds = filter_rounds_with_thinking(extract_rounds(entries))
                result.thinking_rounds += len(thinking_rounds)
                for round_ in thinking_rounds:
                    output_path = output_dir / f"{file_path.stem}.{round_.roundNumber}.jsonl"
                    result.written.append(write_round_jsonl(round_, output_path))
                if not silent and thinking_rounds:
                    numbers = ",".join(str(r.roundNumber) for r in thinking_rounds)
                    print(f"  {file_path.name} -> {file_path.stem}.{numbers}.jsonl")
            else:
                relative_path = file_path.relative_to(input_dir)
                output_path = output_dir / relative_path
                output_path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(file_path, output_path)
                result.written.append(output_path)
                if not silent:
                    print(f"  {file_path.name} -> {relative_path}")
        except OSError as e:
            logger.warning("Failed to process %s: %s", file_path, e)
            result.failed.append((file_path, str(e)))

    return result
