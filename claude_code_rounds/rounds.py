"""Read-only operations over a list of extracted rounds.

Nothing here mutates its input: filters return new lists and
prepend_entries() returns new Round values, so one extraction result can be
shared between consumers.
"""

import uuid as uuid_module
from datetime import datetime, time
from typing import Any, Iterable, Optional, Sequence

import dateparser

from .models import RawEntry, Round, RoundSummary, TextContent, ThinkingContent
from .parser import PREVIEW_LENGTH, parse_utc_timestamp
from .segmenter import create_round_entry, current_timestamp, serialize_entry


class RoundNotFoundError(LookupError):
    """Raised when a requested round number is not in the collection."""

    def __init__(self, round_number: int, total_rounds: int):
        super().__init__(
            f"Round {round_number} not found. Total rounds: {total_rounds}"
        )
        self.round_number = round_number
        self.total_rounds = total_rounds


def list_rounds(rounds: Sequence[Round]) -> list[RoundSummary]:
    """Ordered index view of the rounds."""
    return [
        RoundSummary(
            number=r.roundNumber,
            summary=r.summary,
            entryCount=len(r.entries),
            startTimestamp=r.startTimestamp,
        )
        for r in rounds
    ]


def find_round(rounds: Sequence[Round], round_number: int) -> Round:
    """Return the round numbered ``round_number``.

    Raises:
        RoundNotFoundError: If no round has that number
    """
    for r in rounds:
        if r.roundNumber == round_number:
            return r
    raise RoundNotFoundError(round_number, len(rounds))


def extract_round(
    rounds: Sequence[Round],
    round_number: int,
    preamble: Optional[Sequence[RawEntry]] = None,
) -> str:
    """Serialize one round as JSONL, optionally preceded by preamble entries.

    Entries are replayed from their original records, not rebuilt.

    Raises:
        RoundNotFoundError: If no round has that number
    """
    found = find_round(rounds, round_number)
    lines = [serialize_entry(entry) for entry in preamble or ()]
    lines.extend(entry.rawContent for entry in found.entries)
    return "\n".join(lines)


def filter_rounds_by_keyword(rounds: Sequence[Round], keyword: str) -> list[Round]:
    """Rounds whose summary contains ``keyword``, ignoring case."""
    needle = keyword.lower()
    return [r for r in rounds if needle in r.summary.lower()]


def _preamble_preview(entry: RawEntry) -> Optional[str]:
    """Leading text of an injected entry, cut without a marker.

    Injected entries are usually system records, so any role gets one.
    Only string content or the first text block is considered.
    """
    if isinstance(entry.content, str):
        return entry.content[:PREVIEW_LENGTH]
    text_block = next((b for b in entry.blocks if isinstance(b, TextContent)), None)
    if text_block is not None and text_block.text:
        return text_block.text[:PREVIEW_LENGTH]
    return None


def prepend_entries(rounds: Sequence[Round], entries: Sequence[RawEntry]) -> list[Round]:
    """Insert a detached copy of ``entries`` at the front of every round.

    Each copy has no parent link; missing uuids and timestamps are filled in
    once, so every round carries identical copies. Round numbers, timestamps
    and summaries are left as they were.
    """
    if not entries:
        return list(rounds)

    prefix = [
        create_round_entry(
            entry.model_copy(
                update={
                    "uuid": entry.uuid or str(uuid_module.uuid4()),
                    "timestamp": entry.timestamp or current_timestamp(),
                }
            ),
            detached=True,
        ).model_copy(update={"displayContent": _preamble_preview(entry)})
        for entry in entries
    ]
    return [r.model_copy(update={"entries": [*prefix, *r.entries]}) for r in rounds]


def has_thinking_content(entries: Iterable[RawEntry]) -> bool:
    """True if any entry has a thinking block with non-blank text."""
    return any(
        isinstance(block, ThinkingContent) and block.thinking.strip()
        for entry in entries
        for block in entry.blocks
    )


def filter_rounds_with_thinking(rounds: Sequence[Round]) -> list[Round]:
    """Rounds that contain at least one non-blank thinking block."""
    return [
        r for r in rounds if has_thinking_content(entry.source for entry in r.entries)
    ]


# dateparser returns naive datetimes; parse in UTC to match session timestamps
DATEPARSER_SETTINGS: Any = {"TIMEZONE": "UTC", "RETURN_AS_TIMEZONE_AWARE": False}


def _is_whole_day(value: str) -> bool:
    return value in ("today", "yesterday") or "days ago" in value


def _parse_date_bound(value: str, option: str, upper: bool) -> datetime:
    """Parse one --from-date/--to-date value.

    Whole-day expressions ("today", "3 days ago") cover the entire day, so
    a lower bound snaps to midnight and an upper bound to the last instant.
    """
    parsed = dateparser.parse(value, settings=DATEPARSER_SETTINGS)
    if parsed is None:
        raise ValueError(f"Could not parse {option}: {value}")
    if _is_whole_day(value):
        parsed = datetime.combine(parsed.date(), time.max if upper else time.min)
    return parsed


def filter_rounds_by_date(
    rounds: Sequence[Round], from_date: Optional[str], to_date: Optional[str]
) -> list[Round]:
    """Keep rounds whose start time falls within the given bounds.

    Bounds are natural language ("2 hours ago", "yesterday", "2025-06-08").
    Round start timestamps are converted to UTC before comparing, and rounds
    whose start can't be parsed are dropped once any bound is set.

    Raises:
        ValueError: If either bound can't be parsed
    """
    if not from_date and not to_date:
        return list(rounds)

    lower = _parse_date_bound(from_date, "from-date", upper=False) if from_date else None
    upper = _parse_date_bound(to_date, "to-date", upper=True) if to_date else None

    def starts_in_range(round_: Round) -> bool:
        started = parse_utc_timestamp(round_.startTimestamp)
        if started is None:
            return False
        return (lower is None or started >= lower) and (upper is None or started <= upper)

    return [r for r in rounds if starts_in_range(r)]
