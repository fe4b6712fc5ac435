"""Split an ordered session into rounds.

A round runs from one genuine user message up to (not including) the next
one. Everything before the first genuine user message (summaries, snapshots,
system records) forms round 0 on its own.
"""

import json
import logging
import uuid as uuid_module
from datetime import datetime, timezone
from typing import Iterable, Iterator

from .chain import ChainIndex
from .classifier import is_new_round_start
from .models import MessageType, RawEntry, Round, RoundEntry
from .parser import create_entry_preview

logger = logging.getLogger(__name__)


def serialize_entry(entry: RawEntry) -> str:
    """Serialize an entry's original record as one compact JSON line."""
    return json.dumps(entry.data, separators=(",", ":"), ensure_ascii=False)


def current_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_round_entry(entry: RawEntry, detached: bool = False) -> RoundEntry:
    """Build the per-round view of an entry.

    Missing uuids are generated and missing timestamps default to now.
    ``detached`` clears the parent link (used for injected entries).
    """
    round_entry = RoundEntry(
        type=entry.type,
        uuid=entry.uuid or str(uuid_module.uuid4()),
        parentUuid=None if detached else entry.parentUuid,
        timestamp=entry.timestamp or current_timestamp(),
        rawContent=serialize_entry(entry),
        displayContent=create_entry_preview(entry),
    )
    round_entry._source = entry
    return round_entry


def summarize_round(round_number: int, entries: list[RoundEntry]) -> str:
    """Pick the summary line for a round.

    The first user entry with a preview that isn't a bracketed annotation
    wins; otherwise the first entry's preview; otherwise "Round N".
    """
    for entry in entries:
        if (
            entry.type == MessageType.USER
            and entry.displayContent
            and not entry.displayContent.startswith("[")
        ):
            return entry.displayContent
    return entries[0].displayContent or f"Round {round_number}"


def create_round(round_number: int, entries: list[RoundEntry]) -> Round:
    """Seal a non-empty bucket of entries as a Round."""
    return Round(
        roundNumber=round_number,
        startUuid=entries[0].uuid,
        startTimestamp=entries[0].timestamp,
        endTimestamp=entries[-1].timestamp,
        entries=entries,
        summary=summarize_round(round_number, entries),
    )


def iter_rounds(entries: Iterable[RawEntry]) -> Iterator[Round]:
    """Yield rounds from an ordered entry sequence in a single pass."""
    entries = list(entries)
    chain = ChainIndex(entries)

    bucket: list[RoundEntry] = []
    round_number = 0
    for entry in entries:
        round_entry = create_round_entry(entry)

        if is_new_round_start(entry):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Round start %s (parent chain anchor: %s)",
                    round_entry.uuid,
                    chain.resolve_ultimate_role(entry.parentUuid),
                )
            if bucket:
                yield create_round(round_number, bucket)
                round_number += 1
            bucket = [round_entry]
        else:
            bucket.append(round_entry)

    if bucket:
        yield create_round(round_number, bucket)


def extract_rounds(entries: Iterable[RawEntry]) -> list[Round]:
    """Segment an ordered entry sequence into rounds numbered from 0."""
    return list(iter_rounds(entries))
