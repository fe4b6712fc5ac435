"""Session context fields shared by every entry of a session.

Entries injected from outside the session (a preamble "system file") are
re-stamped with these so they look like they belong to it.
"""

from typing import Any, Iterable

from .models import RawEntry, SessionContext

CONTEXT_FIELDS = (
    "cwd",
    "sessionId",
    "version",
    "gitBranch",
    "userType",
    "isSidechain",
    "thinkingMetadata",
    "todos",
)


def extract_context_fields(entries: Iterable[RawEntry]) -> SessionContext:
    """Return the context fields of the first entry that has any.

    Fields are not merged across entries. A field counts as present when its
    key is in the record, even with a null value.
    """
    for entry in entries:
        context = {
            field: entry.data[field] for field in CONTEXT_FIELDS if field in entry.data
        }
        if context:
            return context
    return {}


def apply_context_fields(
    data: dict[str, Any], context: SessionContext
) -> dict[str, Any]:
    """Return a copy of ``data`` with context fields overridden by ``context``."""
    stamped = dict(data)
    for field in CONTEXT_FIELDS:
        if field in context:
            stamped[field] = context[field]
    return stamped
