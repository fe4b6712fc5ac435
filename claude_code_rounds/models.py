"""Pydantic models for Claude Code session entries and extracted rounds.

Raw session entries are kept verbatim (``RawEntry.data``) alongside the few
structural fields that round extraction needs, so that exported rounds replay
the original log lines instead of reconstructing them.
"""

import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, PrivateAttr


class MessageType(str, Enum):
    """Entry role tags found in session JSONL files.

    Using str as base class keeps plain string comparisons working, so
    ``entry.type == MessageType.USER`` holds for ``"user"``.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    SUMMARY = "summary"
    SNAPSHOT = "file-history-snapshot"


# =============================================================================
# Content Blocks
# =============================================================================
# Closed set of block kinds. Anything the factory does not recognise becomes
# UnknownContent so callers can always dispatch exhaustively.


class TextContent(BaseModel):
    type: str = "text"
    text: str = ""


class ToolUseContent(BaseModel):
    type: str = "tool_use"
    id: str = ""
    name: str = ""
    input: dict[str, Any] = {}


class ToolResultContent(BaseModel):
    """Tool output echoed back to the model.

    ``content`` is usually a string or a list of MCP items, but any payload
    is kept as logged.
    """

    type: str = "tool_result"
    tool_use_id: str = ""
    content: Any = None
    is_error: Optional[bool] = None


class ThinkingContent(BaseModel):
    type: str = "thinking"
    thinking: str = ""
    signature: Optional[str] = None


class ImageContent(BaseModel):
    type: str = "image"
    source: dict[str, Any] = {}


class UnknownContent(BaseModel):
    """Fallback for block kinds we don't model (or blocks that failed validation)."""

    type: str = ""
    data: Any = None


ContentBlock = Union[
    TextContent,
    ToolUseContent,
    ToolResultContent,
    ThinkingContent,
    ImageContent,
    UnknownContent,
]

# Message content is either a plain string or an ordered list of blocks
MessageContent = Union[str, list[ContentBlock]]


# =============================================================================
# Raw Entries
# =============================================================================


class RawEntry(BaseModel):
    """One record from a session log.

    ``data`` holds the decoded JSON object exactly as it appeared in the file.
    ``content`` is the typed view of ``data["message"]["content"]``; it is
    None when the entry has no message content or when that content was
    neither a string nor a list (``content_malformed`` is then True).
    """

    model_config = {"frozen": True}

    type: str
    uuid: Optional[str] = None
    parentUuid: Optional[str] = None
    timestamp: Optional[str] = None
    isMeta: bool = False
    isSidechain: bool = False
    content: Optional[MessageContent] = None
    content_malformed: bool = False
    data: dict[str, Any] = {}

    @property
    def role(self) -> Optional[MessageType]:
        """Known role tag for this entry, or None for other entry types."""
        try:
            return MessageType(self.type)
        except ValueError:
            return None

    @property
    def blocks(self) -> list[ContentBlock]:
        """Content blocks, or an empty list for string/missing content."""
        if isinstance(self.content, list):
            return self.content
        return []


# Canonical session-context fields, keyed by their JSONL names
SessionContext = dict[str, Any]


# =============================================================================
# Rounds
# =============================================================================


class RoundEntry(BaseModel):
    """Per-entry view held inside a Round.

    Field names follow the exported JSON format. ``rawContent`` is the
    verbatim serialized entry; ``displayContent`` is its bounded preview.
    """

    model_config = {"frozen": True}

    type: str
    uuid: str
    parentUuid: Optional[str] = None
    timestamp: str
    rawContent: str
    displayContent: Optional[str] = None
    _source: Optional[RawEntry] = PrivateAttr(default=None)

    @property
    def source(self) -> RawEntry:
        """The RawEntry this view was built from.

        Rounds loaded back from exported JSON don't carry it, so it is
        lazily rebuilt from ``rawContent`` and cached.
        """
        if self._source is None:
            from .factories import create_raw_entry

            self._source = create_raw_entry(json.loads(self.rawContent))
        return self._source


class Round(BaseModel):
    """An ordered group of entries forming one interaction cycle."""

    model_config = {"frozen": True}

    roundNumber: int
    startUuid: str
    startTimestamp: str
    endTimestamp: str
    entries: list[RoundEntry]
    summary: str


class RoundSummary(BaseModel):
    """One row of the round index produced by list_rounds()."""

    number: int
    summary: str
    entryCount: int
    startTimestamp: str


class RoundListOutput(BaseModel):
    filePath: str
    totalRounds: int
    rounds: list[RoundSummary]
