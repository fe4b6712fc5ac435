#!/usr/bin/env python3
"""Parse and extract display data from Claude Code session entries.

This module provides utility functions over parsed entries:
- create_entry_preview: bounded preview text for an entry's content
- render_tool_result_text: flatten tool_result content to text
- parse_timestamp, parse_utc_timestamp: Parse ISO timestamps

For RawEntry and content block creation, see factories/.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Optional, cast

from .models import (
    ContentBlock,
    MessageContent,
    MessageType,
    RawEntry,
    TextContent,
    ToolResultContent,
    UnknownContent,
)

# Constants
PREVIEW_LENGTH = 100
COMMAND_ARGS_PREVIEW_LENGTH = 50
TRUNCATION_MARKER = "..."

# Slash command invocations embedded in user text
COMMAND_NAME_PATTERN = re.compile(r"<command-name>(/[^<]+)</command-name>")
COMMAND_ARGS_PATTERN = re.compile(r"<command-args>([^<]*)</command-args>")


def truncate_text(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Cut text to ``limit`` characters, appending a marker if anything was cut."""
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def extract_command_preview(text: str) -> Optional[str]:
    """Return "/name args" for text carrying a slash command, else None."""
    command_match = COMMAND_NAME_PATTERN.search(text)
    if not command_match:
        return None
    args_match = COMMAND_ARGS_PATTERN.search(text)
    args = args_match.group(1).strip() if args_match else ""
    if not args:
        return command_match.group(1)
    return f"{command_match.group(1)} {truncate_text(args, COMMAND_ARGS_PREVIEW_LENGTH)}"


def render_tool_result_text(content: Any) -> str:
    """Flatten tool_result content to plain text.

    String content is returned as is. List content (MCP style) is reduced to
    its text items joined by newlines, or JSON when it has none.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = [
            item["text"]
            for item in content
            if isinstance(item, dict)
            and item.get("type") == "text"
            and isinstance(item.get("text"), str)
        ]
        if texts:
            return "\n".join(texts)
    return json.dumps(content, ensure_ascii=False)


def create_content_preview(content: Optional[MessageContent]) -> Optional[str]:
    """Derive a bounded preview from message content.

    - String content: a slash-command summary, or the first 100 characters.
    - Block content: the first text block's text, or failing that the first
      tool_result block's content rendered as text.
    - Anything else: None.
    """
    if isinstance(content, str):
        command_preview = extract_command_preview(content)
        if command_preview is not None:
            return command_preview
        return truncate_text(content)

    if isinstance(content, list):
        text_block = next((b for b in content if isinstance(b, TextContent)), None)
        if text_block is not None and text_block.text:
            return truncate_text(text_block.text)
        result_block = next((b for b in content if b.type == "tool_result"), None)
        if result_block is not None:
            payload = _tool_result_payload(result_block)
            if payload:
                return truncate_text(render_tool_result_text(payload))

    return None


def _tool_result_payload(block: ContentBlock) -> Any:
    if isinstance(block, ToolResultContent):
        return block.content
    # A tool_result that failed validation keeps its raw dict
    if isinstance(block, UnknownContent) and isinstance(block.data, dict):
        return cast(dict[str, Any], block.data).get("content")
    return None


def create_entry_preview(entry: RawEntry) -> Optional[str]:
    """Preview for a session entry; only user and assistant messages have one."""
    if entry.type not in (MessageType.USER, MessageType.ASSISTANT):
        return None
    return create_content_preview(entry.content)


def parse_timestamp(timestamp_str: str) -> Optional[datetime]:
    """Parse ISO timestamp to datetime object."""
    try:
        return datetime.fromisoformat(timestamp_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


def parse_utc_timestamp(timestamp_str: str) -> Optional[datetime]:
    """Parse an ISO timestamp into a naive datetime in UTC.

    Offsets are converted rather than dropped; naive input is taken as UTC.
    """
    dt = parse_timestamp(timestamp_str)
    if dt is not None and dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
