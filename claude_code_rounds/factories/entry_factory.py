"""Factory for creating RawEntry and ContentBlock instances from raw data.

This module creates typed model instances from decoded JSONL records:
- ContentBlock subclasses (Text, ToolUse, ToolResult, Thinking, Image, Unknown)
- RawEntry, with the verbatim record preserved in ``data``

Creation never fails on odd content shapes: unknown or invalid blocks become
UnknownContent, and message content that is neither a string nor a list is
dropped with ``content_malformed`` set.
"""

import logging
from typing import Any, Optional, cast

from pydantic import BaseModel, ValidationError

from ..models import (
    ContentBlock,
    ImageContent,
    MessageContent,
    RawEntry,
    TextContent,
    ThinkingContent,
    ToolResultContent,
    ToolUseContent,
    UnknownContent,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Content Block Registry
# =============================================================================

# Maps content type strings to their model classes
CONTENT_BLOCK_CREATORS: dict[str, type[BaseModel]] = {
    "text": TextContent,
    "tool_use": ToolUseContent,
    "tool_result": ToolResultContent,
    "thinking": ThinkingContent,
    "image": ImageContent,
}


def create_content_block(item_data: Any) -> ContentBlock:
    """Create a ContentBlock from raw data using the registry.

    Returns:
        ContentBlock instance, with fallback to UnknownContent for unknown
        types, non-dict items and items that fail validation
    """
    if not isinstance(item_data, dict):
        return UnknownContent(type="", data=item_data)

    item = cast(dict[str, Any], item_data)
    content_type = item.get("type")
    if not isinstance(content_type, str):
        return UnknownContent(type="", data=item)

    model_class = CONTENT_BLOCK_CREATORS.get(content_type)
    if model_class is None:
        return UnknownContent(type=content_type, data=item)
    try:
        return cast(ContentBlock, model_class.model_validate(item))
    except ValidationError as e:
        logger.debug("Invalid %s block, keeping as unknown: %s", content_type, e)
        return UnknownContent(type=content_type, data=item)


def create_message_content(content_data: Any) -> Optional[MessageContent]:
    """Create typed message content from raw ``message.content`` data.

    String content is kept as a string, lists become lists of ContentBlocks.
    Anything else is not valid message content and yields None.
    """
    if isinstance(content_data, str):
        return content_data
    if isinstance(content_data, list):
        return [create_content_block(item) for item in cast(list[Any], content_data)]
    return None


# =============================================================================
# Raw Entry Creation
# =============================================================================


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def create_raw_entry(data: dict[str, Any]) -> RawEntry:
    """Create a RawEntry from a JSON dictionary.

    Args:
        data: Dictionary parsed from one JSONL line

    Returns:
        RawEntry with structural fields extracted and ``data`` kept verbatim

    Raises:
        ValueError: If data is not a dictionary
    """
    if not isinstance(data, dict):  # pyright: ignore[reportUnnecessaryIsInstance]
        raise ValueError(f"Session entry must be a JSON object, got {type(data).__name__}")

    content: Optional[MessageContent] = None
    content_malformed = False
    message = data.get("message")
    if isinstance(message, dict) and "content" in message:
        raw_content = cast(dict[str, Any], message)["content"]
        content = create_message_content(raw_content)
        if content is None and raw_content is not None:
            content_malformed = True
            logger.debug(
                "Entry %s has malformed content of type %s",
                data.get("uuid"),
                type(raw_content).__name__,
            )

    entry_type = data.get("type")
    return RawEntry(
        type=entry_type if isinstance(entry_type, str) else "",
        uuid=_optional_str(data.get("uuid")) or None,
        parentUuid=_optional_str(data.get("parentUuid")) or None,
        timestamp=_optional_str(data.get("timestamp")) or None,
        isMeta=bool(data.get("isMeta")),
        isSidechain=bool(data.get("isSidechain")),
        content=content,
        content_malformed=content_malformed,
        data=data,
    )
