"""Factory modules for creating typed objects from raw data."""

from .entry_factory import (
    # Content block registry
    CONTENT_BLOCK_CREATORS,
    # Content block creation
    create_content_block,
    create_message_content,
    # Raw entry creation
    create_raw_entry,
)

__all__ = [
    # Content block registry
    "CONTENT_BLOCK_CREATORS",
    # Content block creation
    "create_content_block",
    "create_message_content",
    # Raw entry creation
    "create_raw_entry",
]
