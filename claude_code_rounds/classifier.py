"""Structural classification of session entries.

User-role entries are not all genuine user input: tool results are echoed
back as user entries, cancelled tool calls leave an interrupt notice, and
slash commands emit meta entries. Only the remaining user entries start a
new round. Each predicate looks at the entry alone.
"""

from .models import MessageType, RawEntry, TextContent

# Text Claude Code writes when the user cancels an in-flight request
INTERRUPT_MARKER = "[Request interrupted by user"

TOOL_RESULT_TYPE = "tool_result"


def is_tool_result_echo(entry: RawEntry) -> bool:
    """True for a user entry whose block content carries a tool_result.

    Blocks are matched by their type tag, so a tool_result that failed
    validation (kept as UnknownContent) still counts.
    """
    if entry.type != MessageType.USER:
        return False
    return any(block.type == TOOL_RESULT_TYPE for block in entry.blocks)


def is_interrupt_notice(entry: RawEntry) -> bool:
    """True for a user entry recording that the user cancelled a tool action.

    Only block content is considered; a plain-string message never counts.
    """
    if entry.type != MessageType.USER:
        return False
    return any(
        isinstance(block, TextContent) and INTERRUPT_MARKER in block.text
        for block in entry.blocks
    )


def is_meta(entry: RawEntry) -> bool:
    return entry.isMeta


def is_new_round_start(entry: RawEntry) -> bool:
    """True if the entry is genuine user input that opens a new round."""
    return (
        entry.type == MessageType.USER
        and not is_meta(entry)
        and not is_tool_result_echo(entry)
        and not is_interrupt_notice(entry)
    )
