"""Extract conversation rounds from Claude Code session logs."""

from .chain import ChainIndex
from .classifier import (
    is_interrupt_notice,
    is_meta,
    is_new_round_start,
    is_tool_result_echo,
)
from .context import apply_context_fields, extract_context_fields
from .factories import create_raw_entry
from .models import RawEntry, Round, RoundEntry, RoundSummary
from .rounds import (
    RoundNotFoundError,
    extract_round,
    filter_rounds_by_date,
    filter_rounds_by_keyword,
    filter_rounds_with_thinking,
    find_round,
    has_thinking_content,
    list_rounds,
    prepend_entries,
)
from .segmenter import extract_rounds

__all__ = [
    "ChainIndex",
    "RawEntry",
    "Round",
    "RoundEntry",
    "RoundNotFoundError",
    "RoundSummary",
    "apply_context_fields",
    "create_raw_entry",
    "extract_context_fields",
    "extract_round",
    "extract_rounds",
    "filter_rounds_by_date",
    "filter_rounds_by_keyword",
    "filter_rounds_with_thinking",
    "find_round",
    "has_thinking_content",
    "is_interrupt_notice",
    "is_meta",
    "is_new_round_start",
    "is_tool_result_echo",
    "list_rounds",
    "prepend_entries",
]
