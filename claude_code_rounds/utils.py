#!/usr/bin/env python3
"""Display helpers shared by the CLI."""

from typing import Optional

from .parser import parse_utc_timestamp

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(timestamp_str: Optional[str]) -> str:
    """Show a round timestamp as UTC wall-clock time.

    Values that don't parse as ISO timestamps are shown unchanged.
    """
    if not timestamp_str:
        return ""
    dt = parse_utc_timestamp(timestamp_str)
    if dt is None:
        return timestamp_str
    return dt.strftime(DISPLAY_TIME_FORMAT)
