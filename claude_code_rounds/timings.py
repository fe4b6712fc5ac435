"""Timing output for session loading and round extraction.

Enabled via the CLAUDE_CODE_ROUNDS_DEBUG_TIMING environment variable.
"""

import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


DEBUG_TIMING = _env_flag("CLAUDE_CODE_ROUNDS_DEBUG_TIMING")


@contextmanager
def log_timing(
    phase: Union[str, Callable[[], str]],
    t_start: Optional[float] = None,
) -> Iterator[None]:
    """Print how long the wrapped block took when timing is enabled.

    ``phase`` may be a callable so the label can mention results produced
    inside the block. ``t_start`` (a ``time.perf_counter()`` reading) adds
    the running total since that point.
    """
    if not DEBUG_TIMING:
        yield
        return

    started = time.perf_counter()
    try:
        yield
    finally:
        finished = time.perf_counter()
        label = phase() if callable(phase) else phase
        line = f"[TIMING] {label:40s} {finished - started:8.3f}s"
        if t_start is not None:
            line += f" (total: {finished - t_start:8.3f}s)"
        print(line, flush=True)
