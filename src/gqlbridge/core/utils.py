"""
Utility functions for gqlbridge.

Includes:
- Line/offset conversion for editor buffers
- Word boundaries around a cursor
"""

from __future__ import annotations

import bisect
import re


# =============================================================================
# Line/offset conversion
# =============================================================================

_NAME_CHAR_PATTERN = re.compile(r'[_0-9A-Za-z]')


def line_starts(buffer: str) -> list[int]:
    """
    Offsets at which each line of the buffer starts.

    Examples:
        "" -> [0]
        "a\\nbc" -> [0, 2]
        "a\\n" -> [0, 2]
    """
    starts = [0]
    for index, char in enumerate(buffer):
        if char == "\n":
            starts.append(index + 1)
    return starts


def offset_to_position(starts: list[int], offset: int) -> tuple[int, int]:
    """Convert an absolute offset to a zero-based (line, column) pair."""
    line = bisect.bisect_right(starts, offset) - 1
    line = max(line, 0)
    return line, offset - starts[line]


def position_to_offset(starts: list[int], line: int, ch: int) -> int:
    """
    Convert a zero-based (line, column) pair to an absolute offset.

    Lines past the end clamp to the last line.
    """
    line = min(max(line, 0), len(starts) - 1)
    return starts[line] + max(ch, 0)


# =============================================================================
# Word helpers
# =============================================================================


def word_bounds(line_text: str, ch: int) -> tuple[int, int]:
    """
    Columns of the GraphQL name surrounding (or ending at) column `ch`.

    Examples:
        ("  user", 4) -> (2, 6)
        ("{ ", 2) -> (2, 2)
    """
    ch = min(max(ch, 0), len(line_text))
    start = ch
    while start > 0 and _NAME_CHAR_PATTERN.match(line_text[start - 1]):
        start -= 1
    end = ch
    while end < len(line_text) and _NAME_CHAR_PATTERN.match(line_text[end]):
        end += 1
    return start, end
