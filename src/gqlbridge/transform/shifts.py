"""
Shift ledger - ordered record of text insertions made to a buffer.

Every insertion the normalizer makes (e.g. a synthesized fragment name) is
recorded here as a Shift so that positions computed against the transformed
buffer can be moved back to the original buffer.

Two query styles are supported:
- per line: which insertions happened on line N (diagnostics, cursors)
- per offset: a consuming cursor for a single left-to-right token walk
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from ..core.errors import TransformError
from ..core.utils import line_starts, offset_to_position


@dataclass(frozen=True)
class Shift:
    """
    A single insertion into the transformed buffer.

    position: offset in the transformed buffer where the insertion starts
    length: number of inserted characters
    """
    position: int
    length: int

    @property
    def end(self) -> int:
        """Offset right after the inserted text."""
        return self.position + self.length


class ShiftLedger:
    """
    Append-only, position-ordered list of shifts.

    Usage:
        ledger = ShiftLedger()
        ledger.record(9, 5)
        ledger.shifts_on_line(buffer, 0)     # -> [Shift(9, 5)]
        ledger.to_original_offset(14)        # -> 9
    """

    def __init__(self):
        self._shifts: list[Shift] = []
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._shifts)

    def __iter__(self) -> Iterator[Shift]:
        return iter(self._shifts)

    def __getitem__(self, index: int) -> Shift:
        return self._shifts[index]

    def __repr__(self) -> str:
        return f"ShiftLedger({self._shifts!r})"

    def record(self, position: int, length: int) -> Shift:
        """
        Append an insertion.

        Raises:
            TransformError: if the insertion is not strictly after the
                previous one or has a non-positive length
        """
        if length <= 0:
            raise TransformError(f"Shift length must be positive, got {length}")
        if self._shifts and position < self._shifts[-1].end:
            raise TransformError(
                f"Shift at {position} overlaps or precedes shift ending at {self._shifts[-1].end}"
            )
        shift = Shift(position=position, length=length)
        self._shifts.append(shift)
        return shift

    # =========================================================================
    # Line queries
    # =========================================================================

    def shifts_by_line(self, buffer: str) -> dict[int, list[Shift]]:
        """
        Bucket shifts by the line of `buffer` (the transformed buffer) they sit on.

        Inserted text never contains line breaks, so line numbers are the same
        in the original and the transformed buffer.
        """
        by_line: dict[int, list[Shift]] = {}
        if not self._shifts:
            return by_line
        if "\n" not in buffer:
            # no line breaks, so every shift is on line 0
            by_line[0] = list(self._shifts)
            return by_line

        starts = line_starts(buffer)
        for shift in self._shifts:
            line, _ = offset_to_position(starts, shift.position)
            by_line.setdefault(line, []).append(shift)
        return by_line

    def shifts_on_line(self, buffer: str, line: int) -> list[Shift]:
        """Shifts on the given line of the transformed buffer, in order."""
        return self.shifts_by_line(buffer).get(line, [])

    def to_original_column(self, buffer: str, line: int, ch: int) -> int:
        """
        Move a transformed-buffer column on `line` back to the original column.

        A column inside inserted text maps to the insertion point.
        """
        return self.unshift_column(self.shifts_on_line(buffer, line), _line_start(buffer, line), ch)

    def to_transformed_column(self, buffer: str, line: int, ch: int) -> int:
        """
        Move an original-buffer column on `line` forward past every insertion
        positioned at or before it.
        """
        start = _line_start(buffer, line)
        adjusted = ch
        for shift in self.shifts_on_line(buffer, line):
            if shift.position - start <= adjusted:
                # place the cursor after the inserted text
                adjusted += shift.length
        return adjusted

    @staticmethod
    def unshift_column(shifts: list[Shift], line_start: int, ch: int) -> int:
        delta = 0
        for shift in shifts:
            column = shift.position - line_start
            if column >= ch:
                break
            if ch < column + shift.length:
                return column - delta
            delta += shift.length
        return ch - delta

    # =========================================================================
    # Offset queries
    # =========================================================================

    def delta_before(self, offset: int) -> int:
        """Total length of insertions positioned strictly before `offset`."""
        return sum(shift.length for shift in self._shifts if shift.position < offset)

    def to_original_offset(self, offset: int) -> int:
        """Map a transformed-buffer offset back to the original buffer."""
        delta = 0
        for shift in self._shifts:
            if shift.position >= offset:
                break
            if offset < shift.end:
                return shift.position - delta
            delta += shift.length
        return offset - delta

    def reset(self) -> None:
        """Rewind the consuming cursor to the first shift."""
        self._cursor = 0

    def peek(self) -> Optional[Shift]:
        """Next shift not yet consumed, if any."""
        if self._cursor < len(self._shifts):
            return self._shifts[self._cursor]
        return None

    def consume_before(self, offset: int) -> list[Shift]:
        """
        Consume and return every pending shift positioned strictly before `offset`.

        Shifts returned once are never returned again until reset().
        """
        consumed: list[Shift] = []
        while self._cursor < len(self._shifts) and self._shifts[self._cursor].position < offset:
            consumed.append(self._shifts[self._cursor])
            self._cursor += 1
        return consumed


def _line_start(buffer: str, line: int) -> int:
    starts = line_starts(buffer)
    if line < 0 or line >= len(starts):
        return len(buffer)
    return starts[line]
