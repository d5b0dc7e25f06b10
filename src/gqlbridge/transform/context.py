"""
Per-request transformation context.

A TransformContext is created for one editor request, threaded through the
forward pipeline and the reverse mapper, and discarded with the response.
Nothing in it is shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.types import Environment
from .shifts import ShiftLedger


# Placeholder field written over a template expression
TEMPLATE_PLACEHOLDER = "__typename"

# Shorter placeholder for Lokka '...${fragment}' spreads
LOKKA_FRAGMENT_PLACEHOLDER = "__"

# Name synthesized for shorthand 'fragment on Foo' definitions
FRAGMENT_NAME_PLACEHOLDER = "____"

# Inserted text is the name plus one separating space
FRAGMENT_NAME_INSERT = FRAGMENT_NAME_PLACEHOLDER + " "

TEMPLATE_TOKEN_TYPE = "template-fragment"


@dataclass(frozen=True)
class Replacement:
    """Text to splice back in at the end of a whitespace run."""
    text: str
    type: str


@dataclass
class TransformContext:
    """
    Tracks every change made to the incoming buffer for one request.

    Offsets in `template_by_position`, `line_end_replacements` and
    `blanked_spans` are scanner offsets. The scanner never changes the buffer
    length, so they are also original-buffer offsets. Shift positions are
    offsets in `transformed_buffer`.
    """
    original_buffer: str
    environment: Environment = "plain"
    templated_buffer: str = ""
    transformed_buffer: str = ""
    shifts: ShiftLedger = field(default_factory=ShiftLedger)
    template_by_position: dict[int, str] = field(default_factory=dict)
    line_end_replacements: dict[int, Replacement] = field(default_factory=dict)
    blanked_spans: list[tuple[int, int]] = field(default_factory=list)

    def __post_init__(self):
        """Start from an untouched copy of the original buffer."""
        if not self.templated_buffer:
            self.templated_buffer = self.original_buffer
        if not self.transformed_buffer:
            self.transformed_buffer = self.templated_buffer

    @property
    def is_identity(self) -> bool:
        """True when the transformed buffer is the original, unchanged."""
        return self.transformed_buffer == self.original_buffer and not self.shifts

    def template_at(self, offset: int) -> str | None:
        """Original template text whose placeholder starts at `offset`."""
        return self.template_by_position.get(offset)

    def is_blanked(self, start: int, end: int) -> bool:
        """True when [start, end) overlaps a span the scanner blanked out."""
        return any(start < span_end and span_start < end for span_start, span_end in self.blanked_spans)


def create_context(buffer: str, environment: Environment = "plain") -> TransformContext:
    """Create a fresh context for one request."""
    return TransformContext(original_buffer=buffer or "", environment=environment)
