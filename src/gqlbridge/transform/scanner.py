"""
Template scanner - replaces embedded ${...} expressions with GraphQL-legal text.

Tagged-template GraphQL (Relay.QL, Apollo gql, Lokka) interpolates host
language expressions that a GraphQL parser cannot read. Each expression is
overwritten in place so the buffer length, and therefore every offset, stays
the same:

    fragment on Todo { ${Todo.getFragment('todo')} }
    fragment on Todo { __typename                  }

Policy per expression:
- Apollo, top level (brace depth 0): the whole span becomes whitespace.
- Lokka '...${frag}' spreads: the dots are blanked and the shorter '__'
  placeholder is used; the dots are redrawn later by the reverse mapper.
- Span too short for the placeholder: only '$' is replaced by '#', turning
  the rest of the line into a comment while the user keeps typing.
- Otherwise: placeholder field name, padded with spaces to the span's end.
"""

from __future__ import annotations

import logging
from typing import Optional

from .context import (
    LOKKA_FRAGMENT_PLACEHOLDER,
    TEMPLATE_PLACEHOLDER,
    Replacement,
    TransformContext,
)

logger = logging.getLogger(__name__)

COMMENT = "#"
WHITESPACE = " "
DOT = "."
NEW_LINE = "\n"
TEMPLATE_MARK = "$"
LEFT_BRACE = "{"
RIGHT_BRACE = "}"

LOKKA_SPREAD = "..."


class TemplateScanner:
    """
    Single left-to-right pass over the original buffer.

    Usage:
        scanner = TemplateScanner()
        templated = scanner.scan(context)
    """

    def scan(self, context: TransformContext) -> str:
        """
        Replace every template expression in `context.original_buffer`.

        Fills `template_by_position`, `line_end_replacements` and
        `blanked_spans` on the context, stores the result as
        `context.templated_buffer` and returns it.
        """
        buffer = list(context.original_buffer)
        length = len(buffer)

        line = 0
        brace_depth = 0
        i = 0
        while i < length:
            char = buffer[i]
            if char == NEW_LINE:
                line += 1
            elif char == LEFT_BRACE:
                brace_depth += 1
            elif char == RIGHT_BRACE:
                brace_depth -= 1
            elif char == TEMPLATE_MARK and i + 1 < length and buffer[i + 1] == LEFT_BRACE:
                end = self._find_template_end(buffer, i)
                if end is None:
                    # unterminated, leave it for the parser to report
                    logger.debug(f"Unterminated template expression at line {line}, offset {i}")
                    i += 1
                    continue
                self._replace_template(context, buffer, i, end, brace_depth)
                # the template's own braces do not count towards the depth
                i = end + 1
                continue
            i += 1

        context.templated_buffer = "".join(buffer)
        context.transformed_buffer = context.templated_buffer
        return context.templated_buffer

    @staticmethod
    def _find_template_end(buffer: list[str], start: int) -> Optional[int]:
        """
        Offset of the last character of the template starting at `start`.

        The template ends at the brace that closes its opening brace, or right
        before the first line break, whichever comes first.
        """
        open_braces = 0
        for t in range(start + 1, len(buffer)):
            char = buffer[t]
            if char == LEFT_BRACE:
                open_braces += 1
                continue
            if char == RIGHT_BRACE:
                open_braces -= 1
                if open_braces > 0:
                    continue
                return t
            if char == NEW_LINE:
                # the line break is not part of the template
                return t - 1
        return None

    def _replace_template(
        self,
        context: TransformContext,
        buffer: list[str],
        start: int,
        end: int,
        brace_depth: int,
    ) -> None:
        template = context.original_buffer[start:end + 1]

        if context.environment == "apollo" and brace_depth == 0:
            # top level Apollo interpolations are whole fragment documents
            for k in range(start, end + 1):
                buffer[k] = WHITESPACE
            context.blanked_spans.append((start, end + 1))
            logger.debug(f"Blanked top-level template at {start}: {template!r}")
            return

        is_lokka_fragment = False
        if context.environment == "lokka" and start >= len(LOKKA_SPREAD):
            if "".join(buffer[start - len(LOKKA_SPREAD):start]) == LOKKA_SPREAD:
                # '...${frag}' -> '   __     ', the dots come back as a keyword token
                for k in range(start - len(LOKKA_SPREAD), start):
                    buffer[k] = WHITESPACE
                context.line_end_replacements[start] = Replacement(text=LOKKA_SPREAD, type="keyword")
                is_lokka_fragment = True

        context.template_by_position[start] = template
        field_name = LOKKA_FRAGMENT_PLACEHOLDER if is_lokka_fragment else TEMPLATE_PLACEHOLDER
        self._insert_placeholder_or_comment(buffer, start, end, field_name)

    @staticmethod
    def _insert_placeholder_or_comment(buffer: list[str], start: int, end: int, field_name: str) -> None:
        """
        Write `field_name` over the span, padded with spaces.

        If the field does not fit, only the template mark becomes a comment
        start (the user is most likely still typing the expression).
        """
        span = end - start + 1
        if span < len(field_name) or start + len(field_name) > len(buffer):
            buffer[start] = COMMENT
            return

        for offset, char in enumerate(field_name):
            buffer[start + offset] = char
        for k in range(start + len(field_name), end + 1):
            buffer[k] = WHITESPACE


def scan_templates(context: TransformContext) -> str:
    """Convenience function to run the scanner on a context."""
    return TemplateScanner().scan(context)
