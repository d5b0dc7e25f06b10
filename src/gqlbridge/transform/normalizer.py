"""
Fragment-grammar normalizer.

Relay allows the shorthand 'fragment on Foo { ... }', which the GraphQL
grammar rejects because a fragment definition needs a name. The normalizer
inserts a placeholder name and records each insertion in the shift ledger:

    fragment on Foo { id }
    fragment ____ on Foo { id }
             ^ Shift(position=9, length=5)
"""

from __future__ import annotations

import logging
import re

from .context import FRAGMENT_NAME_INSERT, TransformContext

logger = logging.getLogger(__name__)

_SHORTHAND_FRAGMENT_PATTERN = re.compile(r'\b(fragment\s+)(on)\b')


class FragmentNormalizer:
    """
    Names shorthand fragment definitions in the templated buffer.

    Usage:
        normalizer = FragmentNormalizer()
        graphql = normalizer.normalize(context)
    """

    def normalize(self, context: TransformContext) -> str:
        """
        Rewrite `context.templated_buffer` into `context.transformed_buffer`.

        Matches preceded by a '#' on the same line are inside a comment and
        are left as they are.
        """
        source = context.templated_buffer
        inserted = 0

        def replace(match: re.Match) -> str:
            nonlocal inserted
            keyword, on = match.group(1), match.group(2)
            if _is_commented(source, match.start()):
                return match.group(0)

            position = inserted + match.start() + len(keyword)
            context.shifts.record(position, len(FRAGMENT_NAME_INSERT))
            inserted += len(FRAGMENT_NAME_INSERT)
            return keyword + FRAGMENT_NAME_INSERT + on

        context.transformed_buffer = _SHORTHAND_FRAGMENT_PATTERN.sub(replace, source)
        if context.shifts:
            logger.debug(f"Named {len(context.shifts)} shorthand fragment(s)")
        return context.transformed_buffer


def _is_commented(source: str, offset: int) -> bool:
    """True if a '#' precedes `offset` on the same line."""
    line_start = source.rfind("\n", 0, offset) + 1
    return "#" in source[line_start:offset]


def normalize_fragments(context: TransformContext) -> str:
    """Convenience function to run the normalizer on a context."""
    return FragmentNormalizer().normalize(context)
