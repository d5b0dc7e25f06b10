"""
Forward pipeline coordinator.

Runs the template scanner and the fragment normalizer on an incoming buffer
and moves the request cursor (hints, token documentation) into the
transformed buffer's coordinate space.

Usage:
    forward = transform("getHints", buffer, Position(line=0, ch=16), "relay")
    hints = hint(forward.transformed_buffer, forward.adjusted_cursor, schema)
    result = reverse_map("getHints", hints, forward.context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.types import CURSOR_COMMANDS, Environment, Position
from .context import TransformContext, create_context
from .normalizer import FragmentNormalizer
from .reverse import ResponseReverseMapper
from .scanner import TemplateScanner

logger = logging.getLogger(__name__)


@dataclass
class ForwardResult:
    """Output of the forward pipeline for one request."""
    context: TransformContext
    transformed_buffer: str
    adjusted_cursor: Optional[Position] = None


class TransformPipeline:
    """
    Scanner -> normalizer -> (toolchain) -> reverse mapper.

    A pipeline instance holds no request state; every call to forward()
    creates a new TransformContext.
    """

    def __init__(self):
        self.scanner = TemplateScanner()
        self.normalizer = FragmentNormalizer()

    def forward(
        self,
        request_kind: str,
        buffer: str,
        cursor: Optional[Position] = None,
        environment: Environment = "plain",
    ) -> ForwardResult:
        """
        Transform `buffer` into valid GraphQL for the toolchain.

        Args:
            request_kind: Editor command, e.g. "getTokens" or "getHints"
            buffer: Original editor buffer
            cursor: Cursor for hint/documentation requests (original coordinates)
            environment: Embedding convention of the buffer

        Returns:
            ForwardResult with the context, transformed buffer and adjusted cursor
        """
        context = create_context(buffer, environment)

        # first take care of the ${...} template expressions
        self.scanner.scan(context)

        # then name shorthand fragments, recording the insertions as shifts
        self.normalizer.normalize(context)

        adjusted_cursor = cursor
        if cursor is not None and request_kind in CURSOR_COMMANDS:
            adjusted_cursor = self.adjust_cursor(context, cursor)

        if not context.is_identity:
            logger.debug(
                f"Transformed {request_kind} buffer ({environment}): "
                f"{len(context.template_by_position)} template(s), {len(context.shifts)} shift(s)"
            )

        return ForwardResult(
            context=context,
            transformed_buffer=context.transformed_buffer,
            adjusted_cursor=adjusted_cursor,
        )

    @staticmethod
    def adjust_cursor(context: TransformContext, cursor: Position) -> Position:
        """Move the cursor right past every insertion at or before it on its line."""
        if not context.shifts:
            return cursor
        ch = context.shifts.to_transformed_column(context.transformed_buffer, cursor.line, cursor.ch)
        return Position(line=cursor.line, ch=ch)

    @staticmethod
    def reverse(request_kind: str, result: Any, context: TransformContext) -> Any:
        """Map a toolchain result back onto the original buffer."""
        return ResponseReverseMapper(context).reverse_map(request_kind, result)


_pipeline = TransformPipeline()


def transform(
    request_kind: str,
    buffer: str,
    cursor: Optional[Position] = None,
    environment: Environment = "plain",
) -> ForwardResult:
    """Convenience function for TransformPipeline.forward()."""
    return _pipeline.forward(request_kind, buffer, cursor, environment)


def reverse_map(request_kind: str, result: Any, context: TransformContext) -> Any:
    """Convenience function for TransformPipeline.reverse()."""
    return _pipeline.reverse(request_kind, result, context)
