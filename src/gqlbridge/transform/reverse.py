"""
Response reverse mapper - moves toolchain results back onto the original buffer.

The toolchain tokenized, linted or completed the *transformed* buffer. This
module undoes the transformation on its output:

Tokens (three passes):
1. unshift: drop tokens made of inserted text, move the rest left by the
   cumulative insertion length
2. restore: give placeholder/comment tokens their original template text and
   split tokens that contain template starts
3. partition: trim overlaps, fill gaps, splice back Lokka spread markers and
   blanked Apollo text, so the stream covers the original buffer exactly

Diagnostics: columns are moved back through the per-line shift buckets, then
the environment's suppression rules are applied.

Hints: positions already refer to the buffer the toolchain saw, so only the
hint list itself is cleaned up.
"""

from __future__ import annotations

import bisect
import logging
from typing import Any, Optional

from ..core.errors import ToolchainParseError
from ..core.types import Diagnostic, HintResult, Position, Token
from ..core.utils import line_starts
from .context import TEMPLATE_TOKEN_TYPE, TransformContext
from .filters import DiagnosticFilter
from .shifts import Shift, ShiftLedger

logger = logging.getLogger(__name__)

WS_TYPE = "ws"
PUNCTUATION_TYPE = "punctuation"

# Tagged templates already supply the outer braces of a document
EMBEDDED_HINT_EXCLUSIONS = {"{"}


class ResponseReverseMapper:
    """
    Reverses one request's transformation on toolchain output.

    Usage:
        mapper = ResponseReverseMapper(context)
        tokens = mapper.map_tokens(tokens)
        diagnostics = mapper.map_diagnostics(diagnostics)
    """

    def __init__(self, context: TransformContext):
        self.context = context
        self.original = context.original_buffer
        self._template_starts = sorted(context.template_by_position)

    def reverse_map(self, request_kind: str, result: Any) -> Any:
        """Dispatch on the request kind that produced `result`."""
        if isinstance(result, ToolchainParseError):
            return self.map_parse_error(result)
        if request_kind == "getTokens":
            return self.map_tokens(result)
        if request_kind == "getAnnotations":
            return self.map_diagnostics(result)
        if request_kind == "getHints":
            return self.map_hints(result)
        return result

    # =========================================================================
    # Tokens
    # =========================================================================

    def map_tokens(self, tokens: list[Token]) -> list[Token]:
        """
        Map a transformed-buffer token stream onto the original buffer.

        The returned tokens are a contiguous, gap-free partition of the
        original buffer: their texts concatenate to it.
        """
        if not tokens:
            return [self._gap(0, len(self.original), None)] if self.original else []

        unshifted = self._unshift_tokens(tokens)

        restored: list[Token] = []
        for token in unshifted:
            restored.extend(self._restore_templates(token))

        mapped = self._partition(restored)

        if "".join(token.text for token in mapped) != self.original:
            logger.error(
                f"Reverse-mapped tokens do not reconstruct the original buffer "
                f"({len(mapped)} tokens, environment {self.context.environment})"
            )
        return mapped

    def _unshift_tokens(self, tokens: list[Token]) -> list[Token]:
        ledger = self.context.shifts
        if not ledger:
            return list(tokens)

        ledger.reset()
        delta = 0
        active: Optional[Shift] = None
        kept: list[Token] = []
        for token in tokens:
            # every insertion positioned at or before this token has been passed
            for shift in ledger.consume_before(token.start + 1):
                delta += shift.length
                active = shift

            if active is not None and token.start < active.end:
                if token.end <= active.end:
                    # made of inserted text only, e.g. the synthesized fragment name
                    continue
                token.text = token.text[active.end - token.start:]
                token.start = active.end

            pending = ledger.peek()
            if pending is not None and token.start < pending.position < token.end:
                # the tail is inserted text; the remainder is refilled as a gap later
                token.text = token.text[:pending.position - token.start]
                token.end = pending.position

            if delta:
                token.start -= delta
                token.end -= delta
            kept.append(token)
        return kept

    def _restore_templates(self, token: Token) -> list[Token]:
        if not self._template_starts:
            return [token]

        pieces: list[Token] = []
        current = token
        while True:
            template = self.context.template_at(current.start)
            if template is not None:
                template_end = current.start + len(template)
                if current.end <= template_end:
                    # placeholder (or comment) token; padding after it is trimmed later
                    self._mark_template(current, template)
                    pieces.append(current)
                    break
                head = self._piece(current, current.start, template_end)
                self._mark_template(head, template)
                pieces.append(head)
                current = self._piece(current, template_end, current.end)
                continue

            inner = self._next_template_start(current.start, current.end)
            if inner is None:
                pieces.append(current)
                break
            pieces.append(self._piece(current, current.start, inner))
            current = self._piece(current, inner, current.end)
        return pieces

    def _mark_template(self, token: Token, template: str) -> None:
        token.text = template
        token.type = TEMPLATE_TOKEN_TYPE
        token.end = token.start + len(template)
        if self.original[token.start:token.end] != template:
            logger.error(f"Template replacement produced invalid token text range: {token!r}")

    def _next_template_start(self, start: int, end: int) -> Optional[int]:
        index = bisect.bisect_right(self._template_starts, start)
        if index < len(self._template_starts) and self._template_starts[index] < end:
            return self._template_starts[index]
        return None

    def _partition(self, tokens: list[Token]) -> list[Token]:
        result: list[Token] = []
        last: Optional[Token] = None
        last_end = 0
        for token in tokens:
            if token.end <= token.start:
                continue
            if token.start < last_end:
                if token.end <= last_end:
                    # covered by a restored template, e.g. its padding
                    continue
                token.text = self.original[last_end:token.end]
                token.start = last_end
            if token.start > last_end:
                # commas or inserted tails left a hole in the stream
                self._emit(result, self._gap(last_end, token.start, last))
            self._emit(result, token)
            last = result[-1]
            last_end = last.end

        if last_end < len(self.original):
            self._emit(result, self._gap(last_end, len(self.original), last))
        return result

    def _emit(self, result: list[Token], token: Token) -> None:
        # blanked text can land in a token of any type
        if self.context.blanked_spans and self.context.is_blanked(token.start, token.end):
            token.text = self.original[token.start:token.end]

        if token.type != WS_TYPE:
            result.append(token)
            return

        replacement = self.context.line_end_replacements.get(token.end)
        if replacement is None or len(token.text) < len(replacement.text):
            result.append(token)
            return

        if len(token.text) == len(replacement.text):
            token.text = replacement.text
            token.type = replacement.type
            result.append(token)
            return

        # split the whitespace run and add the replacement after it
        split_at = token.end - len(replacement.text)
        spliced = token.model_copy(update={
            "text": replacement.text,
            "type": replacement.type,
            "start": split_at,
        })
        token.text = token.text[:len(token.text) - len(replacement.text)]
        token.end = split_at
        result.append(token)
        result.append(spliced)

    def _piece(self, token: Token, start: int, end: int) -> Token:
        return Token(
            text=self.original[start:end],
            type=token.type,
            start=start,
            end=end,
            scope=token.scope,
            kind=token.kind,
        )

    def _gap(self, start: int, end: int, last: Optional[Token]) -> Token:
        text = self.original[start:end]
        return Token(
            text=text,
            type=PUNCTUATION_TYPE if "," in text else WS_TYPE,
            start=start,
            end=end,
            scope=last.scope if last else None,
            kind=last.kind if last else None,
        )

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def map_diagnostics(self, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        """Move diagnostic ranges to original columns and drop transformation artifacts."""
        ledger = self.context.shifts
        if ledger:
            buffer = self.context.transformed_buffer
            by_line = ledger.shifts_by_line(buffer)
            starts = line_starts(buffer)
            for diagnostic in diagnostics:
                self._unshift_position(diagnostic.from_, by_line, starts)
                self._unshift_position(diagnostic.to, by_line, starts)
        return DiagnosticFilter(self.context.environment).apply(diagnostics)

    @staticmethod
    def _unshift_position(position: Position, by_line: dict[int, list[Shift]], starts: list[int]) -> None:
        shifts = by_line.get(position.line)
        if shifts and position.line < len(starts):
            position.ch = ShiftLedger.unshift_column(shifts, starts[position.line], position.ch)

    # =========================================================================
    # Hints and parse errors
    # =========================================================================

    def map_hints(self, result: HintResult) -> HintResult:
        """
        Clean up a hint result.

        `from`/`to` are left alone: they are relative to the buffer the
        toolchain was queried with, at the already adjusted cursor.
        """
        if self.context.environment != "plain":
            result.hints = [hint for hint in result.hints if hint.text not in EMBEDDED_HINT_EXCLUSIONS]
        return result

    def map_parse_error(self, error: ToolchainParseError) -> ToolchainParseError:
        """Best-effort mapping of 1-based parse error locations."""
        ledger = self.context.shifts
        if not ledger:
            return error
        buffer = self.context.transformed_buffer
        for location in error.locations:
            line = location.get("line", 1) - 1
            column = location.get("column", 1) - 1
            location["column"] = ledger.to_original_column(buffer, line, column) + 1
        return error
