"""
Schema-aware linting via graphql-core parse + validate.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from graphql import GraphQLError, GraphQLSchema, parse, validate

from ..core.types import Diagnostic, Position
from ..core.utils import line_starts, position_to_offset

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r'[$@]?[_A-Za-z][_0-9A-Za-z]*|\.\.\.')

ERROR = "error"


class SchemaLinter:
    """
    Produces editor diagnostics for a GraphQL document.

    Usage:
        linter = SchemaLinter()
        diagnostics = linter.lint("query { nope }", schema)
    """

    def lint(self, buffer: str, schema: GraphQLSchema) -> list[Diagnostic]:
        """
        Parse and validate `buffer` against `schema`.

        A syntax error yields a single diagnostic; validation is only run on
        documents that parse. Diagnostics with identical ranges are reported
        once (the first one wins).
        """
        if not buffer.strip():
            return []

        try:
            document = parse(buffer)
        except GraphQLError as error:
            return self._unique(self._to_diagnostics(buffer, error))

        diagnostics: list[Diagnostic] = []
        for error in validate(schema, document):
            diagnostics.extend(self._to_diagnostics(buffer, error))
        return self._unique(diagnostics)

    @staticmethod
    def _to_diagnostics(buffer: str, error: GraphQLError) -> list[Diagnostic]:
        starts = line_starts(buffer)
        locations = error.locations or []
        if not locations:
            logger.debug(f"GraphQL error without location: {error.message}")
            return [Diagnostic(from_=Position(line=0, ch=0), to=Position(line=0, ch=1), message=error.message)]

        diagnostics = []
        for location in locations:
            line, ch = location.line - 1, location.column - 1
            diagnostics.append(Diagnostic(
                from_=Position(line=line, ch=ch),
                to=Position(line=line, ch=ch + _highlight_length(buffer, starts, line, ch)),
                message=error.message,
                severity=ERROR,
            ))
        return diagnostics

    @staticmethod
    def _unique(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        seen: set[tuple[int, int, int, int]] = set()
        unique = []
        for diagnostic in diagnostics:
            key = (diagnostic.from_.line, diagnostic.from_.ch, diagnostic.to.line, diagnostic.to.ch)
            if key in seen:
                continue
            seen.add(key)
            unique.append(diagnostic)
        return unique


def _highlight_length(buffer: str, starts: list[int], line: int, ch: int) -> int:
    """Length of the name (or spread) at the location, at least one character."""
    offset = position_to_offset(starts, line, ch)
    match: Optional[re.Match] = _NAME_PATTERN.match(buffer, offset)
    if match:
        return match.end() - offset
    return 1


_linter = SchemaLinter()


def lint(buffer: str, schema: GraphQLSchema) -> list[Diagnostic]:
    """Convenience function for SchemaLinter.lint()."""
    return _linter.lint(buffer, schema)
