"""
Document AST as plain JSON data.
"""

from __future__ import annotations

from typing import Any

from graphql import GraphQLError
from graphql import parse as parse_document
from graphql.utilities import ast_to_dict

from ..core.errors import ToolchainParseError


def parse(buffer: str) -> dict[str, Any]:
    """
    Parse `buffer` into a JSON-serializable AST without locations.

    Raises:
        ToolchainParseError: with the 1-based locations of the syntax error
    """
    try:
        document = parse_document(buffer, no_location=True)
    except GraphQLError as error:
        locations = [location.formatted for location in error.locations or []]
        raise ToolchainParseError(error.message, [dict(location) for location in locations])
    return ast_to_dict(document)
