"""
Schema (SDL) buffer tokens and AST.

The graphql-core lexer only returns significant tokens, so whitespace (and
comments, which the lexer skips) is filled in to keep the token list
covering the whole buffer. Names are classified by the AST node they name:

    type Todo implements Node { id: ID! }
    ^kw  ^def ^kw        ^atom  ^prop ^atom
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from graphql import GraphQLError, Source, parse
from graphql.language import Lexer, Node, NameNode, TokenKind, Visitor, visit
from graphql.utilities import ast_to_dict

from ..core.types import Token

logger = logging.getLogger(__name__)

SCHEMA_KEYWORDS = {
    "type", "interface", "union", "scalar", "enum", "implements", "input",
    "schema", "extend", "directive", "repeatable", "on",
    "query", "mutation", "subscription",
}
BUILTIN_VALUES = {"true", "false", "null"}

NUMBER_KINDS = {TokenKind.INT, TokenKind.FLOAT}
STRING_KINDS = {TokenKind.STRING, TokenKind.BLOCK_STRING}


class _NameLocator(Visitor):
    """Maps the start offset of every name to (named node, parent node)."""

    def __init__(self):
        super().__init__()
        self.ancestors: list[Node] = []
        self.names: dict[int, tuple[Node, Optional[Node]]] = {}

    def enter(self, node, *_args):
        parent = self.ancestors[-1] if self.ancestors else None
        self.ancestors.append(node)
        name = getattr(node, "name", None)
        if isinstance(name, NameNode) and name.loc is not None:
            self.names[name.loc.start] = (node, parent)

    def leave(self, node, *_args):
        self.ancestors.pop()


class SchemaTokenizer:
    """
    Tokenizes schema buffers with the graphql-core lexer.

    Usage:
        result = SchemaTokenizer().tokens_and_ast(sdl)
        result["tokens"], result["ast"]
    """

    def tokens_and_ast(self, buffer: str) -> dict[str, Any]:
        ast: dict[str, Any] = {"kind": "document", "definitions": []}
        names: dict[int, tuple[Node, Optional[Node]]] = {}
        try:
            document = parse(buffer)
        except GraphQLError as error:
            logger.warning(f"Unable to build schema AST: {error.message}")
        else:
            locator = _NameLocator()
            visit(document, locator)
            names = locator.names
            ast = ast_to_dict(document, locations=True)

        return {"tokens": self._tokens(buffer, names), "ast": ast}

    def _tokens(self, buffer: str, names: dict[int, tuple[Node, Optional[Node]]]) -> list[Token]:
        tokens: list[Token] = []
        position = 0
        lexer = Lexer(Source(buffer, "schema"))
        try:
            token = lexer.advance()
            while token.kind != TokenKind.EOF:
                if position < token.start:
                    tokens.append(_ws(buffer, position, token.start))
                token_type, kind = _classify(token, names)
                tokens.append(Token(
                    text=buffer[token.start:token.end],
                    type=token_type,
                    start=token.start,
                    end=token.end,
                    kind=kind,
                ))
                position = token.end
                token = lexer.advance()
        except GraphQLError as error:
            # the rest of the buffer cannot be lexed
            logger.debug(f"Schema lexing stopped at {position}: {error.message}")
            if position < len(buffer):
                tokens.append(Token(
                    text=buffer[position:],
                    type="invalidchar",
                    start=position,
                    end=len(buffer),
                ))
                position = len(buffer)

        if position < len(buffer):
            tokens.append(_ws(buffer, position, len(buffer)))
        return tokens


def _ws(buffer: str, start: int, end: int) -> Token:
    return Token(text=buffer[start:end], type="ws", start=start, end=end)


def _classify(token: Any, names: dict[int, tuple[Node, Optional[Node]]]) -> tuple[str, Optional[str]]:
    if token.kind == TokenKind.NAME:
        located = names.get(token.start)
        if located is not None:
            node, parent = located
            return _name_type(node, parent), _pascal_case(node.kind)
        if token.value in SCHEMA_KEYWORDS:
            return "keyword", None
        if token.value in BUILTIN_VALUES:
            return "builtin", None
        return "", None
    if token.kind in STRING_KINDS:
        return "string", None
    if token.kind in NUMBER_KINDS:
        return "number", None
    return "punctuation", None


def _name_type(node: Node, parent: Optional[Node]) -> str:
    if node.kind == "field_definition":
        return "property"
    if node.kind == "named_type":
        return "atom"
    if node.kind == "input_value_definition":
        if parent is not None and parent.kind == "field_definition":
            return "attribute"
        return "property"
    return "def"


def _pascal_case(kind: str) -> str:
    return "".join(part.capitalize() for part in kind.split("_"))


_schema_tokenizer = SchemaTokenizer()


def schema_tokens_and_ast(buffer: str) -> dict[str, Any]:
    """Convenience function for SchemaTokenizer.tokens_and_ast()."""
    return _schema_tokenizer.tokens_and_ast(buffer)
