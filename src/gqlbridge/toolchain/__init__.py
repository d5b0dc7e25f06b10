"""
GraphQL toolchain adapters.

The transformation engine hands these functions plain GraphQL and gets back
tokens, diagnostics, hints and ASTs in transformed-buffer coordinates.
"""

from .ast import parse
from .hints import HintProvider, hint, is_relay_type, resolve_selection_type, token_documentation
from .linter import SchemaLinter, lint
from .sdl import SchemaTokenizer, schema_tokens_and_ast
from .tokenizer import EditorTokenizer, ParserState, tokenize

__all__ = [
    "parse",
    "HintProvider",
    "hint",
    "is_relay_type",
    "resolve_selection_type",
    "token_documentation",
    "SchemaLinter",
    "lint",
    "SchemaTokenizer",
    "schema_tokens_and_ast",
    "EditorTokenizer",
    "ParserState",
    "tokenize",
]
