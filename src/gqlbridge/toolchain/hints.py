"""
Context-sensitive completion.

The editor tokenizer tells us what the grammar expects at the start of the
word under the cursor; the schema tells us which names are valid there.

Usage:
    result = hint("fragment F on __Schema { types }", Position(line=0, ch=25), schema)
    [h.text for h in result.hints]    # -> ['description', 'types', ...]
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLUnionType,
    get_named_type,
    is_composite_type,
    is_input_type,
)
from graphql.type.introspection import SchemaMetaFieldDef, TypeMetaFieldDef, TypeNameMetaFieldDef

from ..core.types import Hint, HintResult, Position
from ..core.utils import line_starts, word_bounds
from .tokenizer import (
    ARGUMENTS,
    EXPECT_DEF,
    EXPECT_ON,
    EXPECT_SPREAD,
    EXPECT_TYPE,
    EXPECT_TYPE_CONDITION,
    EXPECT_VALUE,
    EXECUTABLE_KEYWORDS,
    SELECTION_SET,
    VARIABLE_DEFINITIONS,
    EditorTokenizer,
    Frame,
    ParserState,
)

logger = logging.getLogger(__name__)

# Document-level completions; '{' starts an anonymous query
DOCUMENT_KEYWORDS = EXECUTABLE_KEYWORDS + ("{",)

RELAY_TYPE_NAMES = {"Node", "PageInfo!"}


def is_relay_type(graphql_type: Any) -> bool:
    """True for Relay plumbing: Node, PageInfo, connections, edges and Node implementations."""
    if graphql_type is None:
        return False
    type_name = str(graphql_type)
    if type_name in RELAY_TYPE_NAMES or "Edge]" in type_name or "Connection" in type_name:
        return True
    for interface in getattr(graphql_type, "interfaces", None) or []:
        if interface.name == "Node":
            return True
    return False


class HintProvider:
    """
    Computes completion candidates at a cursor.

    Usage:
        provider = HintProvider()
        result = provider.hint(buffer, Position(line=0, ch=16), schema)
    """

    def __init__(self, tokenizer: Optional[EditorTokenizer] = None):
        self.tokenizer = tokenizer or EditorTokenizer()

    def hint(self, buffer: str, cursor: Position, schema: GraphQLSchema) -> HintResult:
        """
        Completion candidates for the word at `cursor`.

        Returns:
            HintResult whose from/to span the word under the cursor, with
            hints filtered by the part of the word left of the cursor
        """
        starts = line_starts(buffer)
        line = min(max(cursor.line, 0), len(starts) - 1)
        line_text = _line_text(buffer, starts, line)
        ch = min(max(cursor.ch, 0), len(line_text))
        word_start, word_end = word_bounds(line_text, ch)
        prefix = line_text[word_start:ch].lower()

        state = self.tokenizer.state_at(buffer, starts[line] + word_start)
        before = line_text[word_start - 1] if word_start > 0 else ""
        if before == "@":
            candidates = self._directive_hints(schema)
        else:
            candidates = self._candidates(state, schema)

        hints = [candidate for candidate in candidates if candidate.text.lower().startswith(prefix)]
        return HintResult(
            hints=hints,
            from_=Position(line=line, ch=word_start),
            to=Position(line=line, ch=word_end),
        )

    def _candidates(self, state: ParserState, schema: GraphQLSchema) -> list[Hint]:
        expect = state.expect
        frame = state.frame

        if expect == EXPECT_DEF:
            return []
        if expect in (EXPECT_ON, EXPECT_SPREAD):
            return [Hint(text="on")]
        if expect == EXPECT_TYPE_CONDITION:
            parent = resolve_selection_type(state.stack, schema) if frame else None
            return self._type_condition_hints(schema, parent)
        if expect == EXPECT_TYPE:
            return self._input_type_hints(schema)

        if frame is None:
            if state.definition is None:
                return [Hint(text=keyword) for keyword in DOCUMENT_KEYWORDS]
            return []
        if frame.kind == SELECTION_SET:
            return self._field_hints(schema, resolve_selection_type(state.stack, schema))
        if frame.kind == ARGUMENTS:
            arguments = self._arguments(state.stack, schema)
            if expect == EXPECT_VALUE:
                argument = arguments.get(state.last_name or "")
                return self._value_hints(argument.type if argument else None)
            return [
                Hint(
                    text=name,
                    type=str(argument.type),
                    description=argument.description,
                    relay=is_relay_type(argument.type),
                )
                for name, argument in arguments.items()
            ]
        if frame.kind == VARIABLE_DEFINITIONS and expect == EXPECT_VALUE:
            return self._value_hints(None)
        return []

    # =========================================================================
    # Candidate lists
    # =========================================================================

    @staticmethod
    def _field_hints(schema: GraphQLSchema, parent: Any) -> list[Hint]:
        if not isinstance(parent, (GraphQLObjectType, GraphQLInterfaceType, GraphQLUnionType)):
            return []
        hints = []
        fields = dict(getattr(parent, "fields", {}) or {})
        if parent is schema.query_type:
            fields["__schema"] = SchemaMetaFieldDef
            fields["__type"] = TypeMetaFieldDef
        fields["__typename"] = TypeNameMetaFieldDef
        for name, field in fields.items():
            hints.append(Hint(
                text=name,
                type=str(field.type),
                description=field.description,
                relay=is_relay_type(field.type),
            ))
        return hints

    @staticmethod
    def _type_condition_hints(schema: GraphQLSchema, parent: Any) -> list[Hint]:
        if isinstance(parent, (GraphQLInterfaceType, GraphQLUnionType)):
            types = [parent] + list(schema.get_possible_types(parent))
        elif parent is not None and is_composite_type(parent):
            types = [parent]
        else:
            types = [t for t in schema.type_map.values() if is_composite_type(t)]
        return [
            Hint(text=t.name, type=t.name, description=t.description, relay=is_relay_type(t))
            for t in types
        ]

    @staticmethod
    def _input_type_hints(schema: GraphQLSchema) -> list[Hint]:
        return [
            Hint(text=t.name, type=t.name, description=t.description)
            for t in schema.type_map.values()
            if is_input_type(t) and not t.name.startswith("__")
        ]

    @staticmethod
    def _directive_hints(schema: GraphQLSchema) -> list[Hint]:
        return [Hint(text=directive.name, description=directive.description) for directive in schema.directives]

    @staticmethod
    def _value_hints(graphql_type: Any) -> list[Hint]:
        named = get_named_type(graphql_type) if graphql_type is not None else None
        if isinstance(named, GraphQLEnumType):
            return [
                Hint(text=name, type=named.name, description=value.description)
                for name, value in named.values.items()
            ]
        if named is not None and named.name != "Boolean":
            return []
        return [Hint(text="true", type="Boolean"), Hint(text="false", type="Boolean")]

    def _arguments(self, stack: list[Frame], schema: GraphQLSchema) -> dict[str, Any]:
        frame = stack[-1]
        if frame.owner_kind == "directive":
            directive = schema.get_directive(frame.owner or "")
            return dict(directive.args) if directive else {}
        if frame.owner_kind == "field":
            parent = resolve_selection_type(stack[:-1], schema)
            field = _get_field(schema, parent, frame.owner or "")
            return dict(field.args) if field is not None and hasattr(field, "args") else {}
        return {}


# =============================================================================
# Type resolution
# =============================================================================


def resolve_selection_type(stack: list[Frame], schema: GraphQLSchema) -> Any:
    """
    Named type of the innermost selection set in `stack`.

    Walks the selection sets from the outermost one: roots and type
    conditions set the type, fields move to the field's named type, inline
    fragments without a type condition keep it.
    """
    current: Any = None
    for frame in stack:
        if frame.kind != SELECTION_SET:
            continue
        if frame.owner_kind == "root":
            current = _root_type(schema, frame.owner)
        elif frame.owner_kind == "type":
            current = schema.get_type(frame.owner) if frame.owner else None
        elif frame.owner_kind == "field":
            field = _get_field(schema, current, frame.owner or "")
            current = get_named_type(field.type) if field is not None else None
        if current is None and frame.owner_kind != "inline":
            logger.debug(f"Unable to resolve selection type for {frame!r}")
    return current


def _root_type(schema: GraphQLSchema, operation: Optional[str]) -> Any:
    if operation == "mutation":
        return schema.mutation_type
    if operation == "subscription":
        return schema.subscription_type
    return schema.query_type


def _get_field(schema: GraphQLSchema, parent: Any, name: str) -> Any:
    if parent is None or not name:
        return None
    if name == "__typename":
        return TypeNameMetaFieldDef
    if parent is schema.query_type:
        if name == "__schema":
            return SchemaMetaFieldDef
        if name == "__type":
            return TypeMetaFieldDef
    if isinstance(parent, (GraphQLObjectType, GraphQLInterfaceType, GraphQLInputObjectType)):
        return parent.fields.get(name)
    return None


def _line_text(buffer: str, starts: list[int], line: int) -> str:
    end = starts[line + 1] - 1 if line + 1 < len(starts) else len(buffer)
    return buffer[starts[line]:end]


# =============================================================================
# Token documentation
# =============================================================================


def token_documentation(buffer: str, cursor: Position, schema: GraphQLSchema, provider: Optional[HintProvider] = None) -> dict[str, Any]:
    """
    Type and description of the name under the cursor.

    The name is looked up among the completions offered at its start, so it
    resolves the same way a hint for it would.

    Returns:
        {"type": ..., "description": ...} or {} when nothing matches
    """
    provider = provider or _provider
    starts = line_starts(buffer)
    line = min(max(cursor.line, 0), len(starts) - 1)
    line_text = _line_text(buffer, starts, line)
    word_start, word_end = word_bounds(line_text, cursor.ch)
    name = line_text[word_start:word_end]
    if not name:
        return {}

    result = provider.hint(buffer, Position(line=line, ch=word_start), schema)
    for candidate in result.hints:
        if candidate.text == name and candidate.type:
            doc: dict[str, Any] = {"type": candidate.type}
            if candidate.description is not None:
                doc["description"] = candidate.description
            return doc
    return {}


_provider = HintProvider()


def hint(buffer: str, cursor: Position, schema: GraphQLSchema) -> HintResult:
    """Convenience function for HintProvider.hint()."""
    return _provider.hint(buffer, cursor, schema)
