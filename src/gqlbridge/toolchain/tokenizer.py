"""
Tolerant editor tokenizer for GraphQL documents.

Unlike the graphql-core lexer, this tokenizer never raises: it is fed half
typed buffers on every keystroke. The lexical layer is a Pygments RegexLexer;
on top of its stream it emits a gap-free token list covering the whole
buffer, including whitespace runs, one token per line break, commas and
comments, with editor-style token types:

    keyword, def, property, attribute, atom, variable, meta, builtin,
    number, string, string-2, comment, punctuation, invalidchar, ws

A small grammar state machine (ParserState) runs alongside the lexer so
names can be classified, and so completion can ask "what is expected at this
offset?" via EditorTokenizer.state_at().
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, Optional

from pygments import token as pt
from pygments.lexer import RegexLexer

from ..core.types import Token


# =============================================================================
# Token types
# =============================================================================

WS = "ws"
PUNCTUATION = "punctuation"
COMMENT = "comment"
STRING = "string"
NUMBER = "number"
VARIABLE = "variable"
META = "meta"
KEYWORD = "keyword"
DEF = "def"
PROPERTY = "property"
ATTRIBUTE = "attribute"
ATOM = "atom"
BUILTIN = "builtin"
ENUM_VALUE = "string-2"
INVALID_CHAR = "invalidchar"
OPEN_QUOTE = "open_quote"
CLOSE_QUOTE = "close_quote"

LINE_BREAK = "\n"

# =============================================================================
# Grammar states
# =============================================================================

SELECTION_SET = "SelectionSet"
ARGUMENTS = "Arguments"
VARIABLE_DEFINITIONS = "VariableDefinitions"
OBJECT_VALUE = "ObjectValue"
LIST_VALUE = "ListValue"
FIELDS_DEFINITION = "FieldsDefinition"
ARGUMENTS_DEFINITION = "ArgumentsDefinition"

VALUE_FRAMES = {ARGUMENTS, OBJECT_VALUE, LIST_VALUE}

# What the next name is expected to be
EXPECT_DEF = "def"
EXPECT_ON = "on"
EXPECT_TYPE_CONDITION = "typeCondition"
EXPECT_TYPE = "type"
EXPECT_VALUE = "value"
EXPECT_SPREAD = "spread"

OPERATION_KEYWORDS = ("query", "mutation", "subscription")
EXECUTABLE_KEYWORDS = OPERATION_KEYWORDS + ("fragment",)
TYPE_SYSTEM_KEYWORDS = ("schema", "scalar", "type", "interface", "union", "enum", "input", "directive")
BODY_DEFINITIONS = {"schema", "type", "interface", "input", "enum"}
BUILTIN_VALUES = {"true", "false", "null"}

DEFINITION_KINDS = {
    "query": "OperationDefinition",
    "mutation": "OperationDefinition",
    "subscription": "OperationDefinition",
    "fragment": "FragmentDefinition",
    "schema": "SchemaDefinition",
    "directive": "DirectiveDefinition",
}

_NAME = r'[_A-Za-z][_0-9A-Za-z]*'


class GraphQLEditorLexer(RegexLexer):
    """
    Lexical layer of the editor tokenizer.

    Every character lands in some token: anything no other rule accepts
    becomes a single-character Error token. Unterminated strings stop at the
    line break, unterminated block strings run to the end of the buffer.
    """

    name = 'GraphQL (editor)'
    aliases = ['graphql-editor']
    filenames = []

    tokens = {
        'root': [
            (r'\n', pt.Whitespace),
            (r'[ \t\r\ufeff]+', pt.Whitespace),
            (r',', pt.Punctuation),
            (r'#[^\n]*', pt.Comment.Single),
            (r'"""[\s\S]*?(?:"""|\Z)', pt.String.Doc),
            (r'"(?:\\[\s\S]?|[^"\\\n])*"?', pt.String.Double),
            (r'\.\.\.', pt.Operator),
            (r'\$(?:' + _NAME + r')?', pt.Name.Variable),
            (r'@(?:' + _NAME + r')?', pt.Name.Decorator),
            (r'[!():=\[\]{}|&]', pt.Punctuation),
            (r'-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?', pt.Number),
            (_NAME, pt.Name),
            (r'.', pt.Error),
        ],
    }


@dataclass(frozen=True)
class Frame:
    """
    One open bracket.

    owner_kind/owner say what the bracket belongs to:
    - ("root", "query") for an operation's selection set
    - ("type", "Todo") for a fragment or inline fragment with a type condition
    - ("field", "user") for a field's selection set or arguments
    - ("directive", "include") for directive arguments
    - ("inline", None) for an inline fragment without a type condition
    """
    kind: str
    owner_kind: Optional[str] = None
    owner: Optional[str] = None
    # last field name of the enclosing selection set when the bracket opened
    saved_name: Optional[str] = None


@dataclass
class ParserState:
    """Grammar position after the tokens seen so far."""
    stack: list[Frame] = field(default_factory=list)
    definition: Optional[str] = None
    definition_name: Optional[str] = None
    fragment_type: Optional[str] = None
    expect: Optional[str] = None
    last_name: Optional[str] = None
    pending_type: Optional[str] = None
    pending_directive: Optional[str] = None

    @property
    def frame(self) -> Optional[Frame]:
        return self.stack[-1] if self.stack else None

    @property
    def scope(self) -> int:
        return len(self.stack)

    @property
    def kind(self) -> str:
        if self.stack:
            return self.stack[-1].kind
        if self.definition:
            return DEFINITION_KINDS.get(self.definition, "TypeDefinition")
        return "Document"

    def copy(self) -> ParserState:
        return replace(self, stack=list(self.stack))

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def consume_value(self) -> None:
        """A complete value was read; lists keep expecting values."""
        frame = self.frame
        self.expect = EXPECT_VALUE if frame and frame.kind == LIST_VALUE else None
        self.pending_directive = None

    def name(self, name: str, next_char: str) -> str:
        """Classify a name and advance the state."""
        expect, self.expect = self.expect, None
        self.pending_directive = None
        frame = self.frame

        if expect == EXPECT_DEF:
            self.definition_name = name
            if self.definition == "fragment":
                self.expect = EXPECT_ON
            return DEF
        if expect == EXPECT_ON:
            if name == "on":
                self.expect = EXPECT_TYPE_CONDITION
                return KEYWORD
            return INVALID_CHAR
        if expect == EXPECT_TYPE_CONDITION:
            if frame is None:
                self.fragment_type = name
            else:
                self.pending_type = name
            return ATOM
        if expect == EXPECT_SPREAD:
            if name == "on":
                self.expect = EXPECT_TYPE_CONDITION
                return KEYWORD
            # named fragment spread
            self.pending_type = None
            return DEF
        if expect == EXPECT_TYPE:
            return ATOM
        if expect == EXPECT_VALUE:
            self.consume_value()
            return BUILTIN if name in BUILTIN_VALUES else ENUM_VALUE

        if frame is None:
            return self._top_level_name(name)
        if frame.kind == SELECTION_SET:
            self.pending_type = None
            if next_char != ":":
                # not an alias
                self.last_name = name
            return PROPERTY
        if frame.kind in (ARGUMENTS, OBJECT_VALUE, ARGUMENTS_DEFINITION):
            if next_char == ":":
                self.last_name = name
                return ATTRIBUTE
            return BUILTIN if name in BUILTIN_VALUES else ENUM_VALUE
        if frame.kind == LIST_VALUE:
            self.consume_value()
            return BUILTIN if name in BUILTIN_VALUES else ENUM_VALUE
        if frame.kind == FIELDS_DEFINITION:
            if next_char in (":", "("):
                self.last_name = name
                return PROPERTY
            return ENUM_VALUE
        return ATOM

    def _top_level_name(self, name: str) -> str:
        if name in EXECUTABLE_KEYWORDS or name in TYPE_SYSTEM_KEYWORDS:
            self.definition = name
            self.definition_name = None
            self.fragment_type = None
            self.expect = None if name == "schema" else EXPECT_DEF
            return KEYWORD
        if name == "extend":
            return KEYWORD
        if self.definition and name in ("implements", "on"):
            self.expect = EXPECT_TYPE
            return KEYWORD
        if self.definition and name == "repeatable":
            return KEYWORD
        if self.definition:
            return ATOM
        return INVALID_CHAR

    def variable(self) -> str:
        expect, self.expect = self.expect, None
        self.pending_directive = None
        if expect == EXPECT_VALUE:
            self.consume_value()
        return VARIABLE

    def directive(self, name: str) -> str:
        expect, self.expect = self.expect, None
        if expect == EXPECT_DEF:
            # directive definition: 'directive @name'
            self.definition_name = name
            return META
        self.pending_directive = name or None
        return META

    def spread(self) -> None:
        self.expect = EXPECT_SPREAD
        # inline fragment until a fragment name says otherwise
        self.pending_type = ""
        self.pending_directive = None

    def punctuator(self, char: str) -> None:
        frame = self.frame
        expect, self.expect = self.expect, None
        directive, self.pending_directive = self.pending_directive, None

        if char == "{":
            self._open_brace(frame, expect)
        elif char == "}":
            self._close(SELECTION_SET, OBJECT_VALUE, FIELDS_DEFINITION)
        elif char == "(":
            self._open_paren(frame, directive)
        elif char == ")":
            self._close(ARGUMENTS, VARIABLE_DEFINITIONS, ARGUMENTS_DEFINITION)
        elif char == "[":
            if expect == EXPECT_TYPE:
                # list type, e.g. [ID!]
                self.expect = EXPECT_TYPE
            elif expect == EXPECT_VALUE or (frame and frame.kind in VALUE_FRAMES):
                self.stack.append(Frame(LIST_VALUE))
                self.expect = EXPECT_VALUE
        elif char == "]":
            if frame and frame.kind == LIST_VALUE:
                self.stack.pop()
                self.consume_value()
        elif char == ":":
            if frame and frame.kind in (ARGUMENTS, OBJECT_VALUE):
                self.expect = EXPECT_VALUE
            elif frame and frame.kind in (VARIABLE_DEFINITIONS, FIELDS_DEFINITION, ARGUMENTS_DEFINITION):
                self.expect = EXPECT_TYPE
        elif char == "=":
            if frame and frame.kind in (VARIABLE_DEFINITIONS, ARGUMENTS_DEFINITION):
                self.expect = EXPECT_VALUE
            elif frame is None and self.definition == "union":
                self.expect = EXPECT_TYPE
        elif char in "|&":
            if frame is None:
                self.expect = EXPECT_TYPE

    def _open_brace(self, frame: Optional[Frame], expect: Optional[str]) -> None:
        if expect == EXPECT_VALUE:
            self.stack.append(Frame(OBJECT_VALUE))
        elif frame is None:
            if self.definition in BODY_DEFINITIONS:
                self.stack.append(Frame(FIELDS_DEFINITION, self.definition, self.definition_name))
            elif self.definition == "fragment":
                self.stack.append(Frame(SELECTION_SET, "type", self.fragment_type))
            else:
                self.stack.append(Frame(SELECTION_SET, "root", self.definition or "query"))
        elif frame.kind == SELECTION_SET:
            if self.pending_type is not None:
                if self.pending_type:
                    self.stack.append(Frame(SELECTION_SET, "type", self.pending_type))
                else:
                    self.stack.append(Frame(SELECTION_SET, "inline"))
            else:
                self.stack.append(Frame(SELECTION_SET, "field", self.last_name))
        else:
            self.stack.append(Frame(OBJECT_VALUE))
        self.pending_type = None
        self.last_name = None

    def _open_paren(self, frame: Optional[Frame], directive: Optional[str]) -> None:
        if directive:
            self.stack.append(Frame(ARGUMENTS, "directive", directive, saved_name=self.last_name))
        elif frame is None:
            if self.definition in OPERATION_KEYWORDS:
                self.stack.append(Frame(VARIABLE_DEFINITIONS))
            else:
                self.stack.append(Frame(ARGUMENTS_DEFINITION, "directive", self.definition_name))
        elif frame.kind == SELECTION_SET:
            self.stack.append(Frame(ARGUMENTS, "field", self.last_name, saved_name=self.last_name))
        elif frame.kind == FIELDS_DEFINITION:
            self.stack.append(Frame(ARGUMENTS_DEFINITION, "field", self.last_name))
        else:
            self.stack.append(Frame(ARGUMENTS))

    def _close(self, *kinds: str) -> None:
        frame = self.frame
        if frame is None or frame.kind not in kinds:
            return
        owner = self.stack.pop()
        if not self.stack:
            if owner.kind in (SELECTION_SET, FIELDS_DEFINITION):
                self.definition = None
                self.definition_name = None
                self.fragment_type = None
            return
        if owner.kind == OBJECT_VALUE and self.stack[-1].kind in VALUE_FRAMES | {VARIABLE_DEFINITIONS}:
            self.consume_value()
        elif owner.kind == ARGUMENTS and self.stack[-1].kind == SELECTION_SET:
            # the field may still be followed by its selection set
            self.last_name = owner.saved_name


class EditorTokenizer:
    """
    Tokenizes GraphQL buffers for editor highlighting and completion.

    Usage:
        tokenizer = EditorTokenizer()
        tokens = tokenizer.tokenize("query { user { id } }")
        state = tokenizer.state_at(buffer, offset)
    """

    def __init__(self):
        self.lexer = GraphQLEditorLexer()

    def tokenize(self, buffer: str) -> list[Token]:
        """
        Tokenize the whole buffer.

        Returns:
            Tokens whose texts concatenate to `buffer`. Strings are split into
            open_quote, content and close_quote tokens.
        """
        state = ParserState()
        tokens: list[Token] = []
        for token_type, start, end in self._scan(buffer, state):
            text = buffer[start:end]
            if text == LINE_BREAK:
                tokens.append(Token(text=text, type=WS, start=start, end=end))
                continue
            token = Token(text=text, type=token_type, start=start, end=end, scope=state.scope, kind=state.kind)
            if token_type == STRING and not text.startswith('"""'):
                tokens.extend(_split_string(token))
            else:
                tokens.append(token)
        return tokens

    def state_at(self, buffer: str, offset: int) -> ParserState:
        """Grammar state after reading buffer[:offset]."""
        state = ParserState()
        for _ in self._scan(buffer[:offset], state):
            pass
        return state.copy()

    def _scan(self, buffer: str, state: ParserState) -> Iterator[tuple[str, int, int]]:
        for start, ttype, text in self.lexer.get_tokens_unprocessed(buffer):
            end = start + len(text)
            if ttype in pt.Whitespace:
                yield WS, start, end
            elif ttype in pt.Comment:
                yield COMMENT, start, end
            elif ttype in pt.String:
                state.consume_value()
                yield STRING, start, end
            elif ttype is pt.Operator:
                state.spread()
                yield PUNCTUATION, start, end
            elif ttype is pt.Name.Variable:
                yield state.variable(), start, end
            elif ttype is pt.Name.Decorator:
                yield state.directive(text[1:]), start, end
            elif ttype is pt.Punctuation:
                # commas are insignificant
                if text != ",":
                    state.punctuator(text)
                yield PUNCTUATION, start, end
            elif ttype is pt.Number:
                state.consume_value()
                yield NUMBER, start, end
            elif ttype is pt.Name:
                yield state.name(text, _next_char(buffer, end)), start, end
            else:
                yield INVALID_CHAR, start, end


def _next_char(buffer: str, offset: int) -> str:
    """First non-whitespace character at or after `offset`."""
    for char in buffer[offset:offset + 256]:
        if char not in " \t\r\n":
            return char
    return ""


def _split_string(token: Token) -> list[Token]:
    """Separate the quotes so the editor can auto-close them."""
    text = token.text
    pieces = [token.model_copy(update={"type": OPEN_QUOTE, "text": '"', "end": token.start + 1})]
    has_close_quote = len(text) > 1 and text.endswith('"') and not text.endswith('\\"')
    content_end = token.end - 1 if has_close_quote else token.end
    if content_end > token.start + 1:
        pieces.append(token.model_copy(update={
            "text": text[1:len(text) - 1] if has_close_quote else text[1:],
            "start": token.start + 1,
            "end": content_end,
        }))
    if has_close_quote:
        pieces.append(token.model_copy(update={"type": CLOSE_QUOTE, "text": '"', "start": token.end - 1}))
    return pieces


_tokenizer = EditorTokenizer()


def tokenize(buffer: str) -> list[Token]:
    """Convenience function for EditorTokenizer.tokenize()."""
    return _tokenizer.tokenize(buffer)
