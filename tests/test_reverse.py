"""Tests for mapping toolchain output back onto the original buffer."""

from __future__ import annotations

import pytest
from graphql import GraphQLSchema

from gqlbridge.core.errors import ToolchainParseError
from gqlbridge.core.types import Hint, HintResult
from gqlbridge.toolchain import lint, parse, tokenize
from gqlbridge.transform import TEMPLATE_TOKEN_TYPE, ResponseReverseMapper, reverse_map, transform

RELAY_TEMPLATE = "${Todo.getFragment('todo')}"


def mapped_tokens(buffer: str, environment: str):
    forward = transform("getTokens", buffer, environment=environment)
    return reverse_map("getTokens", tokenize(forward.transformed_buffer), forward.context)


def assert_partition(tokens, buffer: str) -> None:
    assert "".join(token.text for token in tokens) == buffer
    position = 0
    for token in tokens:
        assert token.start == position
        assert token.end == token.start + len(token.text)
        position = token.end
    assert position == len(buffer)


# =============================================================================
# Tokens
# =============================================================================


def test_relay_tokens_restore_template_and_drop_inserted_name() -> None:
    """The placeholder token carries the template text; the fragment name disappears."""
    buffer = "fragment on Todo { id, " + RELAY_TEMPLATE + ", }"
    tokens = mapped_tokens(buffer, "relay")

    assert_partition(tokens, buffer)
    assert "____" not in [token.text for token in tokens]

    templates = [token for token in tokens if token.type == TEMPLATE_TOKEN_TYPE]
    assert len(templates) == 1
    assert (templates[0].text, templates[0].start, templates[0].end) == (RELAY_TEMPLATE, 23, 50)
    assert templates[0].scope == 1
    assert templates[0].kind == "SelectionSet"

    on = next(token for token in tokens if token.text == "on")
    assert (on.type, on.start) == ("keyword", 9)


def test_short_templates_in_comment_are_split_out() -> None:
    """Templates swallowed by a comment still come back as separate template tokens."""
    buffer = "{ nodes(first: ${10}, foo: ${100}) { id } }"
    tokens = mapped_tokens(buffer, "relay")

    assert_partition(tokens, buffer)
    templates = [token for token in tokens if token.type == TEMPLATE_TOKEN_TYPE]
    assert [(token.text, token.start) for token in templates] == [("${10}", 15), ("${100}", 27)]


def test_apollo_blanked_template_text_is_kept_as_whitespace() -> None:
    """Top-level Apollo templates produce no template token but keep their text."""
    buffer = "query { viewer { ...TodoFragment } }\n${TodoFragment}\n"
    tokens = mapped_tokens(buffer, "apollo")

    assert_partition(tokens, buffer)
    assert not [token for token in tokens if token.type == TEMPLATE_TOKEN_TYPE]
    blanked = next(token for token in tokens if token.start == 37)
    assert (blanked.text, blanked.type) == ("${TodoFragment}", "ws")


def test_lokka_spread_dots_come_back_as_keyword() -> None:
    """The blanked '...' is spliced back in front of the template token."""
    buffer = "{ viewer { ...${fragment} } }"
    tokens = mapped_tokens(buffer, "lokka")

    assert_partition(tokens, buffer)
    dots = next(token for token in tokens if token.start == 11)
    assert (dots.text, dots.type) == ("...", "keyword")
    template = next(token for token in tokens if token.start == 14)
    assert (template.text, template.type) == ("${fragment}", TEMPLATE_TOKEN_TYPE)


def test_multiline_relay_buffer_round_trips() -> None:
    """Shifts on several lines and templates between them keep the partition exact."""
    buffer = (
        "fragment on User {\n"
        "  todos(first: 10) {\n"
        "    edges { node { " + RELAY_TEMPLATE + " } }\n"
        "  }\n"
        "}\n"
        "fragment on Todo { text, complete }"
    )
    tokens = mapped_tokens(buffer, "relay")

    assert_partition(tokens, buffer)
    assert [token.text for token in tokens if token.type == TEMPLATE_TOKEN_TYPE] == [RELAY_TEMPLATE]


def test_apollo_blanked_template_in_comment_keeps_its_text() -> None:
    """A top-level template inside a comment is restored into the comment token."""
    buffer = "# ${x}"
    tokens = mapped_tokens(buffer, "apollo")

    assert_partition(tokens, buffer)
    assert [(token.text, token.type) for token in tokens] == [("# ${x}", "comment")]


def test_apollo_blanked_template_in_string_keeps_its_text() -> None:
    """A top-level template inside a string is restored into the string content."""
    buffer = '"${x}"'
    tokens = mapped_tokens(buffer, "apollo")

    assert_partition(tokens, buffer)
    assert [(token.text, token.type) for token in tokens] == [
        ('"', "open_quote"),
        ("${x}", "string"),
        ('"', "close_quote"),
    ]


EDGE_CASE_BUFFERS = [
    "",
    "# ${x}\n{ a }",
    '"${x}" { b }',
    '{ a(b: "${x}") }',
    "fragment on Todo { id }\nfragment on User { name }\n",
    "fragment onlyThis on Todo { id }",
    "{ viewer { ...${fragment} } }",
    "{ a ${unterminated\n b }",
    "{ a } ${",
    "query { viewer { ...TodoFragment } }\n${TodoFragment}\n",
    "{ nodes(first: ${10}) { ...${Todo.getFragment('todo')} } }",
    "fragment on User {\n  # ${note}\n  todos { ${x} }\n}",
]


@pytest.mark.parametrize("buffer", EDGE_CASE_BUFFERS)
@pytest.mark.parametrize("environment", ["relay", "apollo", "lokka", "graphqlTemplate", "plain"])
def test_tokens_partition_the_original_buffer(environment: str, buffer: str) -> None:
    """Mapped token texts rebuild the buffer and every token starts where the previous one ended."""
    tokens = mapped_tokens(buffer, environment)

    assert_partition(tokens, buffer)


@pytest.mark.parametrize("environment", ["relay", "apollo", "lokka", "graphqlTemplate", "plain"])
def test_plain_buffer_tokens_are_untouched(environment: str) -> None:
    """Without any transformation the mapped tokens equal the toolchain tokens."""
    buffer = "query Q { viewer { id, name } }"
    expected = [(token.text, token.type) for token in tokenize(buffer)]

    tokens = mapped_tokens(buffer, environment)

    assert [(token.text, token.type) for token in tokens] == expected


def test_empty_buffer_has_no_tokens() -> None:
    """Nothing to map for an empty buffer."""
    assert mapped_tokens("", "relay") == []


# =============================================================================
# Diagnostics, hints and parse errors
# =============================================================================


def test_diagnostic_columns_are_unshifted(schema: GraphQLSchema) -> None:
    """Errors after the inserted fragment name point at the original columns."""
    buffer = "fragment on Todo { nope }"
    forward = transform("getAnnotations", buffer, environment="relay")
    diagnostics = reverse_map("getAnnotations", lint(forward.transformed_buffer, schema), forward.context)

    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.message.startswith("Cannot query field 'nope' on type 'Todo'.")
    assert (diagnostic.from_.line, diagnostic.from_.ch, diagnostic.to.ch) == (0, 19, 23)
    assert buffer[diagnostic.from_.ch:diagnostic.to.ch] == "nope"


def test_relay_directive_and_fragment_name_are_not_reported(schema: GraphQLSchema) -> None:
    """Transformation artifacts and the @relay directive produce no diagnostics."""
    buffer = "fragment on Todo @relay(plural: true) { id, " + RELAY_TEMPLATE + " }"
    forward = transform("getAnnotations", buffer, environment="relay")
    diagnostics = reverse_map("getAnnotations", lint(forward.transformed_buffer, schema), forward.context)

    assert diagnostics == []


def test_embedded_hints_drop_opening_brace() -> None:
    """Tagged templates already provide the document braces."""
    def hints_for(environment: str) -> list[str]:
        result = HintResult(hints=[Hint(text="{"), Hint(text="query")])
        context = transform("getHints", "", environment=environment).context
        return [item.text for item in reverse_map("getHints", result, context).hints]

    assert hints_for("relay") == ["query"]
    assert hints_for("plain") == ["{", "query"]


def test_parse_error_column_is_unshifted() -> None:
    """Parse error locations move back past the inserted name."""
    buffer = "fragment on Todo { id"
    forward = transform("getAST", buffer, environment="relay")

    with pytest.raises(ToolchainParseError) as excinfo:
        parse(forward.transformed_buffer)
    error = reverse_map("getAST", excinfo.value, forward.context)

    assert error.locations == [{"line": 1, "column": 22}]


def test_unrelated_results_pass_through() -> None:
    """Results of commands that need no mapping are returned as they are."""
    context = transform("getTokenDocumentation", "fragment on Todo { id }", environment="relay").context
    result = {"type": "ID!"}

    assert ResponseReverseMapper(context).reverse_map("getTokenDocumentation", result) is result
