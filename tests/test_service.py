"""Tests for the command dispatcher."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from graphql import build_schema, introspection_from_schema

from gqlbridge.core.types import LanguageRequest
from gqlbridge.service import TEXT_MEDIA_TYPE, LanguageService, ServiceResponse

RELAY_TEMPLATE = "${Todo.getFragment('todo')}"


def run(service: LanguageService, **fields) -> ServiceResponse:
    return asyncio.run(service.handle(LanguageRequest(**fields)))


def test_get_tokens_covers_original_buffer(service: LanguageService) -> None:
    """Tokens are reported against the buffer the editor sent."""
    buffer = "fragment on Todo {\n  id, " + RELAY_TEMPLATE + "\n}"
    response = run(service, command="getTokens", buffer=buffer, env="relay")

    tokens = response.content["tokens"]
    assert "".join(token["text"] for token in tokens) == buffer
    assert {"text": RELAY_TEMPLATE, "type": "template-fragment"}.items() <= tokens[-3].items()
    assert "scope" not in tokens[-2]


def test_get_hints_in_relay_fragment(service: LanguageService) -> None:
    """Hints inside a shorthand fragment use the fragment's type."""
    response = run(service, command="getHints", buffer="fragment on Todo { }", line=0, ch=19, relay=True)

    texts = [item["text"] for item in response.content["hints"]]
    assert texts[:3] == ["id", "text", "complete"]
    assert response.content["from"] == {"line": 0, "ch": 24}
    assert response.content["to"] == {"line": 0, "ch": 24}


def test_get_hints_strips_brace_for_templates(service: LanguageService) -> None:
    """Embedded environments do not offer '{' at document level."""
    relay = run(service, command="getHints", buffer="", env="relay")
    plain = run(service, command="getHints", buffer="")

    assert "{" not in [item["text"] for item in relay.content["hints"]]
    assert "{" in [item["text"] for item in plain.content["hints"]]


def test_get_token_documentation(service: LanguageService) -> None:
    """Documentation is resolved in the transformed buffer."""
    response = run(service, command="getTokenDocumentation", buffer="fragment on Todo { text }", ch=20, env="relay")

    assert response.content == {"type": "String"}


def test_get_annotations(service: LanguageService) -> None:
    """Annotations point at original columns and use the wire field names."""
    response = run(service, command="getAnnotations", buffer="fragment on Todo { nope }", env="relay")

    annotations = response.content["annotations"]
    assert len(annotations) == 1
    assert annotations[0]["from"] == {"line": 0, "ch": 19}
    assert annotations[0]["to"] == {"line": 0, "ch": 23}
    assert annotations[0]["severity"] == "error"


def test_get_ast(service: LanguageService) -> None:
    """Valid buffers give the AST, invalid ones an error with mapped locations."""
    ast = run(service, command="getAST", buffer="fragment on Todo { id }", env="relay").content
    assert ast["definitions"][0]["kind"] == "fragment_definition"

    error = run(service, command="getAST", buffer="fragment on Todo { id", env="relay").content
    assert error["error"].startswith("Syntax Error")
    assert error["locations"] == [{"line": 1, "column": 22}]


def test_schema_commands(service: LanguageService) -> None:
    """Schema commands read the current snapshot."""
    schema = run(service, command="getSchema")
    assert schema.media_type == TEXT_MEDIA_TYPE
    assert "type Query {" in schema.content

    versioned = run(service, command="getSchemaWithVersion").content
    assert (versioned["queryType"], versioned["mutationType"], versioned["subscriptionType"]) == ("Query", "Mutation", "")
    assert (versioned["version"], versioned["url"]) == (0, "")

    assert run(service, command="getTypeDocumentation", type="Todo").content["interfaces"] == ["Node"]
    assert run(service, command="getFieldDocumentation", type="Todo", field="text").content == {
        "type": "String",
        "description": None,
    }


def test_get_schema_tokens_and_ast(service: LanguageService) -> None:
    """Schema buffers are tokenized as-is."""
    content = run(service, command="getSchemaTokensAndAST", buffer="scalar Date").content

    assert [token["type"] for token in content["tokens"]] == ["keyword", "ws", "def"]
    assert content["ast"]["definitions"][0]["kind"] == "scalar_type_definition"


def test_unknown_command(service: LanguageService) -> None:
    """Unknown commands are answered with an error message."""
    response = run(service, command="getNothing")

    assert response.content == {"error": 'Unknown command "getNothing"'}


def test_set_project_dir_loads_project_schema(service: LanguageService, tmp_path: Path) -> None:
    """Switching projects loads that project's schema."""
    introspection = {"data": introspection_from_schema(build_schema("type Query { hello: String }"))}
    (tmp_path / "schema.json").write_text(json.dumps(introspection))
    (tmp_path / "graphql.config.json").write_text(json.dumps({"schema": {"file": "schema.json"}}))

    response = run(service, command="setProjectDir", projectDir=str(tmp_path))
    assert response.content == {"projectDir": str(tmp_path)}

    versioned = run(service, command="getSchemaWithVersion").content
    assert versioned["version"] == 1
    assert "hello: String" in versioned["schema"]

    hints = run(service, command="getHints", buffer="{  }", ch=2).content
    assert [item["text"] for item in hints["hints"]][0] == "hello"


def test_environment_resolution() -> None:
    """Explicit env wins, then the relay flag, then the service default."""
    service = LanguageService(default_env="apollo")

    assert service.environment_for(LanguageRequest()) == "apollo"
    assert service.environment_for(LanguageRequest(relay=True)) == "relay"
    assert service.environment_for(LanguageRequest(env="lokka", relay=True)) == "lokka"
    assert service.environment_for(LanguageRequest(env="bogus")) == "plain"


def test_request_environment_ignores_service_default() -> None:
    """On its own a request resolves its env and relay flag against "plain"."""
    assert LanguageRequest().environment == "plain"
    assert LanguageRequest(relay=True).environment == "relay"
    assert LanguageRequest(env="graphqlTemplate").environment == "graphqlTemplate"
