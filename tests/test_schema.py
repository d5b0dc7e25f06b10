"""Tests for the schema store, project schema loading and documentation lookups."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import httpx
import pytest
from graphql import GraphQLSchema, build_schema, introspection_from_schema

from gqlbridge.core.errors import SchemaLoadError
from gqlbridge.schema import (
    ProjectConfig,
    ProjectSchemaLoader,
    SchemaStore,
    build_introspection_schema,
    field_documentation,
    get_schema_type,
    type_documentation,
)

HELLO_SDL = "type Query { hello: String }"


def introspection(sdl: str = HELLO_SDL) -> dict:
    return {"data": introspection_from_schema(build_schema(sdl))}


def write_project(project_dir: Path, config: dict, schema: dict | None = None) -> Path:
    if schema is not None:
        (project_dir / "schema.json").write_text(json.dumps(schema))
    config_path = project_dir / "graphql.config.json"
    config_path.write_text(json.dumps(config))
    return config_path


def touch_later(path: Path) -> None:
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + 10))


# =============================================================================
# Store
# =============================================================================


def test_store_starts_with_builtin_schema() -> None:
    """A new store serves the builtin schema at version 0."""
    store = SchemaStore()
    snapshot = store.snapshot()

    assert snapshot.schema is store.builtin
    assert (snapshot.version, snapshot.url) == (0, "")


def test_store_versions_every_change() -> None:
    """Replacing and resetting bump the version; a redundant reset does not."""
    store = SchemaStore()
    schema = build_schema(HELLO_SDL)

    store.replace(schema, "http://schema.test/graphql")
    assert (store.version, store.snapshot().url) == (1, "http://schema.test/graphql")

    store.reset()
    assert store.snapshot().schema is store.builtin
    assert store.version == 2

    store.reset()
    assert store.version == 2


def test_snapshot_is_unaffected_by_later_replace() -> None:
    """A captured snapshot keeps its schema after a reload."""
    store = SchemaStore()
    before = store.snapshot()
    store.replace(build_schema(HELLO_SDL))

    assert before.schema is store.builtin
    assert before.version == 0


# =============================================================================
# Project config
# =============================================================================


def test_project_config_reads_request_options() -> None:
    """Request settings and headers are read from the schema section."""
    config = ProjectConfig.from_dict({"schema": {"request": {
        "url": "http://schema.test/graphql",
        "method": "post",
        "postIntrospectionQuery": True,
        "options": {"headers": {"Authorization": "Bearer token"}},
    }}})

    assert config.file is None
    assert config.request.url == "http://schema.test/graphql"
    assert config.request.method == "POST"
    assert config.request.post_introspection_query is True
    assert config.request.headers == {"Authorization": "Bearer token"}


def test_project_config_without_schema_section() -> None:
    """Missing sections give an empty config."""
    config = ProjectConfig.from_dict({})

    assert (config.file, config.request) == (None, None)


def test_build_introspection_schema_rejects_bad_input() -> None:
    """Results without data or with a broken __schema raise SchemaLoadError."""
    with pytest.raises(SchemaLoadError):
        build_introspection_schema({"errors": []}, "schema.json")
    with pytest.raises(SchemaLoadError):
        build_introspection_schema({"data": {"__schema": "nope"}}, "schema.json")


# =============================================================================
# Project loader
# =============================================================================


def test_loader_reads_schema_file(tmp_path: Path) -> None:
    """A schema file named in graphql.config.json is loaded once until it changes."""
    config_path = write_project(tmp_path, {"schema": {"file": "schema.json"}}, introspection())
    store = SchemaStore()
    loader = ProjectSchemaLoader(store)
    loader.set_project_dir(str(tmp_path))

    assert asyncio.run(loader.refresh()) is True
    snapshot = store.snapshot()
    assert snapshot.version == 1
    assert snapshot.url == str(tmp_path / "schema.json")
    assert "hello" in snapshot.schema.query_type.fields

    assert asyncio.run(loader.refresh()) is False
    assert store.version == 1

    touch_later(config_path)
    assert asyncio.run(loader.refresh()) is True
    assert store.version == 2


def test_loader_reloads_when_schema_file_changes(tmp_path: Path) -> None:
    """A changed schema file is picked up; a broken one falls back to the builtin schema."""
    write_project(tmp_path, {"schema": {"file": "schema.json"}}, introspection())
    store = SchemaStore()
    loader = ProjectSchemaLoader(store)
    loader.set_project_dir(str(tmp_path))
    asyncio.run(loader.refresh())

    schema_path = tmp_path / "schema.json"
    schema_path.write_text("{}")
    touch_later(schema_path)

    assert asyncio.run(loader.refresh()) is True
    assert store.snapshot().schema is store.builtin
    assert store.version == 2


def test_loader_falls_back_on_missing_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """A missing schema file keeps the builtin schema and logs the failure."""
    write_project(tmp_path, {"schema": {"file": "missing.json"}})
    store = SchemaStore()
    loader = ProjectSchemaLoader(store)
    loader.set_project_dir(str(tmp_path))

    asyncio.run(loader.refresh())

    assert store.snapshot().schema is store.builtin
    assert "Unable to load schema" in caplog.text


def test_loader_without_config_uses_builtin(tmp_path: Path) -> None:
    """Projects without graphql.config.json use the builtin schema."""
    store = SchemaStore()
    loader = ProjectSchemaLoader(store)
    loader.set_project_dir(str(tmp_path))

    assert asyncio.run(loader.refresh()) is True
    assert store.snapshot().schema is store.builtin
    assert store.version == 0


def test_loader_without_project_dir_does_nothing() -> None:
    """No project directory means nothing to refresh."""
    loader = ProjectSchemaLoader(SchemaStore())
    loader.set_project_dir(None)

    assert asyncio.run(loader.refresh()) is False


def test_loader_posts_introspection_query(tmp_path: Path) -> None:
    """Remote schemas are fetched with the configured method and headers."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=introspection())

    url = "http://schema.test/graphql"
    write_project(tmp_path, {"schema": {"request": {
        "url": url,
        "postIntrospectionQuery": True,
        "options": {"headers": {"Authorization": "Bearer token"}},
    }}})
    store = SchemaStore()
    loader = ProjectSchemaLoader(store, transport=httpx.MockTransport(handler))
    loader.set_project_dir(str(tmp_path))

    asyncio.run(loader.refresh())

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert requests[0].headers["authorization"] == "Bearer token"
    assert "__schema" in json.loads(requests[0].content)["query"]
    assert store.snapshot().url == url
    assert "hello" in store.snapshot().schema.query_type.fields


def test_loader_falls_back_on_http_error(tmp_path: Path) -> None:
    """Non-200 responses keep the builtin schema."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    write_project(tmp_path, {"schema": {"request": {"url": "http://schema.test/graphql"}}})
    store = SchemaStore()
    loader = ProjectSchemaLoader(store, transport=httpx.MockTransport(handler))
    loader.set_project_dir(str(tmp_path))

    asyncio.run(loader.refresh())

    assert store.snapshot().schema is store.builtin
    assert store.snapshot().url == ""


# =============================================================================
# Documentation
# =============================================================================


def test_type_documentation(schema: GraphQLSchema) -> None:
    """Type docs list interfaces and fields with their arguments."""
    doc = type_documentation(schema, "User")

    assert doc["type"] == "User"
    assert doc["description"] == "A user of the Todo app"
    assert doc["interfaces"] == ["Node"]
    assert doc["implementations"] == []
    todos = next(field for field in doc["fields"] if field["name"] == "todos")
    assert todos["type"] == "TodoConnection"
    assert [arg["name"] for arg in todos["args"]] == ["status", "after", "first", "before", "last"]
    assert todos["args"][0]["type"] == "TodoStatus"


def test_interface_documentation_lists_implementations(schema: GraphQLSchema) -> None:
    """Interfaces report the object types implementing them."""
    doc = type_documentation(schema, "Node")

    assert set(doc["implementations"]) == {"User", "Todo", "Ship", "Faction"}


def test_unknown_type_has_no_documentation(schema: GraphQLSchema) -> None:
    """Unknown names give an empty result."""
    assert type_documentation(schema, "Nope") == {}
    assert field_documentation(schema, "User", "nope") == {}
    assert field_documentation(schema, None, "id") == {}


def test_field_documentation(schema: GraphQLSchema) -> None:
    """Field docs carry the type and description."""
    assert field_documentation(schema, "Query", "node") == {"type": "Node", "description": "Fetches an object given its ID"}


def test_root_type_names_fall_back_to_schema_roots() -> None:
    """'Query' finds the query root even when it is named differently."""
    schema = build_schema("schema { query: Root } type Root { a: Int }")

    assert get_schema_type(schema, "Query") is schema.query_type
    assert get_schema_type(schema, "Mutation") is None
