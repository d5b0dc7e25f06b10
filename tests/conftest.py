"""Shared fixtures for the gqlbridge test suite."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from graphql import GraphQLSchema

from gqlbridge.schema import build_builtin_schema
from gqlbridge.server import LanguageServer
from gqlbridge.service import LanguageService


@pytest.fixture(scope="session")
def schema() -> GraphQLSchema:
    return build_builtin_schema()


@pytest.fixture
def service() -> LanguageService:
    return LanguageService()


@pytest.fixture
def server() -> LanguageServer:
    return LanguageServer()


@pytest.fixture
def client(server: LanguageServer) -> TestClient:
    return TestClient(server.app)
