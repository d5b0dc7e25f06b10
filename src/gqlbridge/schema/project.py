"""
Project schema loading from graphql.config.json.

Supported config shapes:

    {"schema": {"file": "schema.json"}}

    {"schema": {"request": {
        "url": "http://localhost:4000/graphql",
        "method": "GET",
        "postIntrospectionQuery": true,
        "options": {"headers": {"Authorization": "..."}}
    }}}

Both sources must yield introspection JSON ({"data": {"__schema": ...}}).
The loader checks the config (and schema file) modification times before
each request and reloads only when they changed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
from graphql import GraphQLError, GraphQLSchema, build_client_schema, get_introspection_query

from ..core.errors import SchemaLoadError
from .store import SchemaStore

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "graphql.config.json"


@dataclass
class SchemaRequestConfig:
    """Remote introspection endpoint."""
    url: str
    method: str = "GET"
    post_introspection_query: bool = False
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class ProjectConfig:
    """The 'schema' section of graphql.config.json."""
    file: Optional[str] = None
    request: Optional[SchemaRequestConfig] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectConfig":
        schema = data.get("schema") or {}
        request_data = schema.get("request") or {}
        request = None
        if request_data.get("url"):
            options = request_data.get("options") or {}
            request = SchemaRequestConfig(
                url=request_data["url"],
                method=(request_data.get("method") or "GET").upper(),
                post_introspection_query=bool(request_data.get("postIntrospectionQuery", False)),
                headers=dict(options.get("headers") or {}),
            )
        return cls(file=schema.get("file"), request=request)


class ProjectSchemaLoader:
    """
    Loads the schema of the current project directory into a SchemaStore.

    Usage:
        loader = ProjectSchemaLoader(store)
        loader.set_project_dir("/path/to/project")
        await loader.refresh()      # loads, or no-op if nothing changed
    """

    def __init__(self, store: SchemaStore, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the loader.

        Args:
            store: Store that receives loaded schemas
            timeout: HTTP timeout for remote schemas, in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.store = store
        self.timeout = timeout
        self.transport = transport
        self.project_dir: Optional[Path] = None
        self._fingerprint: Optional[tuple] = None

    @property
    def config_path(self) -> Optional[Path]:
        return self.project_dir / CONFIG_FILE_NAME if self.project_dir else None

    def set_project_dir(self, project_dir: Optional[str]) -> None:
        """Switch projects; the next refresh() loads unconditionally."""
        self.project_dir = Path(project_dir) if project_dir else None
        self._fingerprint = None
        logger.info(f"Setting project dir '{project_dir}'")
        if self.project_dir is None:
            self.store.reset()

    async def refresh(self) -> bool:
        """
        Reload the schema if the project config or schema file changed.

        Returns:
            True if a load was attempted
        """
        if self.project_dir is None:
            return False
        fingerprint = self._current_fingerprint()
        if fingerprint == self._fingerprint:
            return False
        self._fingerprint = fingerprint
        await self.load()
        return True

    async def load(self) -> None:
        """Load the project schema, falling back to the builtin schema on any failure."""
        try:
            result = await self._load_schema()
        except SchemaLoadError as e:
            logger.error(str(e))
            self.store.reset()
            return
        if result is None:
            self.store.reset()
            return
        schema, source = result
        self.store.replace(schema, source)

    async def _load_schema(self) -> Optional[tuple[GraphQLSchema, str]]:
        config_path = self.config_path
        if config_path is None or not config_path.is_file():
            logger.info(f"No {CONFIG_FILE_NAME} in '{self.project_dir}', using builtin schema")
            return None

        config = ProjectConfig.from_dict(_read_json(config_path))
        if config.file:
            schema_path = self._resolve(config.file)
            return build_introspection_schema(_read_json(schema_path), str(schema_path)), str(schema_path)
        if config.request:
            data = await self._fetch(config.request)
            return build_introspection_schema(data, config.request.url), config.request.url
        logger.warning(f"'{config_path}' has no schema file or request url")
        return None

    async def _fetch(self, request: SchemaRequestConfig) -> dict[str, Any]:
        method = "POST" if request.post_introspection_query else request.method
        headers = dict(request.headers)
        body = None
        if request.post_introspection_query:
            headers["Content-Type"] = "application/json"
            body = {"query": get_introspection_query()}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, request.url, headers=headers, json=body)
        except httpx.RequestError as e:
            raise SchemaLoadError(request.url, str(e))

        if response.status_code != 200:
            raise SchemaLoadError(request.url, f"HTTP {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise SchemaLoadError(request.url, f"invalid JSON: {e}")

    def _resolve(self, file_name: str) -> Path:
        path = Path(file_name)
        if path.is_absolute() or self.project_dir is None:
            return path
        return self.project_dir / path

    def _current_fingerprint(self) -> tuple:
        config_path = self.config_path
        config_mtime = _mtime(config_path)
        schema_mtime = None
        if config_mtime is not None:
            try:
                file_name = ProjectConfig.from_dict(_read_json(config_path)).file
            except SchemaLoadError:
                file_name = None
            if file_name:
                schema_mtime = _mtime(self._resolve(file_name))
        return (str(self.project_dir), config_mtime, schema_mtime)


def build_introspection_schema(data: Any, source: str) -> GraphQLSchema:
    """
    Build a client schema from an introspection result.

    Raises:
        SchemaLoadError: if the result has no 'data' or is not a valid schema
    """
    if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
        raise SchemaLoadError(source, "introspection result has no 'data'")
    try:
        return build_client_schema(data["data"])
    except (GraphQLError, TypeError, KeyError) as e:
        raise SchemaLoadError(source, f"invalid introspection result: {e}")


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SchemaLoadError(str(path), str(e))
    if not isinstance(data, dict):
        raise SchemaLoadError(str(path), "expected a JSON object")
    return data


def _mtime(path: Optional[Path]) -> Optional[float]:
    if path is None:
        return None
    try:
        return path.stat().st_mtime
    except OSError:
        return None
